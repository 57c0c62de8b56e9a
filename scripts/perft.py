#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
import time

# Allow running this script directly via `python scripts/perft.py`
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from cpuchess.engine.board import STARTPOS_FEN, Board
from cpuchess.engine.move import square_to_str
from cpuchess.engine.perft import perft


def divide(board: Board, depth: int) -> int:
    """Print the perft count below each root move and return the total."""
    total = 0
    for move in board.legal_moves():
        with board.applied(move):
            nodes = perft(board, depth - 1)
        total += nodes
        print(f"{square_to_str(*move.origin)}{square_to_str(*move.destination)} {move.label()}: {nodes}")
    return total


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft on a given FEN and depth")
    parser.add_argument("--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)")
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument("--divide", action="store_true", help="Print per-root-move counts")
    args = parser.parse_args()

    board = Board.from_fen(args.fen)
    start = time.perf_counter()
    if args.divide and args.depth > 0:
        nodes = divide(board, args.depth)
    else:
        nodes = perft(board, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
