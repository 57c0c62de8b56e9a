#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import platform
import sys
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

# Ensure repo root is importable when running directly
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from cpuchess.config import Settings
from cpuchess.engine.board import Board
from cpuchess.search.service import SearchService


@dataclass
class BenchItem:
    id: str
    name: str
    fen: str
    depth: Optional[int] = None


BUILTIN_POSITIONS: List[BenchItem] = [
    BenchItem("startpos", "Start position", "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"),
    BenchItem(
        "kiwipete",
        "Kiwipete",
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
        depth=2,
    ),
    BenchItem("italian", "Italian game", "r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R b KQkq - 3 3"),
    BenchItem("kq_vs_k", "Queen endgame", "7k/8/5KQ1/8/8/8/8/8 w - - 0 1"),
]


def load_positions(path: str) -> List[BenchItem]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [
        BenchItem(
            id=str(obj.get("id", obj.get("name", "pos"))),
            name=str(obj.get("name", "Unnamed")),
            fen=str(obj["fen"]),
            depth=int(obj["depth"]) if obj.get("depth") is not None else None,
        )
        for obj in data.get("positions", [])
    ]


def bench_position(svc: SearchService, item: BenchItem, depth: int, iterations: int) -> Dict[str, Any]:
    board = Board.from_fen(item.fen)
    eff_depth = item.depth or depth
    total_time = 0
    total_nodes = 0
    res = None
    for _ in range(max(1, iterations)):
        res = svc.search(board, depth=eff_depth)
        total_time += res.time_ms
        total_nodes += res.nodes
    assert res is not None

    avg_time = total_time // max(1, iterations)
    avg_nodes = total_nodes // max(1, iterations)
    return {
        "id": item.id,
        "name": item.name,
        "fen": item.fen,
        "depth": res.depth,
        "source": res.source,
        "best_move": res.best_move.label() if res.best_move else None,
        "score": res.score,
        "time_ms": avg_time,
        "nodes": avg_nodes,
        "nps": int(avg_nodes * 1000 / avg_time) if avg_time > 0 else 0,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the CPU player over a positions suite")
    parser.add_argument("--positions", default=None, help="Path to positions.json (default: built-in)")
    parser.add_argument("--depth", type=int, default=3, help="Search depth per position")
    parser.add_argument("--iterations", type=int, default=1, help="Repeat runs per position and average")
    parser.add_argument("--out", type=str, default=None, help="Write JSON results to file path")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    args = parser.parse_args()

    items = load_positions(args.positions) if args.positions else BUILTIN_POSITIONS
    if not items:
        raise SystemExit("No positions found in positions file")

    svc = SearchService(Settings(max_search_depth=max(args.depth, 1), opening_replies=False))
    t0 = time.perf_counter()
    results = []
    for idx, item in enumerate(items, start=1):
        sys.stderr.write(f"[{idx}/{len(items)}] {item.id}\n")
        results.append(bench_position(svc, item, args.depth, args.iterations))
    dt_ms = int((time.perf_counter() - t0) * 1000)

    total_nodes = sum(r["nodes"] for r in results)
    payload = {
        "meta": {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "python": sys.version.split()[0],
            "platform": platform.platform(),
            "depth": args.depth,
            "iterations": args.iterations,
        },
        "results": results,
        "summary": {
            "positions": len(results),
            "total_time_ms": dt_ms,
            "total_nodes": total_nodes,
            "overall_nps": int(total_nodes * 1000 / dt_ms) if dt_ms > 0 else 0,
        },
    }
    text = json.dumps(payload, indent=2 if args.pretty else None)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(text)
        print(args.out)
    else:
        print(text)


if __name__ == "__main__":
    main()
