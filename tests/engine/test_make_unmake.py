from __future__ import annotations

from typing import List, Tuple

import pytest

from cpuchess.engine.board import Board
from cpuchess.engine.move import MoveType

# One position per move type: quiet/capture/castling, en passant, promotions
POSITIONS = [
    "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
    "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
    "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R b KQkq - 0 1",
    "4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1",
    "1r5k/P7/8/8/8/8/8/K7 w - - 0 1",
    "k7/8/8/8/8/8/7p/K5R1 b - - 0 1",
]


def _snapshot(board: Board) -> Tuple:
    placement: List[Tuple] = []
    for row in board.grid:
        for p in row:
            placement.append((id(p), p.row, p.col, p.move_count) if p else None)
    return board.signature(), tuple(placement)


def _walk(board: Board, depth: int, seen_types: set) -> None:
    if depth == 0:
        return
    for move in board.legal_moves():
        seen_types.add(move.type)
        before = _snapshot(board)
        with board.applied(move):
            _walk(board, depth - 1, seen_types)
        assert _snapshot(board) == before, repr(move)


@pytest.mark.parametrize("fen", POSITIONS)
def test_make_unmake_restores_everything(fen: str) -> None:
    board = Board.from_fen(fen)
    seen: set = set()
    _walk(board, 2, seen)
    assert board.history == []


def test_every_move_type_is_exercised() -> None:
    seen: set = set()
    for fen in POSITIONS:
        _walk(Board.from_fen(fen), 1, seen)
    assert seen == set(MoveType)


def test_applied_undoes_on_exception() -> None:
    board = Board.startpos()
    before = board.signature()
    move = board.legal_moves()[0]
    with pytest.raises(RuntimeError):
        with board.applied(move):
            raise RuntimeError("boom")
    assert board.signature() == before
    assert board.history == []


def test_unmake_without_history_raises() -> None:
    with pytest.raises(ValueError, match="no move to undo"):
        Board.startpos().unmake()
