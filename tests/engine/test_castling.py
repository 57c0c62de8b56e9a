from __future__ import annotations

import pytest

from cpuchess.engine.board import Board
from cpuchess.engine.color import Color
from cpuchess.engine.move import Move, MoveType, MoveUndoError, str_to_square
from cpuchess.engine.pieces import King, Rook

BASE = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"


def _short_long(fen: str):
    board = Board.from_fen(fen)
    king = board.king(Color.WHITE)
    return king.can_castle(board, 7, 6), king.can_castle(board, 7, 2)


def test_both_sides_available() -> None:
    assert _short_long(BASE) == (True, True)


def test_wrong_targets_rejected() -> None:
    board = Board.from_fen(BASE)
    king = board.king(Color.WHITE)
    assert not king.can_castle(board, 7, 5)
    assert not king.can_castle(board, 6, 6)
    assert not king.can_castle(board, 0, 6)


def test_king_moved() -> None:
    board = Board.from_fen(BASE)
    king = board.king(Color.WHITE)
    king.move_count = 1
    assert not king.can_castle(board, 7, 6)
    assert not king.can_castle(board, 7, 2)


def test_rook_moved() -> None:
    board = Board.from_fen(BASE)
    board.get(7, 7).move_count = 1
    king = board.king(Color.WHITE)
    assert not king.can_castle(board, 7, 6)
    assert king.can_castle(board, 7, 2)


def test_rook_missing() -> None:
    assert _short_long("r3k2r/8/8/8/8/8/8/R3K3 w Qkq - 0 1") == (False, True)


def test_enemy_rook_in_corner() -> None:
    assert _short_long("r3k2r/8/8/8/8/8/8/R3K2r w Qkq - 0 1")[0] is False


@pytest.mark.parametrize(
    "fen,expected",
    [
        ("r3k2r/8/8/8/8/8/8/R3KB1R w KQkq - 0 1", (False, True)),
        ("r3k2r/8/8/8/8/8/8/RN2K2R w KQkq - 0 1", (True, False)),
        ("r3k2r/8/8/8/8/8/8/R2QK2R w KQkq - 0 1", (True, False)),
    ],
)
def test_pieces_between(fen: str, expected) -> None:
    assert _short_long(fen) == expected


def test_king_in_check() -> None:
    assert _short_long("r3k2r/8/8/8/4r3/8/8/R3K2R w KQkq - 0 1") == (False, False)


@pytest.mark.parametrize(
    "fen,expected",
    [
        ("r3k2r/8/8/8/5r2/8/8/R3K2R w KQkq - 0 1", (False, True)),  # f1 crossed
        ("r3k2r/8/8/8/6r1/8/8/R3K2R w KQkq - 0 1", (False, True)),  # g1 destination
        ("r3k2r/8/8/8/3r4/8/8/R3K2R w KQkq - 0 1", (True, False)),  # d1 crossed
        ("r3k2r/8/8/8/2r5/8/8/R3K2R w KQkq - 0 1", (True, False)),  # c1 destination
        ("r3k2r/8/8/8/1r6/8/8/R3K2R w KQkq - 0 1", (True, True)),  # b1 is not crossed
    ],
)
def test_attacked_squares(fen: str, expected) -> None:
    assert _short_long(fen) == expected


def test_short_castle_apply_and_undo() -> None:
    board = Board.from_fen(BASE)
    before = board.signature()
    king = board.king(Color.WHITE)
    move = next(m for m in king.legal_moves(board) if m.type is MoveType.WHITE_SHORT)
    assert move.label() == "0-0"

    board.make(move)
    assert board.get(7, 6) is king
    rook = board.get(7, 5)
    assert isinstance(rook, Rook)
    assert board.get(7, 7) is None and board.get(7, 4) is None
    assert king.has_castled and king.move_count == 1 and rook.move_count == 1
    assert board.side_to_move is Color.BLACK

    board.unmake()
    assert board.signature() == before
    assert board.get(7, 4) is king and board.get(7, 7) is rook
    assert not king.has_castled and rook.move_count == 0


def test_long_castle_black() -> None:
    board = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    before = board.signature()
    move = next(m for m in board.legal_moves() if m.type is MoveType.BLACK_LONG)
    assert move.label() == "0-0-0"
    with board.applied(move):
        assert isinstance(board.get(0, 2), King)
        assert isinstance(board.get(0, 3), Rook)
        assert board.get(0, 0) is None
        assert board.to_fen().split()[2] == "KQ"
    assert board.signature() == before


def test_castling_undo_on_non_castling_move_raises() -> None:
    board = Board.from_fen(BASE)
    rook = board.get(*str_to_square("a1"))
    move = Move(rook, *str_to_square("a2"))
    board.make(move)
    with pytest.raises(MoveUndoError):
        move.undo_castling(board)
    # The failed call did not disturb the board
    board.unmake()
    assert board.get(*str_to_square("a1")) is rook


def test_castling_without_rook_raises_before_mutation() -> None:
    board = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K3 w Qkq - 0 1")
    before = board.signature()
    move = Move(board.king(Color.WHITE), 7, 6, MoveType.WHITE_SHORT)
    with pytest.raises(MoveUndoError):
        move.apply(board)
    assert board.signature() == before
