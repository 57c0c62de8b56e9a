from __future__ import annotations

from cpuchess.engine.board import Board
from cpuchess.engine.color import Color
from cpuchess.engine.move import str_to_square
from cpuchess.eval import (
    BISHOP_PAIR_HALF,
    CASTLED_BONUS,
    ROOK_SEVENTH_BONUS,
    _mobility,
    bishop_score,
    king_score,
    knight_score,
    pawn_score,
    queen_score,
    rook_score,
)


def _at(board: Board, name: str):
    return board.get(*str_to_square(name))


def test_knight_prefers_center() -> None:
    center = Board.from_fen("4k3/8/8/8/3N4/8/8/4K3 w - - 0 1")
    corner = Board.from_fen("4k3/8/8/8/8/8/8/N3K3 w - - 0 1")
    assert knight_score(center, _at(center, "d4")) > knight_score(corner, _at(corner, "a1"))


def test_bishop_pair_bonus() -> None:
    pair = Board.from_fen("4k3/8/8/8/8/8/8/2B1KB2 w - - 0 1")
    single = Board.from_fen("4k3/8/8/8/8/8/8/2B1K3 w - - 0 1")
    diff = bishop_score(pair, _at(pair, "c1")) - bishop_score(single, _at(single, "c1"))
    assert diff == BISHOP_PAIR_HALF


def test_rook_open_file_and_seventh_rank() -> None:
    closed = Board.from_fen("4k3/p7/8/8/8/8/P7/R3K3 w - - 0 1")
    opened = Board.from_fen("4k3/1p6/8/8/8/8/1P6/R3K3 w - - 0 1")
    assert rook_score(opened, _at(opened, "a1")) > rook_score(closed, _at(closed, "a1"))

    seventh = Board.from_fen("4k3/R7/8/8/8/8/8/4K3 w - - 0 1")
    sixth = Board.from_fen("4k3/8/R7/8/8/8/8/4K3 w - - 0 1")
    assert (
        rook_score(seventh, _at(seventh, "a7")) - rook_score(sixth, _at(sixth, "a6"))
        >= ROOK_SEVENTH_BONUS - 2
    )


def test_passed_pawn_beats_blocked_pawn() -> None:
    passed = Board.from_fen("4k3/8/8/3P4/8/8/8/4K3 w - - 0 1")
    blocked = Board.from_fen("4k3/3p4/8/3P4/8/8/8/4K3 w - - 0 1")
    assert pawn_score(passed, _at(passed, "d5")) > pawn_score(blocked, _at(blocked, "d5"))


def test_doubled_pawns_penalized() -> None:
    doubled = Board.from_fen("4k3/8/8/8/8/3P4/3P4/4K3 w - - 0 1")
    single = Board.from_fen("4k3/8/8/8/8/8/3P4/4K3 w - - 0 1")
    assert pawn_score(doubled, _at(doubled, "d2")) < pawn_score(single, _at(single, "d2"))


def test_early_queen_penalty() -> None:
    board = Board.startpos()
    queen = _at(board, "d1")
    resting = queen_score(board, queen)
    queen.move_count = 1
    assert queen_score(board, queen) < resting


def test_castled_king_bonus() -> None:
    board = Board.startpos()
    king = board.king(Color.WHITE)
    plain = king_score(board, king)
    king.has_castled = True
    assert king_score(board, king) == plain + CASTLED_BONUS


def test_king_centralizes_in_endgame() -> None:
    center = Board.from_fen("7k/8/8/8/4K3/8/8/8 w - - 0 1")
    edge = Board.from_fen("7k/8/8/8/8/8/8/K7 w - - 0 1")
    assert king_score(center, center.king(Color.WHITE)) > king_score(edge, edge.king(Color.WHITE))


def test_mobility_counts_attacks_and_defended_pieces() -> None:
    board = Board.startpos()
    # b1 knight: a3 and c3 are free, d2 holds an own pawn
    assert _mobility(board, _at(board, "b1")) == (2, 1)
    # a1 rook is boxed in by own pieces on a2 and b1
    assert _mobility(board, _at(board, "a1")) == (0, 2)
