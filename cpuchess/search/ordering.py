from __future__ import annotations

from typing import List, Sequence

from cpuchess.engine.board import Board
from cpuchess.engine.move import Move, MoveType
from cpuchess.engine.pieces import PIECE_TYPES, Pawn

# Sort buckets; within the capture bucket MVV-LVA refines the order.
PROMOTION_BASE = 2_000_000
CAPTURE_BASE = 1_000_000
CASTLING_BONUS = 50
KING_VALUE = 20_000


def _victim_value(board: Board, move: Move) -> int:
    if move.type is MoveType.EN_PASSANT:
        return Pawn.value
    target = board.get(move.row, move.col)
    if target is None or target.color is move.piece.color:
        return 0
    return target.value or KING_VALUE


def move_score(board: Board, move: Move) -> int:
    """Heuristic priority of ``move`` on ``board``; higher is searched first."""
    score = 0
    if move.type is MoveType.PAWN_PROMOTION:
        score += PROMOTION_BASE + PIECE_TYPES[(move.promotion or "q").upper()].value
    victim = _victim_value(board, move)
    if victim:
        attacker = move.piece.value or KING_VALUE
        score += CAPTURE_BASE + victim * 10 - attacker // 10
    elif move.type.is_castling():
        score += CASTLING_BONUS
    return score


def order_moves(board: Board, moves: Sequence[Move]) -> List[Move]:
    """Return ``moves`` reordered so promotions and captures come first.

    The result is a permutation of the input; the sort is stable, so equally
    scored moves keep their generation order and the output depends only on
    ``board`` and ``moves``.
    """
    return sorted(moves, key=lambda m: move_score(board, m), reverse=True)
