"""Forced-mate solver.

Exhaustive attacker/defender search restricted to lines that end in
checkmate: every attacker node needs one move that works, every defender
node needs all replies to fail.
"""

from __future__ import annotations

from typing import List, Optional

from cpuchess.engine.board import Board
from cpuchess.engine.color import Color
from cpuchess.engine.move import Move
from cpuchess.search.ordering import order_moves


def find_forced_mate(board: Board, color: Color, max_depth: int) -> List[Move]:
    """Find a line in which ``color`` forces checkmate within ``max_depth`` plies.

    Mates in 1, 2, ... moves are tried in turn, so the line returned is the
    first one found at the smallest depth that has any.

    Args:
        board (Board): Position to search; restored before returning.
        color (Color): The attacking side; it moves first.
        max_depth (int): Ply budget, counting both sides' moves.

    Returns:
        List[Move]: Attacker and defender moves alternating, ending with the
            mating move, or an empty list when no forced mate fits the budget.
    """
    for plies in range(1, max_depth + 1, 2):
        line = _attack(board, color, plies)
        if line is not None:
            return line
    return []


def _attack(board: Board, color: Color, plies: int) -> Optional[List[Move]]:
    opp = color.opp()
    for move in order_moves(board, board.legal_moves(color)):
        with board.applied(move):
            if board.is_checkmate(opp):
                return [move]
            if plies <= 1:
                continue
            rest = _defend(board, color, plies - 1)
        if rest is not None:
            return [move] + rest
    return None


def _defend(board: Board, attacker: Color, plies: int) -> Optional[List[Move]]:
    defender = attacker.opp()
    replies = board.legal_moves(defender)
    if not replies:
        # Stalemate; checkmate was caught by the attacker already
        return None
    longest: Optional[List[Move]] = None
    for reply in order_moves(board, replies):
        with board.applied(reply):
            line = _attack(board, attacker, plies - 1)
        if line is None:
            return None
        if longest is None or len(line) + 1 > len(longest):
            longest = [reply] + line
    return longest
