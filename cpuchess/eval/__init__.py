"""Evaluation heuristics and related utilities.

Pure and deterministic. Every per-piece score is from the owner's point of
view; :func:`evaluate` folds them into a score for one color.
"""

from __future__ import annotations

from typing import Final, List, Optional

from cpuchess.engine.board import Board
from cpuchess.engine.color import Color
from cpuchess.engine.pieces import Bishop, King, Knight, Pawn, Piece, Queen, Rook


# Material values in centipawns
P_VAL: Final = Pawn.value
N_VAL: Final = Knight.value
B_VAL: Final = Bishop.value
R_VAL: Final = Rook.value
Q_VAL: Final = Queen.value

MATE_SCORE: Final = 1_000_000
DRAW_SCORE: Final = 0
TEMPO_BONUS: Final = 10

# Heuristic weights (centipawns)
MOB_N: Final = 4
MOB_B: Final = 4
MOB_R: Final = 2
MOB_Q: Final = 1
DEFENDED_BONUS: Final = 1  # per own piece covered
BISHOP_PAIR_HALF: Final = 15  # granted to each bishop of a pair
ROOK_SEMIOPEN_BONUS: Final = 8
ROOK_OPEN_BONUS: Final = 14
ROOK_SEVENTH_BONUS: Final = 20
QUEEN_EARLY_PENALTY: Final = 8  # per undeveloped own minor piece
KING_SHIELD_BONUS: Final = 6  # per pawn in king shield ring
CASTLED_BONUS: Final = 25
DOUBLED_PAWN_PENALTY: Final = 12
ISOLATED_PAWN_PENALTY: Final = 10
PAWN_ADVANCE_EG: Final = 8
PASSED_PAWN_BONUS: Final = (0, 10, 15, 25, 45, 70, 110, 0)  # by ranks advanced

PHASE_TOTAL: Final = 24

# Piece-square tables from White's point of view, rank 8 first, so a White
# piece on (row, col) reads index row * 8 + col; Black mirrors the row.
# fmt: off
PSQT_P: Final = (
     0,   0,   0,   0,   0,   0,   0,   0,
    50,  50,  50,  50,  50,  50,  50,  50,
    10,  10,  20,  30,  30,  20,  10,  10,
     5,   5,  10,  25,  25,  10,   5,   5,
     0,   0,   0,  20,  20,   0,   0,   0,
     5,  -5, -10,   0,   0, -10,  -5,   5,
     5,  10,  10, -20, -20,  10,  10,   5,
     0,   0,   0,   0,   0,   0,   0,   0,
)

PSQT_N: Final = (
   -50, -40, -30, -30, -30, -30, -40, -50,
   -40, -20,   0,   5,   5,   0, -20, -40,
   -30,   5,  10,  15,  15,  10,   5, -30,
   -30,   0,  15,  20,  20,  15,   0, -30,
   -30,   5,  15,  20,  20,  15,   5, -30,
   -30,   0,  10,  15,  15,  10,   0, -30,
   -40, -20,   0,   0,   0,   0, -20, -40,
   -50, -40, -30, -30, -30, -30, -40, -50,
)

PSQT_B: Final = (
   -20, -10, -10, -10, -10, -10, -10, -20,
   -10,   0,   0,   0,   0,   0,   0, -10,
   -10,   0,   5,  10,  10,   5,   0, -10,
   -10,   5,   5,  10,  10,   5,   5, -10,
   -10,   0,  10,  10,  10,  10,   0, -10,
   -10,  10,  10,  10,  10,  10,  10, -10,
   -10,   5,   0,   0,   0,   0,   5, -10,
   -20, -10, -10, -10, -10, -10, -10, -20,
)

PSQT_K_MG: Final = (
   -30, -40, -40, -50, -50, -40, -40, -30,
   -30, -40, -40, -50, -50, -40, -40, -30,
   -30, -40, -40, -50, -50, -40, -40, -30,
   -30, -40, -40, -50, -50, -40, -40, -30,
   -20, -30, -30, -40, -40, -30, -30, -20,
   -10, -20, -20, -20, -20, -20, -20, -10,
    20,  20,   0,   0,   0,   0,  20,  20,
    20,  30,  10,   0,   0,  10,  30,  20,
)

PSQT_K_EG: Final = (
   -50, -30, -30, -30, -30, -30, -30, -50,
   -30, -10,   0,   0,   0,   0, -10, -30,
   -30,   0,  10,  15,  15,  10,   0, -30,
   -30,   0,  15,  20,  20,  15,   0, -30,
   -30,   0,  15,  20,  20,  15,   0, -30,
   -30,   0,  10,  15,  15,  10,   0, -30,
   -30, -10,   0,   0,   0,   0, -10, -30,
   -50, -30, -30, -30, -30, -30, -30, -50,
)
# fmt: on


def _psqt_index(piece: Piece) -> int:
    row = piece.row if piece.color is Color.WHITE else 7 - piece.row
    return row * 8 + piece.col


def _ranks_advanced(pawn: Pawn) -> int:
    return pawn.start_row - pawn.row if pawn.color is Color.WHITE else pawn.row - pawn.start_row


def game_phase(board: Board) -> int:
    """Return the middlegame weight on a 0..128 scale (128 = full middlegame)."""
    units = 0
    for p in board.all_pieces():
        if isinstance(p, (Knight, Bishop)):
            units += 1
        elif isinstance(p, Rook):
            units += 2
        elif isinstance(p, Queen):
            units += 4
    return max(0, min(128, (units * 128) // PHASE_TOTAL))


def _phase(board: Board, phase: Optional[int]) -> int:
    return game_phase(board) if phase is None else phase


def _mobility(board: Board, piece: Piece) -> tuple[int, int]:
    """Count (attacked-or-free squares, defended own pieces) in the piece's pattern."""
    attacks = 0
    defends = 0
    for r, c in piece.targets(board):
        if piece.is_attacking(board, r, c):
            attacks += 1
        elif piece.is_defending(board, r, c):
            defends += 1
    return attacks, defends


def _file_pawns(board: Board, col: int, color: Color) -> List[Pawn]:
    out: List[Pawn] = []
    if not 0 <= col < 8:
        return out
    for row in range(8):
        p = board.grid[row][col]
        if isinstance(p, Pawn) and p.color is color:
            out.append(p)
    return out


def _is_passed(board: Board, pawn: Pawn) -> bool:
    opp = pawn.color.opp()
    for col in (pawn.col - 1, pawn.col, pawn.col + 1):
        for p in _file_pawns(board, col, opp):
            if (p.row - pawn.row) * pawn.direction > 0:
                return False
    return True


def pawn_score(board: Board, pawn: Pawn, phase: Optional[int] = None) -> int:
    mg = _phase(board, phase)
    eg = 128 - mg
    advanced = _ranks_advanced(pawn)
    score = P_VAL + (mg * PSQT_P[_psqt_index(pawn)] + eg * advanced * PAWN_ADVANCE_EG) // 128
    if len(_file_pawns(board, pawn.col, pawn.color)) > 1:
        score -= DOUBLED_PAWN_PENALTY
    if not _file_pawns(board, pawn.col - 1, pawn.color) and not _file_pawns(
        board, pawn.col + 1, pawn.color
    ):
        score -= ISOLATED_PAWN_PENALTY
    if _is_passed(board, pawn):
        score += PASSED_PAWN_BONUS[max(0, min(7, advanced + 1))]
    return score


def knight_score(board: Board, knight: Knight, phase: Optional[int] = None) -> int:
    attacks, defends = _mobility(board, knight)
    return N_VAL + PSQT_N[_psqt_index(knight)] + attacks * MOB_N + defends * DEFENDED_BONUS


def bishop_score(board: Board, bishop: Bishop, phase: Optional[int] = None) -> int:
    attacks, defends = _mobility(board, bishop)
    score = B_VAL + PSQT_B[_psqt_index(bishop)] + attacks * MOB_B + defends * DEFENDED_BONUS
    if any(isinstance(p, Bishop) and p is not bishop for p in board.pieces(bishop.color)):
        score += BISHOP_PAIR_HALF
    return score


def rook_score(board: Board, rook: Rook, phase: Optional[int] = None) -> int:
    attacks, defends = _mobility(board, rook)
    score = R_VAL + attacks * MOB_R + defends * DEFENDED_BONUS
    own = _file_pawns(board, rook.col, rook.color)
    theirs = _file_pawns(board, rook.col, rook.color.opp())
    if not own and not theirs:
        score += ROOK_OPEN_BONUS
    elif not own:
        score += ROOK_SEMIOPEN_BONUS
    seventh = 1 if rook.color is Color.WHITE else 6
    if rook.row == seventh:
        score += ROOK_SEVENTH_BONUS
    return score


def queen_score(board: Board, queen: Queen, phase: Optional[int] = None) -> int:
    mg = _phase(board, phase)
    attacks, defends = _mobility(board, queen)
    score = Q_VAL + attacks * MOB_Q + defends * DEFENDED_BONUS
    if queen.move_count and mg >= 96:
        home = 7 if queen.color is Color.WHITE else 0
        undeveloped = sum(
            1
            for p in board.pieces(queen.color)
            if isinstance(p, (Knight, Bishop)) and p.row == home and not p.move_count
        )
        score -= undeveloped * QUEEN_EARLY_PENALTY
    return score


def _king_shield_pawns(board: Board, king: King) -> int:
    forward = -1 if king.color is Color.WHITE else 1
    total = 0
    for dc in (-1, 0, 1):
        for dr in (1, 2):
            p = board.get(king.row + forward * dr, king.col + dc)
            if isinstance(p, Pawn) and p.color is king.color:
                total += 1
    return total


def king_score(board: Board, king: King, phase: Optional[int] = None) -> int:
    """King safety in the middlegame blended with centralization in the endgame."""
    mg = _phase(board, phase)
    eg = 128 - mg
    idx = _psqt_index(king)
    shelter = PSQT_K_MG[idx] + _king_shield_pawns(board, king) * KING_SHIELD_BONUS
    if king.has_castled:
        shelter += CASTLED_BONUS
    return (mg * shelter + eg * PSQT_K_EG[idx]) // 128


def evaluate(board: Board, color: Color) -> int:
    """Return a static evaluation in centipawns from ``color``'s point of view.

    Sums the per-piece scores of ``color`` minus the opponent's and adds a
    tempo bonus when ``color`` is on move, so ``evaluate(b, c)`` is not
    exactly ``-evaluate(b, c.opp())``; negamax callers negate child scores
    themselves. A side to move without legal moves is scored as checkmate
    (``-MATE_SCORE`` for the mated side) or stalemate (``DRAW_SCORE``).
    """
    stm = board.side_to_move
    if not board.has_legal_moves(stm):
        if board.in_check(stm):
            return -MATE_SCORE if stm is color else MATE_SCORE
        return DRAW_SCORE

    phase = game_phase(board)
    score = 0
    for piece in board.all_pieces():
        value = piece.evaluate(board, phase)
        score += value if piece.color is color else -value
    if stm is color:
        score += TEMPO_BONUS
    return score


def queen_close_to_king(board: Board, color: Color, distance: int = 2) -> bool:
    """Return True if a queen of ``color`` is within ``distance`` king steps of the enemy king."""
    king = board.king(color.opp())
    return any(
        isinstance(p, Queen) and max(abs(p.row - king.row), abs(p.col - king.col)) <= distance
        for p in board.pieces(color)
    )
