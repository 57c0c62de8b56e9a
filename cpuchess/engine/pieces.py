from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Dict, Iterator, List, Optional, Tuple, Type

from .color import Color
from .move import PROMOTION_PIECES, Move, MoveType, Square, square_to_str

if TYPE_CHECKING:
    from .board import Board


ORTHOGONAL: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONAL: Tuple[Tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)
KING_OFFSETS: Tuple[Tuple[int, int], ...] = DIAGONAL + ORTHOGONAL


def _inbounds(r: int, c: int) -> bool:
    return 0 <= r < 8 and 0 <= c < 8


class Piece:
    """Base class for the six chess piece variants.

    A piece knows its color, its current square and how many times it has
    moved. The move counter doubles as the "has moved" flag so that undo can
    decrement it instead of guessing a prior boolean.

    Subclasses provide the movement pattern through :meth:`targets` and
    :meth:`reaches`; everything else (attack/defence queries, legality
    filtering) is shared.
    """

    kind: ClassVar[str] = "?"
    value: ClassVar[int] = 0

    def __init__(self, color: Color, row: int = -1, col: int = -1, move_count: int = 0) -> None:
        self.color = color
        self.row = row
        self.col = col
        self.move_count = move_count

    def __repr__(self) -> str:
        where = square_to_str(self.row, self.col) if _inbounds(self.row, self.col) else "-"
        return f"{type(self).__name__}({self.color.name}, {where}, moved={self.move_count})"

    @property
    def square(self) -> Square:
        return (self.row, self.col)

    def symbol(self) -> str:
        """Upper-case letter for White, lower-case for Black."""
        return self.kind if self.color is Color.WHITE else self.kind.lower()

    # --- movement pattern ---
    def targets(self, board: "Board") -> Iterator[Square]:
        """Yield every square the movement pattern reaches, regardless of occupant."""
        raise NotImplementedError

    def reaches(self, board: "Board", r: int, c: int) -> bool:
        return (r, c) in set(self.targets(board))

    def is_attacking(self, board: "Board", r: int, c: int) -> bool:
        """Pattern reaches (r, c) and it is empty or holds an opposing piece.

        Pins and own-king safety are ignored.
        """
        if not _inbounds(r, c) or not self.reaches(board, r, c):
            return False
        occupant = board.get(r, c)
        return occupant is None or occupant.color is not self.color

    def is_defending(self, board: "Board", r: int, c: int) -> bool:
        """Pattern reaches (r, c) and it is empty or holds a same-color piece."""
        if not _inbounds(r, c) or not self.reaches(board, r, c):
            return False
        occupant = board.get(r, c)
        return occupant is None or occupant.color is self.color

    # --- moves ---
    def pseudo_moves(self, board: "Board") -> Iterator[Move]:
        for r, c in self.targets(board):
            occupant = board.get(r, c)
            if occupant is None or occupant.color is not self.color:
                yield Move(self, r, c)

    def pseudo_move_to(self, board: "Board", r: int, c: int) -> Optional[Move]:
        if self.is_attacking(board, r, c):
            return Move(self, r, c)
        return None

    def leaves_king_in_check(self, board: "Board", move: Move) -> bool:
        """Simulate ``move`` and report whether the mover's king ends up attacked."""
        move.apply(board)
        try:
            return board.in_check(self.color)
        finally:
            move.undo(board)

    def can_move(self, board: "Board", r: int, c: int) -> bool:
        if not _inbounds(r, c) or (r, c) == (self.row, self.col):
            return False
        move = self.pseudo_move_to(board, r, c)
        return move is not None and not self.leaves_king_in_check(board, move)

    def iter_legal_moves(self, board: "Board") -> Iterator[Move]:
        for move in list(self.pseudo_moves(board)):
            if not self.leaves_king_in_check(board, move):
                yield move

    def legal_moves(self, board: "Board") -> List[Move]:
        return list(self.iter_legal_moves(board))

    # --- misc ---
    def evaluate(self, board: "Board", phase: Optional[int] = None) -> int:
        raise NotImplementedError

    def clone(self) -> "Piece":
        return type(self)(self.color, self.row, self.col, self.move_count)


class _Slider(Piece):
    directions: ClassVar[Tuple[Tuple[int, int], ...]] = ()

    def targets(self, board: "Board") -> Iterator[Square]:
        for dr, dc in self.directions:
            r, c = self.row + dr, self.col + dc
            while _inbounds(r, c):
                yield r, c
                if board.get(r, c) is not None:
                    break
                r += dr
                c += dc

    def reaches(self, board: "Board", r: int, c: int) -> bool:
        dr = r - self.row
        dc = c - self.col
        if dr == 0 and dc == 0:
            return False
        if dr != 0 and dc != 0 and abs(dr) != abs(dc):
            return False
        step = ((dr > 0) - (dr < 0), (dc > 0) - (dc < 0))
        if step not in self.directions:
            return False
        tr, tc = self.row + step[0], self.col + step[1]
        while (tr, tc) != (r, c):
            if board.get(tr, tc) is not None:
                return False
            tr += step[0]
            tc += step[1]
        return True


class Pawn(Piece):
    kind = "P"
    value = 100

    @property
    def direction(self) -> int:
        return -1 if self.color is Color.WHITE else 1

    @property
    def start_row(self) -> int:
        return 6 if self.color is Color.WHITE else 1

    @property
    def last_row(self) -> int:
        return 0 if self.color is Color.WHITE else 7

    def targets(self, board: "Board") -> Iterator[Square]:
        r = self.row + self.direction
        for c in (self.col - 1, self.col + 1):
            if _inbounds(r, c):
                yield r, c

    def reaches(self, board: "Board", r: int, c: int) -> bool:
        return r == self.row + self.direction and abs(c - self.col) == 1

    def _advance(self, r: int, c: int) -> Iterator[Move]:
        if r == self.last_row:
            for promo in PROMOTION_PIECES:
                yield Move(self, r, c, MoveType.PAWN_PROMOTION, promo)
        else:
            yield Move(self, r, c)

    def pseudo_moves(self, board: "Board") -> Iterator[Move]:
        r = self.row + self.direction
        if not 0 <= r < 8:
            return
        if board.is_empty(r, self.col):
            yield from self._advance(r, self.col)
            r2 = r + self.direction
            if self.row == self.start_row and board.is_empty(r2, self.col):
                yield Move(self, r2, self.col)
        for c in (self.col - 1, self.col + 1):
            if not 0 <= c < 8:
                continue
            target = board.get(r, c)
            if target is not None:
                if target.color is not self.color:
                    yield from self._advance(r, c)
            elif board.ep_square == (r, c):
                victim = board.get(self.row, c)
                if isinstance(victim, Pawn) and victim.color is not self.color:
                    yield Move(self, r, c, MoveType.EN_PASSANT)

    def pseudo_move_to(self, board: "Board", r: int, c: int) -> Optional[Move]:
        for move in self.pseudo_moves(board):
            if move.row == r and move.col == c:
                return move
        return None

    def promote(self, letter: str) -> Piece:
        """Build the replacement piece for a promotion; the pawn itself is left untouched."""
        cls = PIECE_TYPES[letter.upper()]
        return cls(self.color, move_count=self.move_count + 1)

    def evaluate(self, board: "Board", phase: Optional[int] = None) -> int:
        from ..eval import pawn_score

        return pawn_score(board, self, phase)


class Knight(Piece):
    kind = "N"
    value = 320

    def targets(self, board: "Board") -> Iterator[Square]:
        for dr, dc in KNIGHT_OFFSETS:
            r, c = self.row + dr, self.col + dc
            if _inbounds(r, c):
                yield r, c

    def reaches(self, board: "Board", r: int, c: int) -> bool:
        return (r - self.row, c - self.col) in KNIGHT_OFFSETS

    def evaluate(self, board: "Board", phase: Optional[int] = None) -> int:
        from ..eval import knight_score

        return knight_score(board, self, phase)


class Bishop(_Slider):
    kind = "B"
    value = 330
    directions = DIAGONAL

    def evaluate(self, board: "Board", phase: Optional[int] = None) -> int:
        from ..eval import bishop_score

        return bishop_score(board, self, phase)


class Rook(_Slider):
    kind = "R"
    value = 500
    directions = ORTHOGONAL

    def evaluate(self, board: "Board", phase: Optional[int] = None) -> int:
        from ..eval import rook_score

        return rook_score(board, self, phase)


class Queen(_Slider):
    kind = "Q"
    value = 900
    directions = DIAGONAL + ORTHOGONAL

    def evaluate(self, board: "Board", phase: Optional[int] = None) -> int:
        from ..eval import queen_score

        return queen_score(board, self, phase)


# king destination col -> (rook col, squares that must be empty, squares the king crosses)
_CASTLE_PATHS: Dict[int, Tuple[int, Tuple[int, ...], Tuple[int, ...]]] = {
    6: (7, (5, 6), (5, 6)),
    2: (0, (1, 2, 3), (3, 2)),
}


class King(Piece):
    kind = "K"
    value = 0

    def __init__(
        self,
        color: Color,
        row: int = -1,
        col: int = -1,
        move_count: int = 0,
        has_castled: bool = False,
    ) -> None:
        super().__init__(color, row, col, move_count)
        self.has_castled = has_castled
        self.home_row = 7 if color is Color.WHITE else 0

    def targets(self, board: "Board") -> Iterator[Square]:
        for dr, dc in KING_OFFSETS:
            r, c = self.row + dr, self.col + dc
            if _inbounds(r, c):
                yield r, c

    def reaches(self, board: "Board", r: int, c: int) -> bool:
        return max(abs(r - self.row), abs(c - self.col)) == 1

    def is_in_check(self, board: "Board") -> bool:
        return board.is_attacked(self.row, self.col, self.color.opp())

    def castle_type(self, c: int) -> MoveType:
        if self.color is Color.WHITE:
            return MoveType.WHITE_SHORT if c == 6 else MoveType.WHITE_LONG
        return MoveType.BLACK_SHORT if c == 6 else MoveType.BLACK_LONG

    def can_castle(self, board: "Board", r: int, c: int) -> bool:
        """Can this king castle to (r, c)?

        Requires: king unmoved on its home square and not in check, target on
        the home row at file g (short) or c (long), the corner rook unmoved,
        every square between king and rook empty, and every square the king
        crosses (destination included) unattacked.
        """
        if self.move_count or self.row != self.home_row or self.col != 4 or r != self.home_row:
            return False
        path = _CASTLE_PATHS.get(c)
        if path is None:
            return False
        rook_col, between, crossed = path
        rook = board.get(self.home_row, rook_col)
        if not isinstance(rook, Rook) or rook.color is not self.color or rook.move_count:
            return False
        if any(not board.is_empty(self.home_row, col) for col in between):
            return False
        if self.is_in_check(board):
            return False
        opp = self.color.opp()
        return not any(board.is_attacked(self.home_row, col, opp) for col in crossed)

    def pseudo_moves(self, board: "Board") -> Iterator[Move]:
        yield from super().pseudo_moves(board)
        for c in (6, 2):
            if self.can_castle(board, self.home_row, c):
                yield Move(self, self.home_row, c, self.castle_type(c))

    def pseudo_move_to(self, board: "Board", r: int, c: int) -> Optional[Move]:
        if self.reaches(board, r, c):
            return super().pseudo_move_to(board, r, c)
        if self.can_castle(board, r, c):
            return Move(self, r, c, self.castle_type(c))
        return None

    def evaluate(self, board: "Board", phase: Optional[int] = None) -> int:
        from ..eval import king_score

        return king_score(board, self, phase)

    def clone(self) -> "King":
        return King(self.color, self.row, self.col, self.move_count, self.has_castled)


PIECE_TYPES: Dict[str, Type[Piece]] = {
    cls.kind: cls for cls in (Pawn, Knight, Bishop, Rook, Queen, King)
}


def piece_from_char(ch: str) -> Piece:
    """Build a piece from a FEN letter (upper case White, lower case Black).

    Raises:
        ValueError: If ``ch`` is not a piece letter.
    """
    cls = PIECE_TYPES.get(ch.upper())
    if cls is None or len(ch) != 1:
        raise ValueError(f"invalid piece in FEN: {ch!r}")
    return cls(Color.WHITE if ch.isupper() else Color.BLACK)
