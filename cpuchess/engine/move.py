from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Tuple

if TYPE_CHECKING:
    from .board import Board
    from .pieces import Piece


PROMOTION_PIECES = ("q", "r", "b", "n")

Square = Tuple[int, int]


class MoveType(Enum):
    NORMAL = "normal"
    WHITE_SHORT = "white_short"
    WHITE_LONG = "white_long"
    BLACK_SHORT = "black_short"
    BLACK_LONG = "black_long"
    PAWN_PROMOTION = "pawn_promotion"
    EN_PASSANT = "en_passant"

    def is_castling(self) -> bool:
        return self in CASTLING_ROOKS


# castling type -> (home row, rook origin col, rook destination col)
CASTLING_ROOKS: Dict[MoveType, Tuple[int, int, int]] = {
    MoveType.WHITE_SHORT: (7, 7, 5),
    MoveType.WHITE_LONG: (7, 0, 3),
    MoveType.BLACK_SHORT: (0, 7, 5),
    MoveType.BLACK_LONG: (0, 0, 3),
}


class MoveUndoError(RuntimeError):
    """Raised when an undo record does not match the move being reverted."""


class Move:
    """A single state transition on a :class:`Board`.

    The origin square is captured when the move is constructed, before any
    mutation, so undo can restore to it even though the piece's live position
    changes while the search recurses.

    Attributes:
        piece (Piece): The moving piece (the king for castling moves).
        start_row (int): Origin row at construction time.
        start_col (int): Origin column at construction time.
        row (int): Destination row.
        col (int): Destination column.
        type (MoveType): Special-move tag.
        promotion (Optional[str]): Lowercase replacement kind for promotions.
        captured (Optional[Piece]): Piece removed by the last ``apply``.
    """

    __slots__ = (
        "piece",
        "start_row",
        "start_col",
        "row",
        "col",
        "type",
        "promotion",
        "captured",
        "_prev_ep",
        "_prev_side",
        "_prev_has_castled",
    )

    def __init__(
        self,
        piece: "Piece",
        row: int,
        col: int,
        type: MoveType = MoveType.NORMAL,
        promotion: Optional[str] = None,
    ) -> None:
        self.piece = piece
        self.start_row = piece.row
        self.start_col = piece.col
        self.row = row
        self.col = col
        self.type = type
        if type is MoveType.PAWN_PROMOTION:
            promotion = (promotion or "q").lower()
            if promotion not in PROMOTION_PIECES:
                raise ValueError(f"invalid promotion piece: {promotion!r}")
        else:
            promotion = None
        self.promotion = promotion
        self.captured: Optional["Piece"] = None
        self._prev_ep: Optional[Square] = None
        self._prev_side = None
        self._prev_has_castled = False

    # --- identity ---
    def key(self) -> Tuple[int, int, int, int, Optional[str]]:
        return (self.start_row, self.start_col, self.row, self.col, self.promotion)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Move) and self.key() == other.key()

    def __hash__(self) -> int:
        return hash(self.key())

    def __str__(self) -> str:
        return self.label()

    def __repr__(self) -> str:
        return (
            f"Move({self.label()} {square_to_str(self.start_row, self.start_col)}"
            f"-{square_to_str(self.row, self.col)} {self.type.name})"
        )

    @property
    def origin(self) -> Square:
        return (self.start_row, self.start_col)

    @property
    def destination(self) -> Square:
        return (self.row, self.col)

    def is_capture(self, board: "Board") -> bool:
        """Return True if applying this move on ``board`` removes an enemy piece."""
        if self.type is MoveType.EN_PASSANT:
            return True
        target = board.get(self.row, self.col)
        return target is not None and target.color is not self.piece.color

    def is_double_step(self) -> bool:
        return (
            self.type is MoveType.NORMAL
            and self.piece.kind == "P"
            and abs(self.row - self.start_row) == 2
        )

    def label(self) -> str:
        """Return a short display label such as ``Pe4``, ``ng6``, ``0-0``.

        White pieces use upper-case letters, Black pieces lower-case. This is
        a display aid, not a notation with round-trip guarantees.
        """
        if self.type in (MoveType.WHITE_SHORT, MoveType.BLACK_SHORT):
            return "0-0"
        if self.type in (MoveType.WHITE_LONG, MoveType.BLACK_LONG):
            return "0-0-0"
        text = self.piece.symbol() + square_to_str(self.row, self.col)
        if self.promotion:
            text += "=" + self.promotion.upper()
        return text

    # --- state transitions ---
    def apply(self, board: "Board") -> Optional["Piece"]:
        """Apply this move to ``board`` in place.

        Returns:
            Optional[Piece]: The captured piece, if any.
        """
        piece = self.piece
        if self.type.is_castling() and board.get(*CASTLING_ROOKS[self.type][:2]) is None:
            raise MoveUndoError(f"no rook to castle with for {self!r}")
        self._prev_ep = board.ep_square
        self._prev_side = board.side_to_move
        board.ep_square = None

        if self.type.is_castling():
            home, rook_from, rook_to = CASTLING_ROOKS[self.type]
            rook = board.remove(home, rook_from)
            board.remove(self.start_row, self.start_col)
            board.set_piece(self.row, self.col, piece)
            board.set_piece(home, rook_to, rook)
            piece.move_count += 1
            rook.move_count += 1
            self._prev_has_castled = piece.has_castled  # type: ignore[attr-defined]
            piece.has_castled = True  # type: ignore[attr-defined]
            self.captured = None
        elif self.type is MoveType.EN_PASSANT:
            board.remove(self.start_row, self.start_col)
            # The captured pawn sits beside the origin, on the destination file
            self.captured = board.remove(self.start_row, self.col)
            board.set_piece(self.row, self.col, piece)
            piece.move_count += 1
        elif self.type is MoveType.PAWN_PROMOTION:
            board.remove(self.start_row, self.start_col)
            self.captured = board.remove(self.row, self.col)
            board.set_piece(self.row, self.col, piece.promote(self.promotion or "q"))  # type: ignore[attr-defined]
        else:
            board.remove(self.start_row, self.start_col)
            self.captured = board.set_piece(self.row, self.col, piece)
            piece.move_count += 1
            if self.is_double_step():
                board.ep_square = ((self.start_row + self.row) // 2, self.col)

        board.side_to_move = piece.color.opp()
        return self.captured

    def undo(self, board: "Board") -> None:
        """Revert the most recent :meth:`apply` of this move on ``board``."""
        if self.type is MoveType.NORMAL or self.type is MoveType.PAWN_PROMOTION:
            board.remove(self.row, self.col)
            board.set_piece(self.start_row, self.start_col, self.piece)
            if self.captured is not None:
                board.set_piece(self.row, self.col, self.captured)
            if self.type is MoveType.NORMAL:
                self.piece.move_count -= 1
        elif self.type is MoveType.EN_PASSANT:
            board.remove(self.row, self.col)
            board.set_piece(self.start_row, self.start_col, self.piece)
            if self.captured is not None:
                board.set_piece(self.start_row, self.col, self.captured)
            self.piece.move_count -= 1
        else:
            self.undo_castling(board)
        self.captured = None
        board.ep_square = self._prev_ep
        board.side_to_move = self._prev_side

    def undo_castling(self, board: "Board") -> None:
        """Move king and rook back to their pre-castle squares.

        Raises:
            MoveUndoError: If this move is not one of the four castling types.
        """
        if not self.type.is_castling():
            raise MoveUndoError(
                f"undo castling should only be used on a castling move, not {self.type.name}"
            )
        home, rook_from, rook_to = CASTLING_ROOKS[self.type]
        king = board.remove(self.row, self.col)
        rook = board.remove(home, rook_to)
        if king is not self.piece or rook is None:
            raise MoveUndoError(f"board does not match castling record {self!r}")
        board.set_piece(self.start_row, self.start_col, king)
        board.set_piece(home, rook_from, rook)
        king.move_count -= 1
        rook.move_count -= 1
        king.has_castled = self._prev_has_castled  # type: ignore[attr-defined]


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a ``(row, col)`` pair.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: Row 0 is rank 8, column 0 is file a.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    col = ord(s[0]) - ord("a")
    row = 8 - int(s[1])
    return row, col


def square_to_str(row: int, col: int) -> str:
    """Convert a ``(row, col)`` pair into algebraic notation.

    Raises:
        ValueError: If the square is off the board.
    """
    if not (0 <= row < 8 and 0 <= col < 8):
        raise ValueError(f"invalid square: ({row}, {col})")
    return chr(ord("a") + col) + str(8 - row)
