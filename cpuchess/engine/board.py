from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from .color import Color
from .move import Move, Square, square_to_str, str_to_square
from .pieces import King, Piece, Rook, piece_from_char


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

# castling right -> (king color, rook home square)
_CASTLING_CORNERS: Dict[str, Tuple[Color, Square]] = {
    "K": (Color.WHITE, (7, 7)),
    "Q": (Color.WHITE, (7, 0)),
    "k": (Color.BLACK, (0, 7)),
    "q": (Color.BLACK, (0, 0)),
}


class Board:
    """Mutable 8x8 board shared by the whole search through make/undo.

    Notes:
    - Squares are ``(row, col)`` with row 0 = rank 8 and col 0 = file a.
    - The board owns every piece placed on it; a captured piece is held by
      the :class:`Move` that removed it until that move is undone.
    - ``ep_square`` is the square a pawn skipped over on the previous move.
    """

    def __init__(self) -> None:
        self.grid: List[List[Optional[Piece]]] = [[None] * 8 for _ in range(8)]
        self.side_to_move: Color = Color.WHITE
        self.ep_square: Optional[Square] = None
        self.history: List[Move] = []
        self._kings: Dict[Color, King] = {}

    # --- construction ---
    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth-Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string; the move counters are optional.

        Returns:
            Board: Board holding the encoded position.

        Raises:
            ValueError: If ``fen`` is empty or has invalid placement, side to
                move, castling rights or en passant square, or does not hold
                exactly one king per color.

        Notes:
            Castling rights are folded into move counters: a missing right
            marks the corresponding corner rook as moved, and the king as
            moved when both of its rights are missing.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) not in (4, 6):
            raise ValueError("FEN must have 4 or 6 fields")
        placement, stm, castling, ep = parts[:4]

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        board = cls()
        for row, rank in enumerate(ranks):
            col = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    col += n
                else:
                    if col >= 8:
                        raise ValueError("too many squares in FEN rank")
                    board.set_piece(row, col, piece_from_char(ch))
                    col += 1
            if col != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")

        for color in Color:
            kings = [p for p in board.pieces(color) if isinstance(p, King)]
            if len(kings) != 1:
                raise ValueError(f"FEN must contain exactly one {color.name.lower()} king")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")
        board.side_to_move = Color(stm)

        if castling != "-" and any(ch not in _CASTLING_CORNERS for ch in castling):
            raise ValueError("invalid castling rights")
        rights = "" if castling == "-" else castling
        for right, (color, (r, c)) in _CASTLING_CORNERS.items():
            if right in rights:
                continue
            rook = board.get(r, c)
            if isinstance(rook, Rook) and rook.color is color:
                rook.move_count = 1
        for color, (short, long_) in ((Color.WHITE, "KQ"), (Color.BLACK, "kq")):
            king = board.king(color)
            if short not in rights and long_ not in rights and king.row == king.home_row:
                king.move_count = 1

        if ep != "-":
            try:
                ep_square = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            if ep_square[0] not in (2, 5):
                raise ValueError("invalid en passant square rank")
            board.ep_square = ep_square
        return board

    def to_fen(self) -> str:
        """Serialize the position into FEN (move counters derived from history)."""
        ranks: List[str] = []
        for row in range(8):
            run = 0
            out = []
            for col in range(8):
                piece = self.grid[row][col]
                if piece is None:
                    run += 1
                    continue
                if run:
                    out.append(str(run))
                    run = 0
                out.append(piece.symbol())
            if run:
                out.append(str(run))
            ranks.append("".join(out))
        placement = "/".join(ranks)
        castling = self._castling_rights() or "-"
        ep = square_to_str(*self.ep_square) if self.ep_square is not None else "-"
        fullmove = 1 + len(self.history) // 2
        return f"{placement} {self.side_to_move.value} {castling} {ep} 0 {fullmove}"

    def _castling_rights(self) -> str:
        rights = []
        for right, (color, (r, c)) in _CASTLING_CORNERS.items():
            king = self._kings.get(color)
            rook = self.get(r, c)
            if (
                king is not None
                and king.move_count == 0
                and king.square == (king.home_row, 4)
                and isinstance(rook, Rook)
                and rook.color is color
                and rook.move_count == 0
            ):
                rights.append(right)
        return "".join(rights)

    def copy(self) -> "Board":
        """Deep copy with cloned pieces and an empty history."""
        other = Board()
        for piece in self.all_pieces():
            other.set_piece(piece.row, piece.col, piece.clone())
        other.side_to_move = self.side_to_move
        other.ep_square = self.ep_square
        return other

    # --- occupancy ---
    def get(self, r: int, c: int) -> Optional[Piece]:
        if not (0 <= r < 8 and 0 <= c < 8):
            return None
        return self.grid[r][c]

    def is_empty(self, r: int, c: int) -> bool:
        return self.grid[r][c] is None

    def set_piece(self, r: int, c: int, piece: Piece) -> Optional[Piece]:
        """Place ``piece`` on (r, c) and return the piece it displaced, if any."""
        previous = self.grid[r][c]
        self.grid[r][c] = piece
        piece.row = r
        piece.col = c
        if isinstance(piece, King):
            self._kings[piece.color] = piece
        return previous

    def remove(self, r: int, c: int) -> Optional[Piece]:
        piece = self.grid[r][c]
        self.grid[r][c] = None
        return piece

    def pieces(self, color: Color) -> List[Piece]:
        return [p for row in self.grid for p in row if p is not None and p.color is color]

    def all_pieces(self) -> Iterator[Piece]:
        for row in self.grid:
            for p in row:
                if p is not None:
                    yield p

    def king(self, color: Color) -> King:
        return self._kings[color]

    # --- attacks and status ---
    def is_attacked(self, r: int, c: int, color: Color) -> bool:
        """Return True if any piece of ``color`` is attacking (r, c).

        Own-king safety of the attackers is deliberately not considered; king
        move and castling legality rely on that.
        """
        for row in self.grid:
            for p in row:
                if p is not None and p.color is color and p.is_attacking(self, r, c):
                    return True
        return False

    def in_check(self, color: Optional[Color] = None) -> bool:
        """Return True if ``color`` (default: side to move) is in check."""
        king = self._kings.get(color or self.side_to_move)
        if king is None:
            return False
        return self.is_attacked(king.row, king.col, king.color.opp())

    def legal_moves(self, color: Optional[Color] = None) -> List[Move]:
        """Return all legal moves of ``color`` (default: side to move)."""
        moves: List[Move] = []
        for piece in self.pieces(color or self.side_to_move):
            moves.extend(piece.legal_moves(self))
        return moves

    def moves_from(self, r: int, c: int) -> List[Move]:
        piece = self.get(r, c)
        return piece.legal_moves(self) if piece is not None else []

    def has_legal_moves(self, color: Optional[Color] = None) -> bool:
        for piece in self.pieces(color or self.side_to_move):
            for _ in piece.iter_legal_moves(self):
                return True
        return False

    def is_checkmate(self, color: Optional[Color] = None) -> bool:
        color = color or self.side_to_move
        return self.in_check(color) and not self.has_legal_moves(color)

    def is_stalemate(self, color: Optional[Color] = None) -> bool:
        color = color or self.side_to_move
        return not self.in_check(color) and not self.has_legal_moves(color)

    def is_game_over(self) -> bool:
        return not self.has_legal_moves(self.side_to_move)

    # --- make / undo ---
    def make(self, move: Move) -> Optional[Piece]:
        """Apply ``move`` and push it on the history; returns the captured piece."""
        captured = move.apply(self)
        self.history.append(move)
        return captured

    def unmake(self) -> Move:
        """Undo the most recent move from the history.

        Raises:
            ValueError: If no move has been made.
        """
        if not self.history:
            raise ValueError("no move to undo")
        move = self.history.pop()
        move.undo(self)
        return move

    @contextmanager
    def applied(self, move: Move) -> Iterator[Optional[Piece]]:
        """Context manager that makes ``move`` and always undoes it on exit."""
        captured = self.make(move)
        try:
            yield captured
        finally:
            self.unmake()

    @property
    def move_count(self) -> int:
        return len(self.history)

    @property
    def last_move(self) -> Optional[Move]:
        return self.history[-1] if self.history else None

    def signature(self) -> Tuple:
        """Observable state used to compare boards before/after make-undo."""
        squares = tuple(
            (p.symbol(), p.move_count, getattr(p, "has_castled", False)) if p else None
            for row in self.grid
            for p in row
        )
        return squares, self.side_to_move, self.ep_square

    def __str__(self) -> str:
        lines = []
        for row in self.grid:
            lines.append(" ".join(p.symbol() if p else "." for p in row))
        return "\n".join(lines)
