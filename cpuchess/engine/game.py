from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .board import Board
from .color import Color
from .move import Move, str_to_square


@dataclass
class Game:
    """Game wrapper around a board with host-facing helper operations.

    Responsibility: expose legal moves, validate and apply host moves, undo.
    """

    board: Board

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(board=Board.from_fen(fen))

    def to_fen(self) -> str:
        return self.board.to_fen()

    @property
    def side_to_move(self) -> Color:
        return self.board.side_to_move

    def legal_moves(self, color: Optional[Color] = None) -> List[Move]:
        return self.board.legal_moves(color)

    def moves_from(self, square: str) -> List[Move]:
        return self.board.moves_from(*str_to_square(square))

    def find_move(self, from_sq: str, to_sq: str, promotion: Optional[str] = None) -> Move:
        """Look up the legal move of the side to move matching the given squares.

        Raises:
            ValueError: If a square is invalid or no such legal move exists.
        """
        origin = str_to_square(from_sq)
        dest = str_to_square(to_sq)
        piece = self.board.get(*origin)
        if piece is None or piece.color is not self.board.side_to_move:
            raise ValueError("illegal move")
        for m in piece.legal_moves(self.board):
            if m.destination != dest:
                continue
            if m.promotion is None or m.promotion == (promotion or "q").lower():
                return m
        raise ValueError("illegal move")

    def apply_move(self, move: Move) -> None:
        # Validate legality against the generator, then apply the generated twin
        legal = self.board.legal_moves()
        for m in legal:
            if m == move:
                self.board.make(m)
                return
        raise ValueError("illegal move")

    def undo_move(self) -> Move:
        if not self.board.history:
            raise ValueError("no moves to undo")
        return self.board.unmake()

    # --- State flags for protocol ---
    def in_check(self) -> bool:
        return self.board.in_check()

    def checkmate(self) -> bool:
        return self.board.is_checkmate()

    def stalemate(self) -> bool:
        return self.board.is_stalemate()

    def game_over(self) -> bool:
        return self.board.is_game_over()

    def move_history_labels(self) -> List[str]:
        return [m.label() for m in self.board.history]
