from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from cpuchess.config import Settings, get_settings
from cpuchess.engine.board import Board
from cpuchess.engine.color import Color
from cpuchess.engine.move import Move, str_to_square
from cpuchess.eval import MATE_SCORE, evaluate, queen_close_to_king
from cpuchess.search.mate import find_forced_mate
from cpuchess.search.ordering import order_moves


logger = logging.getLogger(__name__)

INF = 10_000_000

# White's first move label -> Black's reply (origin, destination)
OPENING_REPLIES: Dict[str, Tuple[str, str]] = {
    "Pe4": ("e7", "e5"),
    "Pd4": ("d7", "d5"),
}


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[int]
    source: str  # "opening", "mate", "search" or "none"
    depth: int
    nodes: int = 0
    time_ms: int = 0
    mate_line: List[Move] = field(default_factory=list)


class SearchService:
    """CPU player: negamax with alpha-beta pruning on a single shared board.

    Every move tried is applied and undone through ``Board.applied`` so the
    board is bit-identical before and after a search, including on cutoffs.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.nodes = 0

    def search(
        self, board: Board, color: Optional[Color] = None, depth: Optional[int] = None
    ) -> SearchResult:
        start = time.perf_counter()
        color = color or board.side_to_move
        depth = self.settings.search_depth if depth is None else depth
        if depth < 0:
            raise ValueError("depth must be >= 0")
        self.nodes = 0

        result = self._search(board, color, depth)
        result.nodes = self.nodes
        result.time_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "search",
            extra={
                "color": color.name.lower(),
                "depth": depth,
                "source": result.source,
                "move": result.best_move.label() if result.best_move else None,
                "score": result.score,
                "nodes": result.nodes,
                "time_ms": result.time_ms,
            },
        )
        return result

    def choose_move(
        self, board: Board, color: Optional[Color] = None, depth: Optional[int] = None
    ) -> Optional[Move]:
        return self.search(board, color, depth).best_move

    def _search(self, board: Board, color: Color, depth: int) -> SearchResult:
        if self.settings.opening_replies:
            reply = self.opening_reply(board, color)
            if reply is not None:
                return SearchResult(best_move=reply, score=None, source="opening", depth=0)

        legal = board.legal_moves(color)
        if not legal:
            return SearchResult(
                best_move=None, score=evaluate(board, color), source="none", depth=0
            )

        mate_line = find_forced_mate(board, color, self.mate_depth(board, color))
        if mate_line:
            return SearchResult(
                best_move=mate_line[0],
                score=MATE_SCORE,
                source="mate",
                depth=len(mate_line),
                mate_line=mate_line,
            )

        alpha = -INF
        best_move: Optional[Move] = None
        for move in order_moves(board, legal):
            with board.applied(move):
                score = -self.nega_max_with_pruning(board, color.opp(), -INF, -alpha, depth - 1)
            # Strictly better only: ties keep the earlier move in ordered iteration
            if best_move is None or score > alpha:
                alpha = score
                best_move = move
        return SearchResult(best_move=best_move, score=alpha, source="search", depth=depth)

    def nega_max_with_pruning(
        self, board: Board, color: Color, alpha: int, beta: int, depth: int
    ) -> int:
        """Score ``board`` for ``color`` to ``depth`` plies with alpha-beta pruning.

        Returns the same value as a full negamax to the same depth; pruning
        only skips siblings once ``alpha >= beta``.
        """
        self.nodes += 1
        if depth <= 0:
            return evaluate(board, color)
        moves = board.legal_moves(color)
        if not moves:
            # Game over: evaluate scores the mate or stalemate
            return evaluate(board, color)

        best = -INF
        for move in order_moves(board, moves):
            with board.applied(move):
                score = -self.nega_max_with_pruning(board, color.opp(), -beta, -alpha, depth - 1)
            best = max(best, score)
            alpha = max(alpha, best)
            if alpha >= beta:
                return alpha
        return best

    def mate_depth(self, board: Board, color: Color) -> int:
        if queen_close_to_king(board, color, self.settings.queen_proximity):
            return self.settings.mate_depth_near
        return self.settings.mate_depth_far

    def opening_reply(self, board: Board, color: Color) -> Optional[Move]:
        """Return the canned reply to White's first move, if there is one."""
        last = board.last_move
        if board.move_count != 1 or last is None or color is not Color.BLACK:
            return None
        reply = OPENING_REPLIES.get(last.label())
        if reply is None:
            return None
        origin, dest = (str_to_square(s) for s in reply)
        for move in board.moves_from(*origin):
            if move.destination == dest:
                return move
        return None


def choose_move(board: Board, color: Color, depth: int) -> Optional[Move]:
    """Pick the best move for ``color`` searching ``depth`` plies."""
    return SearchService().choose_move(board, color, depth)


def nega_max_with_pruning(board: Board, color: Color, alpha: int, beta: int, depth: int) -> int:
    return SearchService().nega_max_with_pruning(board, color, alpha, beta, depth)
