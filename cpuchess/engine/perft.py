from __future__ import annotations

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are visited with make/undo on the same board, so the board is
    left exactly as it was found.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = board.legal_moves()
    if depth == 1:
        return len(moves)
    nodes = 0
    for m in moves:
        with board.applied(m):
            nodes += perft(board, depth - 1)
    return nodes
