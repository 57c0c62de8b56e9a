from __future__ import annotations

from cpuchess.engine.board import Board
from cpuchess.engine.color import Color
from cpuchess.engine.move import MoveType, str_to_square
from cpuchess.engine.pieces import Bishop, Knight, Pawn, Queen, Rook


def _sq(name: str):
    return str_to_square(name)


def test_knight_attacks_and_defends() -> None:
    board = Board.startpos()
    knight = board.get(*_sq("b1"))
    assert isinstance(knight, Knight)
    # d2 holds an own pawn: defended, not attacked
    assert knight.is_defending(board, *_sq("d2"))
    assert not knight.is_attacking(board, *_sq("d2"))
    # c3 is empty: both
    assert knight.is_attacking(board, *_sq("c3"))
    assert knight.is_defending(board, *_sq("c3"))
    assert not knight.is_attacking(board, *_sq("b3"))
    assert {m.destination for m in knight.legal_moves(board)} == {_sq("a3"), _sq("c3")}


def test_slider_stops_at_first_blocker() -> None:
    board = Board.from_fen("4k3/8/8/3p4/8/8/8/R2QK3 w - - 0 1")
    queen = board.get(*_sq("d1"))
    assert isinstance(queen, Queen)
    assert queen.is_attacking(board, *_sq("d5"))
    assert not queen.is_attacking(board, *_sq("d6"))
    assert not queen.is_attacking(board, *_sq("d1"))
    rook = board.get(*_sq("a1"))
    assert isinstance(rook, Rook)
    assert rook.is_defending(board, *_sq("d1"))
    assert not rook.is_attacking(board, *_sq("e1"))
    dests = {m.destination for m in rook.legal_moves(board)}
    assert _sq("b1") in dests and _sq("c1") in dests and _sq("a8") in dests
    assert _sq("d1") not in dests


def test_bishop_diagonals_only() -> None:
    board = Board.from_fen("4k3/8/8/8/3B4/8/8/4K3 w - - 0 1")
    bishop = board.get(*_sq("d4"))
    assert isinstance(bishop, Bishop)
    assert len(bishop.legal_moves(board)) == 13
    assert not bishop.is_attacking(board, *_sq("d5"))


def test_pawn_pushes_and_captures() -> None:
    board = Board.from_fen("4k3/8/8/8/8/3p1p2/4P3/4K3 w - - 0 1")
    pawn = board.get(*_sq("e2"))
    assert isinstance(pawn, Pawn)
    dests = sorted(m.destination for m in pawn.legal_moves(board))
    assert dests == sorted([_sq("e3"), _sq("e4"), _sq("d3"), _sq("f3")])
    # Pawns attack diagonally only, never straight ahead
    assert pawn.is_attacking(board, *_sq("d3"))
    assert not pawn.is_attacking(board, *_sq("e3"))


def test_pawn_double_step_blocked() -> None:
    board = Board.from_fen("4k3/8/8/8/4n3/8/4P3/4K3 w - - 0 1")
    pawn = board.get(*_sq("e2"))
    assert [m.destination for m in pawn.legal_moves(board)] == [_sq("e3")]
    board = Board.from_fen("4k3/8/8/8/8/4n3/4P3/4K3 w - - 0 1")
    assert board.get(*_sq("e2")).legal_moves(board) == []


def test_black_pawn_moves_down_the_board() -> None:
    board = Board.startpos()
    pawn = board.get(*_sq("e7"))
    assert pawn.color is Color.BLACK
    assert sorted(m.destination for m in pawn.legal_moves(board)) == [_sq("e6"), _sq("e5")]


def test_pinned_piece_cannot_move() -> None:
    board = Board.from_fen("4k3/4r3/8/8/8/8/4B3/4K3 w - - 0 1")
    bishop = board.get(*_sq("e2"))
    assert bishop.legal_moves(board) == []
    assert not bishop.can_move(board, *_sq("d3"))
    # The raw pattern ignores the pin
    assert bishop.is_attacking(board, *_sq("d3"))


def test_king_cannot_step_into_attack() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/3r4/4K3 w - - 0 1")
    king = board.king(Color.WHITE)
    dests = {m.destination for m in king.legal_moves(board)}
    # Kxd2 is legal (rook undefended); d1/f2/e2 stay covered by the rook
    assert dests == {_sq("d2"), _sq("f1")}


def test_king_cannot_retreat_along_checking_line() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/r3K3 w - - 0 1")
    king = board.king(Color.WHITE)
    assert not king.can_move(board, *_sq("f1"))
    assert king.can_move(board, *_sq("e2"))


def test_can_move_rejects_own_square_and_off_board() -> None:
    board = Board.startpos()
    knight = board.get(*_sq("g1"))
    assert not knight.can_move(board, *_sq("g1"))
    assert not knight.can_move(board, 8, 5)
    assert knight.can_move(board, *_sq("f3"))


def test_no_legal_move_leaves_king_attacked() -> None:
    fens = [
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
        "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
        "4k3/4r3/8/8/8/8/4B3/4K3 w - - 0 1",
    ]
    for fen in fens:
        board = Board.from_fen(fen)
        mover = board.side_to_move
        for move in board.legal_moves():
            with board.applied(move):
                assert not board.in_check(mover), move


def test_castling_moves_are_tagged() -> None:
    board = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    types = {m.type for m in board.king(Color.BLACK).legal_moves(board)}
    assert MoveType.BLACK_SHORT in types
    assert MoveType.BLACK_LONG in types


def test_clone_is_detached() -> None:
    board = Board.startpos()
    knight = board.get(*_sq("b1"))
    twin = knight.clone()
    assert twin is not knight
    assert (twin.color, twin.row, twin.col, twin.move_count) == (
        knight.color,
        knight.row,
        knight.col,
        knight.move_count,
    )
