from __future__ import annotations

import pytest

from capturechess.engine.board import Board, Piece, PieceKind, Side
from capturechess.engine.move import Square
from capturechess.engine.movegen import (
    attacked_squares,
    capture_moves,
    is_path_clear,
    is_square_attacked,
    moves_for_side,
    raw_destinations,
    squares_between,
)


def sq(name: str) -> Square:
    return Square.parse(name)


def names(squares) -> set[str]:
    return {str(s) for s in squares}


@pytest.mark.parametrize(
    "kind,origin,expected",
    [
        (PieceKind.ROOK, "d4", 14),
        (PieceKind.BISHOP, "d4", 13),
        (PieceKind.QUEEN, "d4", 27),
        (PieceKind.KNIGHT, "d4", 8),
        (PieceKind.KNIGHT, "a1", 2),
        (PieceKind.KING, "d4", 8),
        (PieceKind.KING, "a1", 3),
    ],
)
def test_open_board_counts(kind: PieceKind, origin: str, expected: int) -> None:
    b = Board.empty().set(sq(origin), Piece(kind, Side.WHITE))
    assert len(raw_destinations(b, sq(origin))) == expected


def test_slider_stops_at_first_piece() -> None:
    # Rook a1, own pawn a3, black knight c1
    b = Board.from_fen("8/8/8/8/8/P7/8/R1n5")
    assert names(raw_destinations(b, sq("a1"))) == {"a2", "b1", "c1"}


def test_knight_skips_own_pieces() -> None:
    b = Board.from_fen("8/8/8/8/8/1P6/2n5/N7")
    assert names(raw_destinations(b, sq("a1"))) == {"c2"}


def test_probe_with_explicit_piece() -> None:
    b = Board.empty()
    dests = raw_destinations(b, sq("a1"), Piece(PieceKind.KNIGHT, Side.WHITE))
    assert names(dests) == {"b3", "c2"}
    assert raw_destinations(b, sq("a1")) == []


def test_white_pawn_pushes() -> None:
    b = Board.from_fen("8/8/8/8/8/8/4P3/8")
    assert names(raw_destinations(b, sq("e2"))) == {"e3", "e4"}
    blocked = Board.from_fen("8/8/8/8/8/4n3/4P3/8")
    assert raw_destinations(blocked, sq("e2")) == []
    far_blocked = Board.from_fen("8/8/8/8/4n3/8/4P3/8")
    assert names(raw_destinations(far_blocked, sq("e2"))) == {"e3"}


def test_pawn_diagonals_only_onto_opponents() -> None:
    b = Board.from_fen("8/8/8/8/8/3p1N2/4P3/8")
    assert names(raw_destinations(b, sq("e2"))) == {"e3", "e4", "d3"}


def test_black_pawn_moves_down() -> None:
    b = Board.from_fen("8/3p4/8/8/8/8/8/8")
    assert names(raw_destinations(b, sq("d7"))) == {"d6", "d5"}
    mid = Board.from_fen("8/8/8/3p4/8/8/8/8")
    assert names(raw_destinations(mid, sq("d5"))) == {"d4"}


@pytest.mark.parametrize(
    "start,end,expected",
    [
        ("a1", "d4", ["b2", "c3"]),
        ("a1", "a4", ["a2", "a3"]),
        ("h8", "e5", ["g7", "f6"]),
        ("h1", "e1", ["g1", "f1"]),
        ("a1", "b3", []),
        ("a1", "a2", []),
        ("a1", "a1", []),
        ("a1", "c4", []),
    ],
)
def test_squares_between(start: str, end: str, expected: list) -> None:
    assert [str(s) for s in squares_between(sq(start), sq(end))] == expected


def test_is_path_clear() -> None:
    b = Board.from_fen("8/8/8/8/8/8/8/R1n5")
    assert not is_path_clear(b, sq("a1"), sq("d1"), PieceKind.ROOK)
    assert is_path_clear(b, sq("a1"), sq("a8"), PieceKind.ROOK)
    # Knights jump
    assert is_path_clear(b, sq("a1"), sq("d1"), PieceKind.KNIGHT)


def test_pawn_attacks_regardless_of_occupancy() -> None:
    b = Board.from_fen("8/8/8/8/8/8/P3P3/8")
    assert names(attacked_squares(b, sq("e2"))) == {"d3", "f3"}
    assert names(attacked_squares(b, sq("a2"))) == {"b3"}


def test_slider_attacks_include_blockers() -> None:
    b = Board.from_fen("8/8/8/8/N7/8/8/r7")
    attacked = attacked_squares(b, sq("a1"))
    assert sq("a4") in attacked
    assert sq("a5") not in attacked


def test_is_square_attacked() -> None:
    b = Board.from_fen("r7/8/8/8/8/8/8/8")
    assert is_square_attacked(b, sq("a1"), Side.BLACK)
    assert not is_square_attacked(b, sq("a1"), Side.WHITE)
    blocked = b.set(sq("a4"), Piece(PieceKind.BISHOP, Side.WHITE))
    assert not is_square_attacked(blocked, sq("a1"), Side.BLACK)
    assert is_square_attacked(blocked, sq("a4"), Side.BLACK)


def test_capture_moves_and_side_moves() -> None:
    b = Board.from_fen("8/8/8/8/n1b5/8/8/Q7")
    assert [m.to_uci() for m in capture_moves(b, sq("a1"))] == ["a1a4"]
    white = moves_for_side(b, Side.WHITE)
    assert all(m.start == sq("a1") for m in white)
    black = moves_for_side(b, Side.BLACK)
    assert {m.start for m in black} == {sq("a4"), sq("c4")}
