from __future__ import annotations

import pytest

from capturechess.engine.move import ALL_SQUARES, Move, OutOfBoundsError, Square, parse_uci


def test_square_names() -> None:
    assert str(Square(1, 1)) == "a1"
    assert str(Square(8, 8)) == "h8"
    assert Square.parse("e4") == Square(5, 4)


@pytest.mark.parametrize("f,r", [(0, 1), (9, 1), (1, 0), (1, 9)])
def test_out_of_bounds(f: int, r: int) -> None:
    with pytest.raises(OutOfBoundsError):
        Square(f, r)
    with pytest.raises(ValueError):
        Square(f, r)


@pytest.mark.parametrize("text", ["", "e", "i1", "a9", "a0", "e44"])
def test_parse_square_rejects(text: str) -> None:
    with pytest.raises(ValueError):
        Square.parse(text)


def test_offset_stays_on_board() -> None:
    assert Square(1, 1).offset(1, 1) == Square(2, 2)
    assert Square(1, 1).offset(-1, 0) is None
    assert Square(8, 8).offset(0, 1) is None


def test_all_squares() -> None:
    assert len(ALL_SQUARES) == 64
    assert len(set(Square.all())) == 64
    assert ALL_SQUARES[0] == Square(1, 1)
    assert ALL_SQUARES[8] == Square(1, 2)


def test_parse_uci_valid() -> None:
    m = parse_uci("a1a5")
    assert m == Move(Square(1, 1), Square(1, 5))
    assert m is not None and m.to_uci() == "a1a5"


@pytest.mark.parametrize("text", ["", "a1a", "a1a55", "i1a5", "a1a9", "aaa5", "a0a5", "e7e8q"])
def test_parse_uci_rejects(text: str) -> None:
    assert parse_uci(text) is None
