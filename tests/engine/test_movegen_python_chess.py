from __future__ import annotations

import pytest

from capturechess.engine.board import Board, Side
from capturechess.engine.movegen import moves_for_side

chess = pytest.importorskip("chess")


@pytest.mark.parametrize(
    "fen",
    [
        "8/8/3p4/8/2N1Q3/8/1P3B2/R3K3 w - - 0 1",
        "7k/6p1/8/3N4/8/2B5/8/K6R w - - 0 1",
        "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w - - 0 1",
        "8/8/8/8/n1b5/8/8/Q7 w - - 0 1",
        "4r3/1n6/8/2p5/1P1b4/8/6N1/3R3B w - - 0 1",
    ],
)
def test_white_moves_match_python_chess(fen: str) -> None:
    ours = {m.to_uci() for m in moves_for_side(Board.from_fen(fen), Side.WHITE)}
    theirs = {m.uci() for m in chess.Board(fen).pseudo_legal_moves}
    assert ours == theirs


@pytest.mark.parametrize(
    "fen",
    [
        "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w - - 0 1",
        "4r3/1n6/8/2p5/1P1b4/8/6N1/3R3B w - - 0 1",
    ],
)
def test_black_moves_match_python_chess(fen: str) -> None:
    ours = {m.to_uci() for m in moves_for_side(Board.from_fen(fen), Side.BLACK)}
    board = chess.Board(fen)
    board.turn = chess.BLACK
    theirs = {m.uci() for m in board.pseudo_legal_moves}
    assert ours == theirs
