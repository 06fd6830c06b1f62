from __future__ import annotations

import pytest

from capturechess.engine.board import Board
from capturechess.puzzle.record import PuzzleRecord
from capturechess.search.solver import solve_captures

FEN = "8/8/8/8/n1b5/8/8/Q7 w - - 0 1"


def _record() -> PuzzleRecord:
    board = Board.from_fen(FEN)
    captures = solve_captures(board)
    assert captures is not None
    return PuzzleRecord.from_solution(board, captures, difficulty="medium", black_range=(2, 4))


def test_record_schema() -> None:
    data = _record().to_dict()
    assert data == {
        "difficulty": "medium",
        "whitePiecesConfig": {"QUEEN": 1},
        "fen": FEN,
        "blackRange": [2, 4],
        "solutionLength": 2,
        "totalBlackCaptured": 2,
        "capturesByPiece": {"QUEEN@a1": 2},
        "solutionMoves": [
            {"moverPieceKind": "QUEEN", "initialSquare": "a1", "moveUCI": "a1a4"},
            {"moverPieceKind": "QUEEN", "initialSquare": "a1", "moveUCI": "a4c4"},
        ],
    }


def test_captures_grouped_by_starting_square() -> None:
    # Two rooks: a1 clears the a-file, h1 clears the h-file
    board = Board.from_fen("p6p/8/8/8/n6b/8/8/R6R")
    captures = solve_captures(board)
    assert captures is not None
    record = PuzzleRecord.from_solution(board, captures)
    assert record.captures_by_piece == {"ROOK@a1": 2, "ROOK@h1": 2}
    assert record.black_range == (4, 4)
    assert record.difficulty == "custom"


def test_round_trip_through_dict() -> None:
    record = _record()
    assert PuzzleRecord.from_dict(record.to_dict()) == record


def test_incomplete_solution_rejected() -> None:
    board = Board.from_fen(FEN)
    captures = solve_captures(board)
    assert captures is not None
    with pytest.raises(ValueError):
        PuzzleRecord.from_solution(board, captures[:1])


def test_from_dict_rejects_bad_moves() -> None:
    data = _record().to_dict()
    data["solutionMoves"][0]["moveUCI"] = "a1z9"
    with pytest.raises(ValueError):
        PuzzleRecord.from_dict(data)
