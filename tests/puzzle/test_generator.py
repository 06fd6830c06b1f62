from __future__ import annotations

import random

import pytest

from capturechess.engine.board import Board, PieceKind, Side
from capturechess.puzzle.generator import (
    Difficulty,
    GeneratorConfig,
    PositionGenerator,
    distribute_captures,
    expand_white_pieces,
)
from capturechess.search.bfs import RuleSolver
from capturechess.search.rules import SafeLandingRules
from capturechess.search.solver import CaptureSolver, replay


def assert_verified(puzzle, min_black: int, max_black: int) -> None:
    board = puzzle.board
    black = board.count(Side.BLACK)
    assert min_black <= black <= max_black
    assert Board.from_fen(board.to_fen(), strict=True) == board
    for square, piece in board.pieces(Side.BLACK).items():
        assert piece.kind is not PieceKind.KING
        if piece.kind is PieceKind.PAWN:
            assert square.rank not in (1, 8)
    assert len(puzzle.solution) == black
    assert replay(board, puzzle.solution).count(Side.BLACK) == 0
    independent = CaptureSolver().solve(board)
    assert independent.found
    assert independent.captures is not None and len(independent.captures) == black


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_single_queen_puzzles_are_solvable(seed: int) -> None:
    gen = PositionGenerator(rng=random.Random(seed))
    puzzle = gen.generate({PieceKind.QUEEN: 1}, 2, 4, max_attempts=500)
    assert puzzle is not None
    assert puzzle.board.count(Side.WHITE) == 1
    assert puzzle.attempts >= 1
    assert_verified(puzzle, 2, 4)


@pytest.mark.parametrize("seed", [5, 6, 7])
def test_two_piece_puzzles_are_solvable(seed: int) -> None:
    gen = PositionGenerator(rng=random.Random(seed))
    puzzle = gen.generate([PieceKind.ROOK, PieceKind.KNIGHT], 2, 4, max_attempts=1000)
    assert puzzle is not None
    assert puzzle.board.count(Side.WHITE) == 2
    assert len(puzzle.paths) == 2
    assert_verified(puzzle, 2, 4)


def test_captures_per_piece_range() -> None:
    gen = PositionGenerator(rng=random.Random(11))
    puzzle = gen.generate([PieceKind.KNIGHT], 1, 3, max_attempts=500, captures_per_piece=(1, 3))
    assert puzzle is not None
    assert_verified(puzzle, 1, 3)


def test_same_seed_same_puzzle() -> None:
    a = PositionGenerator(rng=random.Random(99)).generate({PieceKind.ROOK: 1}, 2, 3)
    b = PositionGenerator(rng=random.Random(99)).generate({PieceKind.ROOK: 1}, 2, 3)
    assert a is not None and b is not None
    assert a.board == b.board


def test_extra_rules_must_also_solve() -> None:
    rules = SafeLandingRules()
    gen = PositionGenerator(rng=random.Random(3))
    puzzle = gen.generate({PieceKind.QUEEN: 1}, 1, 2, max_attempts=2000, rules=rules)
    assert puzzle is not None
    assert RuleSolver(rules).solve(puzzle.board).solved


def test_rule_check_budget_rejects_attempts() -> None:
    gen = PositionGenerator(rng=random.Random(3), rule_max_nodes=1)
    assert gen.generate({PieceKind.QUEEN: 1}, 1, 2, max_attempts=5, rules=SafeLandingRules()) is None
    # without extra rules the budget is never consulted
    assert gen.generate({PieceKind.QUEEN: 1}, 1, 2, max_attempts=500) is not None


def test_config_rule_budget_overrides_generator() -> None:
    config = GeneratorConfig(
        white_pieces=(PieceKind.QUEEN,), min_black=1, max_black=2, max_attempts=5, rule_max_nodes=1
    )
    gen = PositionGenerator(rng=random.Random(3))
    assert gen.generate_config(config, SafeLandingRules()) is None
    with pytest.raises(ValueError):
        PositionGenerator(rule_max_nodes=0)


def test_exhaustion_returns_none() -> None:
    # A pawn can climb at most seven ranks
    gen = PositionGenerator(rng=random.Random(0))
    assert gen.generate({PieceKind.PAWN: 1}, 8, 8, max_attempts=5) is None


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(white_pieces={}, min_black=1, max_black=2),
        dict(white_pieces=[PieceKind.NONE], min_black=1, max_black=2),
        dict(white_pieces={PieceKind.QUEEN: -1}, min_black=1, max_black=2),
        dict(white_pieces=[PieceKind.QUEEN], min_black=0, max_black=2),
        dict(white_pieces=[PieceKind.QUEEN], min_black=3, max_black=2),
        dict(white_pieces=[PieceKind.QUEEN], min_black=1, max_black=2, max_attempts=0),
        dict(white_pieces=[PieceKind.QUEEN], min_black=1, max_black=2, captures_per_piece=(2, 1)),
        dict(white_pieces=[PieceKind.QUEEN], min_black=1, max_black=2, rule_max_nodes=0),
        dict(white_pieces=[PieceKind.KNIGHT] * 60, min_black=10, max_black=10),
    ],
)
def test_invalid_configuration_raises(kwargs) -> None:
    with pytest.raises(ValueError):
        PositionGenerator(rng=random.Random(0)).generate(**kwargs)


def test_distribute_captures() -> None:
    assert distribute_captures(5, 2) == [3, 2]
    assert distribute_captures(2, 3) == [1, 1, 0]
    assert distribute_captures(0, 1) == [0]


def test_expand_white_pieces() -> None:
    assert expand_white_pieces({PieceKind.ROOK: 2, PieceKind.BISHOP: 1}) == (
        PieceKind.ROOK,
        PieceKind.ROOK,
        PieceKind.BISHOP,
    )
    assert expand_white_pieces([PieceKind.KNIGHT]) == (PieceKind.KNIGHT,)


def test_easy_preset_defaults_to_knight() -> None:
    config = GeneratorConfig.for_difficulty(Difficulty.EASY, rng=random.Random(0))
    assert config.white_pieces == (PieceKind.KNIGHT,)
    assert (config.min_black, config.max_black) == (1, 3)
    assert config.max_attempts == 2000
    assert config.difficulty == "easy"


def test_selected_kinds_come_first() -> None:
    config = GeneratorConfig.for_difficulty(Difficulty.HARD, [PieceKind.BISHOP], random.Random(4))
    assert config.white_pieces[0] is PieceKind.BISHOP
    assert 2 <= len(config.white_pieces) <= 3
    assert len(set(config.white_pieces)) == len(config.white_pieces)
    n = len(config.white_pieces)
    assert (config.min_black, config.max_black) == (3 * n, 6 * n)
    assert config.captures_per_piece == (3, 6)


def test_generate_for_difficulty_builds_record() -> None:
    gen = PositionGenerator(rng=random.Random(21))
    record = gen.generate_for_difficulty(Difficulty.EASY, [PieceKind.ROOK])
    assert record is not None
    assert record.difficulty == "easy"
    assert record.white_pieces == {PieceKind.ROOK: 1}
    assert 1 <= record.solution_length <= 3
    assert record.total_black_captured == record.solution_length
