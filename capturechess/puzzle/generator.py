from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..engine.board import Board, Piece, PieceKind, Side
from ..engine.move import ALL_SQUARES, Square
from ..search.bfs import RuleSolver
from ..search.paths import CapturePath, find_capture_path
from ..search.rules import Rules
from ..search.solver import CaptureRecord, CaptureSolver
from .record import PuzzleRecord


logger = logging.getLogger(__name__)


BLACK_KINDS: Tuple[PieceKind, ...] = (
    PieceKind.PAWN,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.ROOK,
    PieceKind.QUEEN,
)

WhitePieces = Union[Mapping[PieceKind, int], Iterable[PieceKind]]

DEFAULT_RULE_MAX_NODES = 20_000


class Difficulty(Enum):
    """Training presets: (white pieces, captures per piece, attempts, default kinds)."""

    EASY = ((1, 1), (1, 3), 2000, (PieceKind.KNIGHT,))
    MEDIUM = ((1, 2), (2, 4), 2000, (PieceKind.QUEEN, PieceKind.ROOK))
    HARD = (
        (2, 3),
        (3, 6),
        3000,
        (PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT),
    )

    @property
    def piece_range(self) -> Tuple[int, int]:
        return self.value[0]

    @property
    def captures_per_piece(self) -> Tuple[int, int]:
        return self.value[1]

    @property
    def max_attempts(self) -> int:
        return self.value[2]

    @property
    def default_kinds(self) -> Tuple[PieceKind, ...]:
        return self.value[3]

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class GeneratorConfig:
    """Everything :meth:`PositionGenerator.generate` needs for one puzzle.

    Attributes:
        white_pieces (Tuple[PieceKind, ...]): White composition, one entry per piece.
        min_black (int): Fewest black pieces accepted.
        max_black (int): Most black pieces accepted.
        max_attempts (int): Rejection-sampling budget.
        captures_per_piece (Optional[Tuple[int, int]]): Inclusive range each
            white piece's capture count is drawn from. When unset a total is
            drawn from ``[min_black, max_black]`` and split round-robin.
        difficulty (str): Label carried into the puzzle record.
        rule_max_nodes (Optional[int]): Node budget for the extra rule-set
            check; a board that exhausts it is rejected. ``None`` uses the
            generator's own budget.
    """

    white_pieces: Tuple[PieceKind, ...]
    min_black: int
    max_black: int
    max_attempts: int = 1000
    captures_per_piece: Optional[Tuple[int, int]] = None
    difficulty: str = "custom"
    rule_max_nodes: Optional[int] = None

    @classmethod
    def for_difficulty(
        cls,
        difficulty: Difficulty,
        selected_kinds: Sequence[PieceKind] = (),
        rng: Optional[random.Random] = None,
    ) -> "GeneratorConfig":
        """Build a config from a preset, preferring the player's chosen kinds.

        Selected kinds are used first (shuffled); the preset's defaults fill in
        when the selection is shorter than the drawn piece count.
        """
        rng = rng or random.Random()
        lo, hi = difficulty.piece_range
        n = rng.randint(lo, hi)
        pool = [k for k in dict.fromkeys(selected_kinds) if k is not PieceKind.NONE]
        rng.shuffle(pool)
        defaults = [k for k in difficulty.default_kinds if k not in pool]
        rng.shuffle(defaults)
        kinds = tuple((pool + defaults)[:n])
        if len(kinds) < n:
            kinds = kinds + tuple(rng.choice(difficulty.default_kinds) for _ in range(n - len(kinds)))
        cap_lo, cap_hi = difficulty.captures_per_piece
        return cls(
            white_pieces=kinds,
            min_black=max(1, cap_lo * len(kinds)),
            max_black=cap_hi * len(kinds),
            max_attempts=difficulty.max_attempts,
            captures_per_piece=(cap_lo, cap_hi),
            difficulty=difficulty.label,
        )


@dataclass
class GeneratedPuzzle:
    board: Board
    solution: List[CaptureRecord]
    attempts: int
    paths: List[CapturePath]

    @property
    def black_count(self) -> int:
        return self.board.count(Side.BLACK)


class _Rejected(Exception):
    """Raised inside one attempt to abandon it."""


def expand_white_pieces(white_pieces: WhitePieces) -> Tuple[PieceKind, ...]:
    """Normalize a composition to one kind per piece.

    Accepts either a ``{kind: count}`` mapping or an iterable of kinds.

    Raises:
        ValueError: If the composition is empty, has a negative count or names
            ``PieceKind.NONE``.
    """
    if isinstance(white_pieces, Mapping):
        kinds: List[PieceKind] = []
        for kind, n in white_pieces.items():
            if n < 0:
                raise ValueError(f"negative count for {kind.name}")
            kinds.extend([kind] * n)
    else:
        kinds = list(white_pieces)
    if not kinds:
        raise ValueError("white_pieces must not be empty")
    if any(k is PieceKind.NONE for k in kinds):
        raise ValueError("white_pieces must not contain NONE")
    return tuple(kinds)


def distribute_captures(total: int, pieces: int) -> List[int]:
    """Split ``total`` round-robin over ``pieces`` slots (earlier slots get the remainder)."""
    counts = [0] * pieces
    for i in range(total):
        counts[i % pieces] += 1
    return counts


class PositionGenerator:
    """Randomized generator of solvable capture-all puzzles.

    Each attempt places the white pieces, walks every piece along a
    capture path to decide where black pieces go, fills those squares with
    random black kinds and accepts the board only if an independent solve
    clears it in exactly as many captures as there are black pieces.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        solver: Optional[CaptureSolver] = None,
        rule_max_nodes: int = DEFAULT_RULE_MAX_NODES,
    ) -> None:
        if rule_max_nodes < 1:
            raise ValueError("rule_max_nodes must be >= 1")
        self.rng = rng or random.Random()
        self.solver = solver or CaptureSolver()
        self.rule_max_nodes = rule_max_nodes

    def generate(
        self,
        white_pieces: WhitePieces,
        min_black: int,
        max_black: int,
        max_attempts: int = 1000,
        captures_per_piece: Optional[Tuple[int, int]] = None,
        rules: Optional[Rules] = None,
        rule_max_nodes: Optional[int] = None,
    ) -> Optional[GeneratedPuzzle]:
        """Generate a puzzle, or ``None`` when every attempt was rejected.

        Args:
            white_pieces (WhitePieces): Composition as a mapping or list of kinds.
            min_black (int): Fewest black pieces (>= 1).
            max_black (int): Most black pieces (>= ``min_black``).
            max_attempts (int): Attempts before giving up (>= 1).
            captures_per_piece (Optional[Tuple[int, int]]): Per-piece capture
                count range; see :class:`GeneratorConfig`.
            rules (Optional[Rules]): Extra rule set the board must also be
                solvable under.
            rule_max_nodes (Optional[int]): Overrides the generator's node
                budget for the ``rules`` check.

        Raises:
            ValueError: On an invalid configuration.
        """
        kinds = expand_white_pieces(white_pieces)
        if min_black < 1:
            raise ValueError("min_black must be >= 1")
        if max_black < min_black:
            raise ValueError("max_black must be >= min_black")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if len(kinds) + min_black > len(ALL_SQUARES):
            raise ValueError("too many pieces for the board")
        if captures_per_piece is not None:
            lo, hi = captures_per_piece
            if lo < 0 or hi < lo:
                raise ValueError("captures_per_piece must be a range with 0 <= lo <= hi")
        budget = self.rule_max_nodes if rule_max_nodes is None else rule_max_nodes
        if budget < 1:
            raise ValueError("rule_max_nodes must be >= 1")

        for attempt in range(1, max_attempts + 1):
            try:
                board, paths = self._attempt(kinds, min_black, max_black, captures_per_piece)
                solution = self._verify(board, rules, budget)
            except _Rejected as e:
                logger.debug("attempt rejected", extra={"attempt": attempt, "reason": str(e)})
                continue
            logger.info(
                "puzzle generated",
                extra={"attempts": attempt, "black": board.count(Side.BLACK), "fen": board.to_fen()},
            )
            return GeneratedPuzzle(board, solution, attempt, paths)

        logger.warning(
            "no solvable position found",
            extra={"white": "".join(k.value for k in kinds), "max_attempts": max_attempts},
        )
        return None

    def generate_config(self, config: GeneratorConfig, rules: Optional[Rules] = None) -> Optional[GeneratedPuzzle]:
        return self.generate(
            config.white_pieces,
            config.min_black,
            config.max_black,
            max_attempts=config.max_attempts,
            captures_per_piece=config.captures_per_piece,
            rules=rules,
            rule_max_nodes=config.rule_max_nodes,
        )

    def generate_record(self, config: GeneratorConfig, rules: Optional[Rules] = None) -> Optional[PuzzleRecord]:
        """Generate and wrap the result in a :class:`PuzzleRecord`."""
        puzzle = self.generate_config(config, rules)
        if puzzle is None:
            return None
        return PuzzleRecord.from_solution(
            puzzle.board,
            puzzle.solution,
            difficulty=config.difficulty,
            black_range=(config.min_black, config.max_black),
        )

    def generate_for_difficulty(
        self,
        difficulty: Difficulty,
        selected_kinds: Sequence[PieceKind] = (),
        rules: Optional[Rules] = None,
    ) -> Optional[PuzzleRecord]:
        config = GeneratorConfig.for_difficulty(difficulty, selected_kinds, self.rng)
        return self.generate_record(config, rules)

    def _attempt(
        self,
        kinds: Tuple[PieceKind, ...],
        min_black: int,
        max_black: int,
        captures_per_piece: Optional[Tuple[int, int]],
    ) -> Tuple[Board, List[CapturePath]]:
        rng = self.rng
        board = Board.empty()
        whites: List[Tuple[Square, Piece]] = []
        for kind in kinds:
            empties = [sq for sq in ALL_SQUARES if board.is_empty(sq)]
            if not empties:
                raise _Rejected("no empty square for white piece")
            sq = rng.choice(empties)
            piece = Piece(kind, Side.WHITE)
            board = board.set(sq, piece)
            whites.append((sq, piece))

        if captures_per_piece is not None:
            lo, hi = captures_per_piece
            counts = [rng.randint(lo, hi) for _ in whites]
        else:
            counts = distribute_captures(rng.randint(min_black, max_black), len(whites))

        reserved = {sq for sq, _ in whites}
        paths: List[CapturePath] = []
        targets: List[Square] = []
        for (sq, piece), n in zip(whites, counts):
            path = find_capture_path(board, piece, sq, n, reserved, rng)
            if path is None or len(path) != n:
                raise _Rejected(f"no capture path of {n} for {piece}@{sq}")
            reserved |= path.squares
            paths.append(path)
            targets.extend(path.targets)

        if not min_black <= len(targets) <= max_black:
            raise _Rejected(f"black count {len(targets)} outside range")

        for sq in targets:
            kind = rng.choice(BLACK_KINDS)
            if kind is PieceKind.PAWN and sq.rank in (1, 8):
                raise _Rejected(f"black pawn on {sq}")
            if not board.is_empty(sq):
                raise _Rejected(f"target {sq} already occupied")
            board = board.set(sq, Piece(kind, Side.BLACK))
        return board, paths

    def _verify(self, board: Board, rules: Optional[Rules], max_nodes: int) -> List[CaptureRecord]:
        result = self.solver.solve(board)
        black = board.count(Side.BLACK)
        if result.captures is None or len(result.captures) != black:
            raise _Rejected("capture solver did not clear the board")
        if rules is not None:
            outcome = RuleSolver(rules, max_nodes=max_nodes).solve(board)
            if not outcome.solved:
                raise _Rejected(f"not solvable under {rules.name}: {outcome.message}")
        return result.captures
