from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from ..engine.board import Board, Piece, PieceKind, Side
from ..engine.move import Move, Square
from ..engine.movegen import capture_moves, is_path_clear


logger = logging.getLogger(__name__)


# Queen > Rook > Bishop > Knight, then the short-range pieces.
KIND_ORDER: Dict[PieceKind, int] = {
    PieceKind.QUEEN: 5,
    PieceKind.ROOK: 4,
    PieceKind.BISHOP: 3,
    PieceKind.KNIGHT: 2,
    PieceKind.KING: 1,
    PieceKind.PAWN: 0,
}


@dataclass(frozen=True)
class CaptureRecord:
    """One capture in a solution.

    Attributes:
        from_square (Square): Square the white piece moved from.
        to_square (Square): Square of the captured piece.
        captured (Piece): The black piece removed.
        mover (Piece): The white piece that moved.
    """

    from_square: Square
    to_square: Square
    captured: Piece
    mover: Piece

    @property
    def move(self) -> Move:
        return Move(self.from_square, self.to_square)

    def uci(self) -> str:
        return self.move.to_uci()

    def __str__(self) -> str:
        return f"{self.from_square}-{self.to_square}"


@dataclass(frozen=True)
class _Trail:
    """Persistent append-only capture list shared between search branches."""

    record: CaptureRecord
    parent: Optional["_Trail"]
    length: int

    def to_list(self) -> List[CaptureRecord]:
        out: List[CaptureRecord] = []
        node: Optional[_Trail] = self
        while node is not None:
            out.append(node.record)
            node = node.parent
        out.reverse()
        return out


def _extend(trail: Optional[_Trail], record: CaptureRecord) -> _Trail:
    return _Trail(record, trail, 1 if trail is None else trail.length + 1)


@dataclass
class SolveResult:
    captures: Optional[List[CaptureRecord]]
    nodes: int
    time_ms: int
    budget_exhausted: bool = False

    @property
    def found(self) -> bool:
        return self.captures is not None


class _NodeBudgetExceeded(Exception):
    pass


class CaptureSolver:
    """Depth-first backtracking solver for capture-everything puzzles.

    Every move must be a white piece capturing a black piece; a solution
    removes all black pieces in exactly as many moves as there were black
    pieces. Visited boards are memoized on their FEN placement.

    Notes:
    - Piece ordering (Queen first) only speeds up the search; the returned
      solution is any complete sequence, not necessarily a preferred one.
    """

    def __init__(self, max_nodes: Optional[int] = None) -> None:
        if max_nodes is not None and max_nodes < 1:
            raise ValueError("max_nodes must be >= 1")
        self.max_nodes = max_nodes

    def solve(self, board: Board) -> SolveResult:
        start = time.perf_counter()
        target = board.count(Side.BLACK)

        def elapsed_ms() -> int:
            return int((time.perf_counter() - start) * 1000)

        if target == 0:
            return SolveResult(captures=[], nodes=0, time_ms=elapsed_ms())
        if board.count(Side.WHITE) == 0:
            logger.debug("no white pieces to solve with", extra={"fen": board.to_fen()})
            return SolveResult(captures=None, nodes=0, time_ms=elapsed_ms())

        visited: Set[str] = set()
        nodes = 0

        def search(b: Board, trail: Optional[_Trail]) -> Optional[_Trail]:
            nonlocal nodes
            key = b.placement
            if key in visited:
                return None
            visited.add(key)
            nodes += 1
            if self.max_nodes is not None and nodes > self.max_nodes:
                raise _NodeBudgetExceeded()

            depth = 0 if trail is None else trail.length
            if b.count(Side.BLACK) == 0:
                return trail if depth == target else None
            if depth >= target:
                return None

            for origin, piece in _ordered_white(b):
                for move in capture_moves(b, origin):
                    captured = b.get(move.end)
                    if captured.side is not Side.BLACK:
                        continue
                    if not is_path_clear(b, origin, move.end, piece.kind):
                        continue
                    record = CaptureRecord(origin, move.end, captured, piece)
                    found = search(b.move(origin, move.end), _extend(trail, record))
                    if found is not None:
                        return found
            return None

        try:
            trail = search(board, None)
        except _NodeBudgetExceeded:
            logger.warning(
                "capture solver node budget exhausted",
                extra={"fen": board.to_fen(), "max_nodes": self.max_nodes},
            )
            return SolveResult(captures=None, nodes=nodes, time_ms=elapsed_ms(), budget_exhausted=True)

        captures = trail.to_list() if trail is not None else None
        logger.debug(
            "capture solver finished",
            extra={"fen": board.to_fen(), "found": captures is not None, "nodes": nodes},
        )
        return SolveResult(captures=captures, nodes=nodes, time_ms=elapsed_ms())


def _ordered_white(board: Board) -> List[Tuple[Square, Piece]]:
    whites = board.pieces(Side.WHITE).items()
    return sorted(whites, key=lambda kv: (-KIND_ORDER.get(kv[1].kind, 0), kv[0].rank, kv[0].file))


def solve_captures(board: Board) -> Optional[List[CaptureRecord]]:
    """Ordered captures clearing every black piece, or ``None`` when impossible."""
    return CaptureSolver().solve(board).captures


def replay(board: Board, captures: List[CaptureRecord]) -> Board:
    """Apply a capture sequence, checking each step is a legal capture.

    Raises:
        ValueError: If a step does not move a white piece onto a black piece
            along a legal, unobstructed line.
    """
    current = board
    for rec in captures:
        mover = current.get(rec.from_square)
        if mover.side is not Side.WHITE:
            raise ValueError(f"no white piece on {rec.from_square}")
        if Move(rec.from_square, rec.to_square) not in capture_moves(current, rec.from_square):
            raise ValueError(f"illegal capture {rec}")
        current = current.move(rec.from_square, rec.to_square)
    return current
