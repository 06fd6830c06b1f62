from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import AbstractSet, Deque, FrozenSet, List, Optional, Set, Tuple

from ..engine.board import Board, Piece, PieceKind
from ..engine.move import Square
from ..engine.movegen import attacked_squares, raw_destinations, squares_between


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapturePath:
    """A walk of one piece that lands on each target square in order.

    Attributes:
        start (Square): Square the piece starts from.
        targets (Tuple[Square, ...]): Landing squares in walk order; these are
            where black pieces get placed.
        transit (FrozenSet[Square]): Squares crossed by sliding moves, not
            including the landing squares.
    """

    start: Square
    targets: Tuple[Square, ...]
    transit: FrozenSet[Square]

    @property
    def squares(self) -> FrozenSet[Square]:
        return frozenset(self.targets)

    def __len__(self) -> int:
        return len(self.targets)


@dataclass(frozen=True)
class _State:
    square: Square
    targets: Tuple[Square, ...]
    visited: FrozenSet[Square]
    transit: FrozenSet[Square]


def capture_reach(board: Board, square: Square, piece: Piece) -> List[Square]:
    """Empty squares the piece could later capture on, standing on ``square``.

    Pawns only capture diagonally, so their reach is the forward diagonals;
    every other kind captures along its normal movement geometry.
    """
    if piece.kind is PieceKind.PAWN:
        cands = sorted(attacked_squares(board, square, piece), key=lambda s: (s.rank, s.file))
    else:
        cands = raw_destinations(board, square, piece)
    return [sq for sq in cands if board.is_empty(sq)]


def find_capture_path(
    board: Board,
    piece: Piece,
    start: Square,
    count: int,
    reserved: AbstractSet[Square],
    rng: Optional[random.Random] = None,
) -> Optional[CapturePath]:
    """Breadth-first search for ``count`` distinct empty squares one piece can visit.

    Args:
        board (Board): Position the walk is played on; other pieces block
            sliders and occupy squares. The mover itself is lifted off
            ``start`` before searching.
        piece (Piece): The walking piece.
        start (Square): Its starting square.
        count (int): Number of landing squares wanted.
        reserved (AbstractSet[Square]): Squares no landing or transit may touch
            (occupied squares and targets already claimed by other pieces).
        rng (Optional[random.Random]): Source for shuffling expansion order.

    Returns:
        Optional[CapturePath]: A path with exactly ``count`` targets, or
            ``None`` when the search space is exhausted.

    Raises:
        ValueError: If ``count`` is negative or ``piece`` is empty.

    Notes:
        States are deduplicated on ``(square, targets collected)``, which
        bounds branching at the cost of skipping some alternative walks.
        A walk never revisits its own landing or transit squares.
    """
    if count < 0:
        raise ValueError("count must be >= 0")
    if piece.is_none:
        raise ValueError("piece must not be empty")
    if count == 0:
        return CapturePath(start, (), frozenset())
    rng = rng or random.Random()
    probe = board.remove(start)

    root = _State(start, (), frozenset({start}), frozenset())
    queue: Deque[_State] = deque([root])
    seen: Set[Tuple[Square, int]] = {(start, 0)}
    expanded = 0

    while queue:
        state = queue.popleft()
        expanded += 1
        options = capture_reach(probe, state.square, piece)
        rng.shuffle(options)
        for dest in options:
            if dest in reserved or dest in state.visited:
                continue
            between = squares_between(state.square, dest) if piece.kind.is_slider else []
            if any(sq in reserved or sq in state.visited for sq in between):
                continue
            targets = state.targets + (dest,)
            transit = state.transit.union(between)
            if len(targets) == count:
                logger.debug(
                    "capture path found",
                    extra={"piece": piece.to_char(), "start": str(start), "expanded": expanded},
                )
                return CapturePath(start, targets, transit)
            key = (dest, len(targets))
            if key in seen:
                continue
            seen.add(key)
            queue.append(_State(dest, targets, state.visited.union(between, (dest,)), transit))

    logger.debug(
        "capture path exhausted",
        extra={"piece": piece.to_char(), "start": str(start), "count": count, "expanded": expanded},
    )
    return None


def find_capture_targets(
    board: Board,
    piece: Piece,
    start: Square,
    count: int,
    reserved: AbstractSet[Square],
    rng: Optional[random.Random] = None,
) -> Optional[FrozenSet[Square]]:
    """Target squares of :func:`find_capture_path`, as an unordered set."""
    path = find_capture_path(board, piece, start, count, reserved, rng)
    return None if path is None else path.squares
