from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Set, Type

from ..engine.board import Board, PieceKind, Side
from ..engine.move import Move, Square
from ..engine.movegen import attacked_squares, is_square_attacked, moves_for_side


class Rules(Protocol):
    """Variant rules consumed by :class:`~capturechess.search.bfs.RuleSolver`.

    ``legal_moves`` returns moves already filtered for the variant; the solver
    applies them without further checks.
    """

    name: str

    def is_goal_reached(self, board: Board) -> bool: ...

    def legal_moves(self, board: Board, side: Side) -> List[Move]: ...


def lands_safely(board: Board, move: Move, side: Side) -> bool:
    """True when the mover is not attacked on ``move.end`` after the move."""
    after = board.move(move.start, move.end)
    return not is_square_attacked(after, move.end, side.opponent)


def safe_moves(board: Board, side: Side, captures_only: bool = False) -> List[Move]:
    """Moves of ``side`` that satisfy :func:`lands_safely`.

    Enemy attacks are computed once per moving piece, with that piece lifted
    off the board. Whatever stands on the landing square never changes whether
    it is attacked, so a capture only drops the captured piece's own attacks.
    """
    enemy = side.opponent
    out: List[Move] = []
    origin: Optional[Square] = None
    attacks: Dict[Square, Set[Square]] = {}
    for m in moves_for_side(board, side):
        if captures_only and board.get(m.end).side is not enemy:
            continue
        if m.start != origin:
            origin = m.start
            lifted = board.remove(origin)
            attacks = {sq: attacked_squares(lifted, sq, p) for sq, p in lifted.pieces(enemy).items()}
        if not any(m.end in hit for sq, hit in attacks.items() if sq != m.end):
            out.append(m)
    return out


class CaptureAllRules:
    """Every move captures an opposing piece; solved when Black has nothing left."""

    name = "capture_all"

    def is_goal_reached(self, board: Board) -> bool:
        return board.count(Side.BLACK) == 0

    def legal_moves(self, board: Board, side: Side) -> List[Move]:
        enemy = side.opponent
        return [m for m in moves_for_side(board, side) if board.get(m.end).side is enemy]


class SafeLandingRules:
    """Clear the board without ever ending a move on an attacked square.

    Quiet moves are allowed unless ``captures_only`` is set.
    """

    name = "safe_landing"

    def __init__(self, captures_only: bool = False) -> None:
        self.captures_only = captures_only

    def is_goal_reached(self, board: Board) -> bool:
        return board.count(Side.BLACK) == 0

    def legal_moves(self, board: Board, side: Side) -> List[Move]:
        return safe_moves(board, side, self.captures_only)


class CaptureKingRules:
    """Reach and take the black king, landing only on unattacked squares.

    When a safe capture of the king is available, only those moves are offered.
    """

    name = "capture_king"

    def is_goal_reached(self, board: Board) -> bool:
        return not board.find(PieceKind.KING, Side.BLACK)

    def legal_moves(self, board: Board, side: Side) -> List[Move]:
        safe = safe_moves(board, side)
        enemy = side.opponent
        king_takes = [
            m for m in safe if board.get(m.end).kind is PieceKind.KING and board.get(m.end).side is enemy
        ]
        return king_takes or safe


RULES: Dict[str, Type] = {
    CaptureAllRules.name: CaptureAllRules,
    SafeLandingRules.name: SafeLandingRules,
    CaptureKingRules.name: CaptureKingRules,
}


def rules_by_name(name: str) -> Rules:
    """Instantiate a rule set by its ``name``.

    Raises:
        ValueError: If no rule set has that name.
    """
    try:
        return RULES[name]()
    except KeyError:
        raise ValueError(f"unknown rules: {name!r}") from None
