from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Set, Tuple

from ..engine.board import Board, Side
from ..engine.move import Move, Square
from .rules import Rules


logger = logging.getLogger(__name__)


@dataclass
class PuzzleSolution:
    solved: bool
    moves: List[Move]
    final_board: Board
    message: str = ""
    nodes: int = 0

    def move_history_uci(self) -> List[str]:
        return [m.to_uci() for m in self.moves]


@dataclass(frozen=True)
class _Node:
    board: Board
    moves: Tuple[Move, ...]
    mover: Optional[Square]


@dataclass
class RuleSolver:
    """Breadth-first solver over board states for any :class:`Rules` set.

    Responsibility: expand ``rules.legal_moves`` level by level and return the
    first path reaching ``rules.is_goal_reached``. States are keyed on the FEN
    placement plus the square of the last piece moved.

    Notes:
    - BFS gives the shortest solution in move count, ties broken by the order
      the rules list their moves.
    - ``max_depth`` and ``max_nodes`` bound the search; hitting either is
      reported as not solved; the budget case says so in ``message``.
    """

    rules: Rules
    max_depth: Optional[int] = None
    max_nodes: Optional[int] = None

    def solve(self, board: Board, side: Side = Side.WHITE) -> PuzzleSolution:
        first = next((sq for sq, p in board if p.side is side), None)
        queue: Deque[_Node] = deque([_Node(board, (), first)])
        visited: Set[Tuple[str, Optional[Square]]] = {(board.placement, first)}
        nodes = 0

        while queue:
            node = queue.popleft()
            nodes += 1
            if self.rules.is_goal_reached(node.board):
                logger.debug(
                    "rule solver found goal",
                    extra={"rules": self.rules.name, "nodes": nodes, "length": len(node.moves)},
                )
                return PuzzleSolution(True, list(node.moves), node.board, "solved", nodes)
            if self.max_nodes is not None and nodes >= self.max_nodes:
                logger.warning(
                    "rule solver node budget exhausted",
                    extra={"rules": self.rules.name, "max_nodes": self.max_nodes},
                )
                return PuzzleSolution(False, [], board, "node budget exhausted", nodes)
            if self.max_depth is not None and len(node.moves) >= self.max_depth:
                continue
            for move in self.rules.legal_moves(node.board, side):
                nxt = node.board.move(move.start, move.end)
                key = (nxt.placement, move.end)
                if key in visited:
                    continue
                visited.add(key)
                queue.append(_Node(nxt, node.moves + (move,), move.end))

        logger.debug("rule solver found no solution", extra={"rules": self.rules.name, "nodes": nodes})
        return PuzzleSolution(False, [], board, "no solution found", nodes)
