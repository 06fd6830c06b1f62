from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..engine.board import Board, Side
from ..engine.move import Move
from ..search.bfs import RuleSolver
from ..search.rules import CaptureAllRules, Rules
from ..search.solver import CaptureRecord, CaptureSolver


DEFAULT_HINT_MAX_NODES = 50_000


@dataclass
class PuzzleGame:
    """Interactive puzzle wrapper around a board and a rule set.

    Responsibility: track board state, expose the rule set's legal moves,
    apply and undo White's moves.
    """

    board: Board
    rules: Rules = field(default_factory=CaptureAllRules)
    move_stack: List[CaptureRecord] = field(default_factory=list)
    history: List[Board] = field(default_factory=list)
    hint_max_nodes: int = DEFAULT_HINT_MAX_NODES

    @classmethod
    def from_fen(
        cls, fen: str, rules: Optional[Rules] = None, hint_max_nodes: int = DEFAULT_HINT_MAX_NODES
    ) -> "PuzzleGame":
        return cls(board=Board.from_fen(fen), rules=rules or CaptureAllRules(), hint_max_nodes=hint_max_nodes)

    def to_fen(self) -> str:
        return self.board.to_fen()

    def legal_moves(self) -> List[Move]:
        return self.rules.legal_moves(self.board, Side.WHITE)

    def apply_move(self, move: Move) -> CaptureRecord:
        if move not in self.legal_moves():
            raise ValueError("illegal move")
        rec = CaptureRecord(move.start, move.end, self.board.get(move.end), self.board.get(move.start))
        self.history.append(self.board)
        self.move_stack.append(rec)
        self.board = self.board.move(move.start, move.end)
        return rec

    def undo_move(self) -> CaptureRecord:
        if not self.move_stack:
            raise ValueError("no moves to undo")
        self.board = self.history.pop()
        return self.move_stack.pop()

    # --- State flags for protocol ---
    def is_solved(self) -> bool:
        return self.rules.is_goal_reached(self.board)

    def is_stuck(self) -> bool:
        return not self.is_solved() and not self.legal_moves()

    @property
    def captures(self) -> List[CaptureRecord]:
        return [rec for rec in self.move_stack if not rec.captured.is_none]

    def move_history_uci(self) -> List[str]:
        return [rec.uci() for rec in self.move_stack]

    def hint(self) -> Optional[Move]:
        """First move of a fresh solve from the current position, if any.

        The solve is bounded by ``hint_max_nodes``; running out gives no hint.
        """
        if self.is_solved():
            return None
        if isinstance(self.rules, CaptureAllRules):
            captures = CaptureSolver(max_nodes=self.hint_max_nodes).solve(self.board).captures
            return captures[0].move if captures else None
        solution = RuleSolver(self.rules, max_nodes=self.hint_max_nodes).solve(self.board)
        return solution.moves[0] if solution.solved and solution.moves else None
