from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from ..engine.board import Board, PieceKind, Side
from ..engine.move import Square, parse_uci
from ..search.solver import CaptureRecord, replay


@dataclass(frozen=True)
class SolutionMove:
    mover_kind: PieceKind
    initial_square: Square
    uci: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "moverPieceKind": self.mover_kind.name,
            "initialSquare": str(self.initial_square),
            "moveUCI": self.uci,
        }


@dataclass(frozen=True)
class PuzzleRecord:
    """A verified puzzle together with its solution.

    Built from a board and a capture sequence that clears it; the sequence is
    replayed on construction through :meth:`from_solution`, so a record never
    holds an unsolved position.

    Attributes:
        difficulty (str): Preset label or ``"custom"``.
        fen (str): Starting position.
        solution (Tuple[CaptureRecord, ...]): Ordered captures clearing the board.
        black_range (Tuple[int, int]): Black piece count range it was generated for.
    """

    difficulty: str
    fen: str
    solution: Tuple[CaptureRecord, ...]
    black_range: Tuple[int, int]

    @classmethod
    def from_solution(
        cls,
        board: Board,
        solution: Sequence[CaptureRecord],
        difficulty: str = "custom",
        black_range: Tuple[int, int] = (0, 0),
    ) -> "PuzzleRecord":
        """Raises ValueError when ``solution`` does not clear ``board``."""
        final = replay(board, list(solution))
        if final.count(Side.BLACK):
            raise ValueError("solution leaves black pieces on the board")
        if black_range == (0, 0):
            black_range = (len(solution), len(solution))
        return cls(difficulty, board.to_fen(), tuple(solution), black_range)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PuzzleRecord":
        """Rebuild a record from :meth:`to_dict` output by replaying ``solutionMoves``."""
        board = Board.from_fen(data["fen"], strict=True)
        current = board
        captures: List[CaptureRecord] = []
        for entry in data.get("solutionMoves", []):
            move = parse_uci(entry["moveUCI"])
            if move is None:
                raise ValueError(f"bad move {entry['moveUCI']!r}")
            captures.append(CaptureRecord(move.start, move.end, current.get(move.end), current.get(move.start)))
            current = current.move(move.start, move.end)
        n = len(captures)
        return cls.from_solution(
            board,
            captures,
            difficulty=data.get("difficulty", "custom"),
            black_range=tuple(data.get("blackRange", (n, n))),
        )

    @property
    def board(self) -> Board:
        return Board.from_fen(self.fen)

    @property
    def solution_length(self) -> int:
        return len(self.solution)

    @property
    def total_black_captured(self) -> int:
        return sum(1 for rec in self.solution if rec.captured.side is Side.BLACK)

    @property
    def white_pieces(self) -> Dict[PieceKind, int]:
        out: Dict[PieceKind, int] = {}
        for piece in self.board.pieces(Side.WHITE).values():
            out[piece.kind] = out.get(piece.kind, 0) + 1
        return out

    @property
    def solution_moves(self) -> List[SolutionMove]:
        """Each capture tagged with the mover's square in the starting position."""
        origin = {sq: sq for sq in self.board.pieces(Side.WHITE)}
        out: List[SolutionMove] = []
        for rec in self.solution:
            initial = origin.pop(rec.from_square)
            origin[rec.to_square] = initial
            out.append(SolutionMove(rec.mover.kind, initial, rec.uci()))
        return out

    @property
    def captures_by_piece(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for mv in self.solution_moves:
            key = f"{mv.mover_kind.name}@{mv.initial_square}"
            out[key] = out.get(key, 0) + 1
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "difficulty": self.difficulty,
            "whitePiecesConfig": {k.name: n for k, n in self.white_pieces.items()},
            "fen": self.fen,
            "blackRange": list(self.black_range),
            "solutionLength": self.solution_length,
            "totalBlackCaptured": self.total_black_captured,
            "capturesByPiece": self.captures_by_piece,
            "solutionMoves": [mv.to_dict() for mv in self.solution_moves],
        }
