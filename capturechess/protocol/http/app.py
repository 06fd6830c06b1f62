from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    UNPROCESSABLE,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    value_error_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore, PuzzleSession
from ...engine.board import Board, PieceKind, Side
from ...engine.move import parse_uci
from ...puzzle.game import PuzzleGame
from ...puzzle.generator import Difficulty, GeneratorConfig, PositionGenerator
from ...puzzle.record import PuzzleRecord
from ...search.bfs import RuleSolver
from ...search.rules import CaptureAllRules, Rules, rules_by_name
from ...search.solver import CaptureSolver


logger = logging.getLogger(__name__)

RulesName = Literal["capture_all", "safe_landing", "capture_king"]
DifficultyName = Literal["easy", "medium", "hard"]


class SolveRequest(BaseModel):
    fen: str = Field(..., description="FEN string; only the placement field is read")
    rules: RulesName = "capture_all"
    max_nodes: Optional[int] = Field(default=None, ge=1, le=5_000_000)


class SolveResponse(BaseModel):
    solved: bool
    rules: str
    moves: List[str]
    nodes: int
    message: str


class GenerateRequest(BaseModel):
    white_pieces: Dict[str, int] = Field(default_factory=dict, description='e.g. {"QUEEN": 1}')
    min_black: int = Field(default=1, ge=1, le=63)
    max_black: int = Field(default=4, ge=1, le=63)
    max_attempts: int = Field(default=1000, ge=1, le=10_000)
    seed: Optional[int] = None
    difficulty: Optional[DifficultyName] = None
    rules: Optional[RulesName] = None


class CreatePuzzleRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="Start from this position instead of generating")
    rules: RulesName = "capture_all"
    difficulty: DifficultyName = "easy"
    seed: Optional[int] = None


class MoveRequest(BaseModel):
    move: str = Field(..., description="UCI move string, e.g., a1a5")


class PuzzleState(BaseModel):
    puzzle_id: str
    fen: str
    rules: str
    legal_moves: List[str]
    black_remaining: int
    solved: bool
    stuck: bool
    last_move: Optional[str]
    move_history: List[str]
    solution_length: Optional[int] = None


def create_app() -> FastAPI:
    app = FastAPI(title="Capture Chess Puzzle API", version="0.1.0")

    logging.basicConfig(level=logging.INFO)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/solve", response_model=SolveResponse)
    def solve(req: SolveRequest) -> SolveResponse:
        board = _parse_board(req.fen)
        if req.rules == CaptureAllRules.name:
            result = CaptureSolver(max_nodes=req.max_nodes).solve(board)
            moves = [rec.uci() for rec in result.captures or []]
            if result.budget_exhausted:
                message = "node budget exhausted"
            else:
                message = "solved" if result.found else "no solution found"
            return SolveResponse(
                solved=result.found, rules=req.rules, moves=moves, nodes=result.nodes, message=message
            )
        solution = RuleSolver(rules_by_name(req.rules), max_nodes=req.max_nodes).solve(board)
        return SolveResponse(
            solved=solution.solved,
            rules=req.rules,
            moves=solution.move_history_uci(),
            nodes=solution.nodes,
            message=solution.message,
        )

    @app.post("/api/puzzles/generate")
    def generate(req: GenerateRequest) -> Dict[str, Any]:
        record = _generate(req)
        return record.to_dict()

    @app.post("/api/puzzles", response_model=PuzzleState)
    def create_puzzle(req: CreatePuzzleRequest) -> PuzzleState:
        rules = rules_by_name(req.rules)
        record: Optional[PuzzleRecord] = None
        if req.fen is not None:
            board = _parse_board(req.fen)
        else:
            record = _generate(GenerateRequest(difficulty=req.difficulty, seed=req.seed, rules=req.rules))
            board = record.board
        puzzle_id = store.create(PuzzleSession(PuzzleGame(board, rules), record))
        logger.info("puzzle session created", extra={"puzzle_id": puzzle_id, "fen": board.to_fen()})
        return _state(puzzle_id, _require_session(store, puzzle_id))

    @app.get("/api/puzzles/{puzzle_id}/state", response_model=PuzzleState)
    async def get_state(puzzle_id: str) -> PuzzleState:
        return _state(puzzle_id, _require_session(store, puzzle_id))

    @app.post("/api/puzzles/{puzzle_id}/move", response_model=PuzzleState)
    def make_move(puzzle_id: str, req: MoveRequest) -> PuzzleState:
        session = _require_session(store, puzzle_id)
        game = session.game
        move = parse_uci(req.move)
        if move is None:
            raise HTTPException(status_code=400, detail=f"invalid move: {req.move}")
        try:
            game.apply_move(move)
        except ValueError:
            raise HTTPException(status_code=400, detail="illegal move")
        return _state(puzzle_id, session)

    @app.post("/api/puzzles/{puzzle_id}/undo", response_model=PuzzleState)
    async def undo(puzzle_id: str) -> PuzzleState:
        session = _require_session(store, puzzle_id)
        game = session.game
        try:
            game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state(puzzle_id, session)

    @app.get("/api/puzzles/{puzzle_id}/hint")
    def hint(puzzle_id: str) -> Dict[str, Optional[str]]:
        game = _require_session(store, puzzle_id).game
        move = game.hint()
        return {"hint": move.to_uci() if move else None}

    return app


def _parse_board(fen: str) -> Board:
    try:
        return Board.from_fen(fen, strict=True)
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid FEN")


def _parse_kind(name: str) -> PieceKind:
    try:
        kind = PieceKind[name.upper()]
    except KeyError:
        kind = PieceKind.from_char(name) if len(name) == 1 else PieceKind.NONE
    if kind is PieceKind.NONE:
        raise HTTPException(status_code=400, detail=f"unknown piece kind: {name}")
    return kind


def _generate(req: GenerateRequest) -> PuzzleRecord:
    rules: Optional[Rules] = None
    if req.rules and req.rules != CaptureAllRules.name:
        rules = rules_by_name(req.rules)
    gen = PositionGenerator(rng=random.Random(req.seed))
    kinds = {_parse_kind(name): n for name, n in req.white_pieces.items()}
    if req.difficulty is not None:
        config = GeneratorConfig.for_difficulty(Difficulty[req.difficulty.upper()], list(kinds), gen.rng)
    else:
        if not kinds:
            raise HTTPException(status_code=UNPROCESSABLE, detail="white_pieces is required without difficulty")
        config = GeneratorConfig(
            white_pieces=tuple(k for k, n in kinds.items() for _ in range(n)),
            min_black=req.min_black,
            max_black=req.max_black,
            max_attempts=req.max_attempts,
        )
    record = gen.generate_record(config, rules)
    if record is None:
        raise HTTPException(status_code=UNPROCESSABLE, detail="no solvable position found")
    return record


def _state(puzzle_id: str, session: PuzzleSession) -> PuzzleState:
    game = session.game
    history = game.move_history_uci()
    return PuzzleState(
        puzzle_id=puzzle_id,
        fen=game.to_fen(),
        rules=game.rules.name,
        legal_moves=[m.to_uci() for m in game.legal_moves()],
        black_remaining=game.board.count(Side.BLACK),
        solved=game.is_solved(),
        stuck=game.is_stuck(),
        last_move=history[-1] if history else None,
        move_history=history,
        solution_length=session.record.solution_length if session.record else None,
    )


def _require_session(store: InMemorySessionStore, puzzle_id: str) -> PuzzleSession:
    session = store.get(puzzle_id)
    if session is None:
        raise HTTPException(status_code=404, detail="puzzle not found")
    return session


app = create_app()
