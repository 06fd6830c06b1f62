#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
from typing import List

try:
    import chess
except ImportError:
    print(
        "Missing dependency: python-chess. Please install it (e.g., pip install chess)",
        file=sys.stderr,
    )
    raise

# Ensure repo root (which contains `capturechess/`) is importable when running directly
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from capturechess.engine.board import Board
from capturechess.search.bfs import RuleSolver
from capturechess.search.rules import CaptureAllRules, rules_by_name
from capturechess.search.solver import CaptureSolver


def cross_check(fen: str, moves: List[str]) -> bool:
    """Replay White's moves with python-chess, handing White the turn before each one."""
    board = chess.Board(fen)
    for uci in moves:
        board.turn = chess.WHITE
        move = chess.Move.from_uci(uci)
        piece = board.piece_at(move.from_square)
        if piece is not None and piece.piece_type == chess.PAWN and chess.square_rank(move.to_square) == 7:
            # python-chess requires a promotion piece on the last rank
            move.promotion = chess.QUEEN
        if not board.is_pseudo_legal(move):
            return False
        board.push(move)
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Solve a puzzle position")
    parser.add_argument("fen", type=str, help="FEN string (placement field is enough)")
    parser.add_argument("--rules", default=CaptureAllRules.name, help="Rule set name")
    parser.add_argument("--max-nodes", type=int, default=None, help="Search node budget")
    parser.add_argument("--verify", action="store_true", help="Replay the solution with python-chess")
    parser.add_argument("--diagram", action="store_true", help="Print the board first")
    args = parser.parse_args()

    try:
        board = Board.from_fen(args.fen, strict=True)
    except ValueError as e:
        raise SystemExit(f"invalid FEN: {e}")
    if args.diagram:
        print(board.diagram())

    if args.rules == CaptureAllRules.name:
        result = CaptureSolver(max_nodes=args.max_nodes).solve(board)
        moves = [rec.uci() for rec in result.captures or []]
        print(f"found={result.found} nodes={result.nodes} time_ms={result.time_ms}")
        found = result.found
    else:
        solution = RuleSolver(rules_by_name(args.rules), max_nodes=args.max_nodes).solve(board)
        moves = solution.move_history_uci()
        print(f"found={solution.solved} nodes={solution.nodes} message={solution.message}")
        found = solution.solved

    if found:
        print(" ".join(moves) if moves else "(already solved)")
        if args.verify:
            ok = cross_check(board.to_fen(), moves)
            print(f"python-chess replay: {'ok' if ok else 'MISMATCH'}")
            if not ok:
                raise SystemExit(2)
    else:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
