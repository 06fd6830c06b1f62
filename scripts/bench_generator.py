#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import random
import statistics
import sys
import time
from typing import Any, Dict, List

# Ensure repo root (which contains `capturechess/`) is importable when running directly
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from capturechess.puzzle.generator import Difficulty, GeneratorConfig, PositionGenerator
from capturechess.search.solver import CaptureSolver


def bench_difficulty(
    difficulty: Difficulty, runs: int, seed: int, max_nodes: int
) -> Dict[str, Any]:
    rng = random.Random(seed)
    gen = PositionGenerator(rng=rng, solver=CaptureSolver(max_nodes=max_nodes))
    times: List[int] = []
    attempts: List[int] = []
    blacks: List[int] = []
    failures = 0
    for _ in range(max(1, runs)):
        config = GeneratorConfig.for_difficulty(difficulty, rng=rng)
        t0 = time.perf_counter()
        puzzle = gen.generate_config(config)
        times.append(int((time.perf_counter() - t0) * 1000))
        if puzzle is None:
            failures += 1
            continue
        attempts.append(puzzle.attempts)
        blacks.append(puzzle.black_count)

    return {
        "difficulty": difficulty.label,
        "runs": runs,
        "failures": failures,
        "time_ms_mean": int(statistics.mean(times)),
        "time_ms_max": max(times),
        "attempts_mean": round(statistics.mean(attempts), 2) if attempts else None,
        "black_mean": round(statistics.mean(blacks), 2) if blacks else None,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark puzzle generation per difficulty")
    parser.add_argument(
        "--difficulty",
        choices=[d.label for d in Difficulty],
        action="append",
        help="Difficulty to bench (repeatable; default: all)",
    )
    parser.add_argument("--runs", type=int, default=20, help="Puzzles per difficulty")
    parser.add_argument("--seed", type=int, default=1)
    parser.add_argument("--max-nodes", type=int, default=200_000, help="Solver node budget per check")
    parser.add_argument("--out", type=str, default=None, help="Write JSON results to file path")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    args = parser.parse_args()

    chosen = [Difficulty[d.upper()] for d in args.difficulty] if args.difficulty else list(Difficulty)
    results = []
    for d in chosen:
        sys.stderr.write(f"{d.label}: running {args.runs}...\n")
        sys.stderr.flush()
        results.append(bench_difficulty(d, args.runs, args.seed, args.max_nodes))

    text = json.dumps({"results": results}, indent=2 if args.pretty else None)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(text)
    print(text)


if __name__ == "__main__":
    main()
