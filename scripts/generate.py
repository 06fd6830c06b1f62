#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import logging
import os
import random
import sys
from typing import List

# Allow running this script directly via `python scripts/generate.py`
# by adding the repo root (which contains `capturechess/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from capturechess.engine.board import PieceKind
from capturechess.puzzle.generator import Difficulty, GeneratorConfig, PositionGenerator
from capturechess.search.rules import rules_by_name


def _kinds(text: str) -> List[PieceKind]:
    out: List[PieceKind] = []
    for ch in text:
        kind = PieceKind.from_char(ch)
        if kind is PieceKind.NONE:
            raise argparse.ArgumentTypeError(f"unknown piece letter: {ch!r}")
        out.append(kind)
    return out


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate capture-all puzzles as JSON lines")
    parser.add_argument("--white", type=_kinds, default=None, help="White pieces as letters, e.g. QR")
    parser.add_argument("--min-black", type=int, default=2)
    parser.add_argument("--max-black", type=int, default=5)
    parser.add_argument("--max-attempts", type=int, default=1000)
    parser.add_argument(
        "--difficulty",
        choices=[d.label for d in Difficulty],
        default=None,
        help="Use a preset instead of --min-black/--max-black",
    )
    parser.add_argument("--rules", default=None, help="Also require a solve under these rules")
    parser.add_argument("--count", type=int, default=1, help="Number of puzzles")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--out", type=str, default=None, help="Append JSON lines to this file")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    rules = rules_by_name(args.rules) if args.rules else None
    gen = PositionGenerator(rng=random.Random(args.seed))

    lines: List[str] = []
    for _ in range(max(1, args.count)):
        if args.difficulty:
            config = GeneratorConfig.for_difficulty(Difficulty[args.difficulty.upper()], args.white or (), gen.rng)
        else:
            if not args.white:
                raise SystemExit("--white is required without --difficulty")
            config = GeneratorConfig(
                white_pieces=tuple(args.white),
                min_black=args.min_black,
                max_black=args.max_black,
                max_attempts=args.max_attempts,
            )
        record = gen.generate_record(config, rules)
        if record is None:
            sys.stderr.write("no solvable position found\n")
            continue
        lines.append(json.dumps(record.to_dict()))

    if args.out:
        with open(args.out, "a", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
    else:
        for line in lines:
            print(line)
    if not lines:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
