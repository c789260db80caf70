#!/usr/bin/env python3
# crucible/cli.py
"""
Command-line entry point.

    crucible input.txt                 # part one limits (0..3)
    crucible --part 2 input.txt        # part two limits (4..10)
    crucible --min-run 1 --max-run 5 maps/lava_pool.json

Exit status: 0 path found, 1 no path, 2 bad input / parameters.
"""

import argparse
import logging
import sys
from typing import List, Optional

from crucible.config import Settings, check_log_level, configure_logging, resolve_settings
from crucible.core.errors import CrucibleError
from crucible.core.grid_io import load_any
from crucible.core.queries import PART_ONE, PART_TWO, min_heat_loss

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="crucible",
                                description="Minimum cost route with a run-length constraint.")
    p.add_argument("path", help="digit grid text file, or a .json map")
    p.add_argument("--part", type=int, choices=(1, 2), default=None,
                   help="use the part one (0..3) or part two (4..10) run limits")
    p.add_argument("--min-run", type=int, default=None)
    p.add_argument("--max-run", type=int, default=None)
    p.add_argument("--cache-key", choices=("full", "heading"), default=None)
    p.add_argument("--early-exit", action="store_true", default=None)
    p.add_argument("--no-heuristic", action="store_true",
                   help="Dijkstra ordering instead of Manhattan A*")
    p.add_argument("--max-expansions", type=int, default=None)
    p.add_argument("--show-path", action="store_true", help="also print the route cells")
    p.add_argument("--log-level", default=None)
    return p


def _merge(base: Settings, args: argparse.Namespace) -> Settings:
    values = dict(base.__dict__)
    if args.cache_key is not None:
        values["cache_key"] = args.cache_key
    if args.early_exit:
        values["early_exit"] = True
    if args.no_heuristic:
        values["use_heuristic"] = False
    if args.max_expansions is not None:
        values["max_expansions"] = args.max_expansions
    if args.log_level is not None:
        values["log_level"] = check_log_level(args.log_level)
    return Settings(**values)


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    args = build_parser().parse_args(argv)

    try:
        # env only; the argparse flags above take the place of --key=value
        settings = _merge(resolve_settings(argv=[]), args)
        configure_logging(settings.log_level)

        spec = load_any(args.path)
        min_run, max_run = PART_TWO if args.part == 2 else PART_ONE
        if args.part is None:
            min_run = spec.min_run if spec.min_run is not None else min_run
            max_run = spec.max_run if spec.max_run is not None else max_run
        if args.min_run is not None:
            min_run = args.min_run
        if args.max_run is not None:
            max_run = args.max_run

        logger.info("[CLI] %s: runs %s..%s", spec.name, min_run, max_run)
        outcome = min_heat_loss(spec.grid, min_run, max_run,
                                origin=spec.start, destination=spec.goal,
                                settings=settings)
    except (CrucibleError, OSError) as ex:
        print(f"error: {ex}", file=sys.stderr)
        return 2

    if not outcome.found:
        print("no path")
        return 1
    print(outcome.cost)
    if args.show_path:
        print(" ".join(f"{r},{c}" for r, c in outcome.path))
    return 0


if __name__ == "__main__":
    sys.exit(main())
