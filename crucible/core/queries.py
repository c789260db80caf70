#!/usr/bin/env python3
# crucible/core/queries.py
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Optional, Tuple

from crucible.config import Settings
from crucible.core.crucible_search import PathCostEngine
from crucible.core.types import Grid, Location, SearchOutcome

logger = logging.getLogger(__name__)

PART_ONE = (0, 3)
PART_TWO = (4, 10)


def min_heat_loss(grid: Grid, min_run: int, max_run: int,
                  origin: Optional[Location] = None,
                  destination: Optional[Location] = None,
                  settings: Optional[Settings] = None) -> SearchOutcome:
    """One query against grid; a fresh engine (frontier + cache) per call."""
    settings = settings or Settings()
    engine = PathCostEngine(
        min_run=min_run,
        max_run=max_run,
        origin=origin,
        destination=destination,
        cache_key=settings.cache_key,
        early_exit=settings.early_exit,
        use_heuristic=settings.use_heuristic,
        max_expansions=settings.max_expansions,
    )
    engine.init(grid)
    return engine.solve()


def part_one(grid: Grid, settings: Optional[Settings] = None) -> Optional[int]:
    return min_heat_loss(grid, *PART_ONE, settings=settings).cost


def part_two(grid: Grid, settings: Optional[Settings] = None) -> Optional[int]:
    return min_heat_loss(grid, *PART_TWO, settings=settings).cost


def solve_variants(grid: Grid, variants: Iterable[Tuple[int, int]],
                   settings: Optional[Settings] = None,
                   max_workers: Optional[int] = None) -> Dict[Tuple[int, int], SearchOutcome]:
    """
    Run several (min_run, max_run) queries against one shared grid.

    The grid is immutable; each worker builds its own engine, so nothing
    is shared between queries but that read-only reference.
    """
    variants = list(dict.fromkeys(variants))
    logger.info("[Variants] %s queries on %sx%s grid", len(variants), grid.rows, grid.cols)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            v: pool.submit(min_heat_loss, grid, v[0], v[1], None, None, settings)
            for v in variants
        }
        return {v: fut.result() for v, fut in futures.items()}
