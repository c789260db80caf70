#!/usr/bin/env python3
# crucible/core/crucible_search.py
"""
Run-length constrained best-first search, one expansion per step() for animation.

Implements the Algorithm API expected by the viewer:
- init(grid) - reset() - step() -> StepResult
plus solve() -> SearchOutcome for batch use.

State space: (location, heading, run_length). The agent must go at least
min_run cells straight before it may turn or stop, and at most max_run
cells before it must turn. It never reverses.

Heuristic:
- Manhattan distance to the destination, scaled by the grid's minimum cell
  cost (keeps h admissible and consistent when 0-cost cells exist).
- use_heuristic=False gives plain Dijkstra ordering.

Termination:
- Default is full drain: every non-dominated state is expanded and the best
  terminal g wins. Correct for either cache key policy's pruning semantics.
- early_exit=True returns on the first terminal pop. Only allowed with the
  "full" cache key, where a consistent heuristic makes that pop optimal.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from crucible.core.dominance import DominanceCache
from crucible.core.errors import InvalidParameter, SearchAborted
from crucible.core.frontier import Frontier
from crucible.core.types import Grid, Heading, Location, SearchOutcome, SearchState, StepResult

logger = logging.getLogger(__name__)

SEED_HEADINGS = (Heading.EAST, Heading.SOUTH)


@dataclass
class PathCostEngine:
    min_run: int = 0
    max_run: int = 3
    origin: Optional[Location] = None        # default: top-left
    destination: Optional[Location] = None   # default: bottom-right
    cache_key: str = "full"
    early_exit: bool = False
    use_heuristic: bool = True
    max_expansions: Optional[int] = None
    name: str = "Crucible"

    # Internal state
    grid: Optional[Grid] = None
    frontier: Frontier = field(default_factory=Frontier)
    cache: DominanceCache = field(default_factory=DominanceCache)
    closed_set: set = field(default_factory=set)   # cells, for overlay
    best: Optional[SearchState] = None
    popped_count: int = 0
    pushed_count: int = 0
    pruned_count: int = 0
    done: bool = False
    start_cell: Optional[Location] = None
    goal_cell: Optional[Location] = None
    _h_scale: int = 1

    # -------------------- lifecycle --------------------

    def init(self, grid: Grid) -> None:
        """Validate the query against grid and seed the frontier."""
        self.grid = grid
        self._validate()
        self.reset()

    def reset(self) -> None:
        """Fresh frontier and cache; reseed with the two origin states."""
        if self.grid is None:
            return
        self.frontier = Frontier()
        self.cache = DominanceCache(policy=self.cache_key)
        self.closed_set = set()
        self.best = None
        self.popped_count = 0
        self.pushed_count = 0
        self.pruned_count = 0
        self.done = False
        self._h_scale = self.grid.min_cost() if self.use_heuristic else 0

        for hd in SEED_HEADINGS:
            seed = self._make(self.start_cell, hd, 0, 0, None)
            self.cache.offer(seed)
            self.frontier.push(seed)
            self.pushed_count += 1

    def _validate(self) -> None:
        if self.min_run < 0:
            raise InvalidParameter(f"min_run must be >= 0, got {self.min_run}")
        if self.min_run > self.max_run:
            raise InvalidParameter(f"min_run ({self.min_run}) > max_run ({self.max_run})")
        if self.early_exit and self.cache_key != "full":
            raise InvalidParameter("early_exit needs the 'full' cache key")
        if self.max_expansions is not None and self.max_expansions <= 0:
            raise InvalidParameter(f"max_expansions must be positive, got {self.max_expansions}")
        # unknown policies are rejected by DominanceCache itself
        DominanceCache(policy=self.cache_key)

        self.start_cell = tuple(self.origin) if self.origin is not None else self.grid.top_left()
        self.goal_cell = tuple(self.destination) if self.destination is not None else self.grid.bottom_right()
        if not self.grid.in_bounds(self.start_cell):
            raise InvalidParameter(f"origin {self.start_cell} outside grid {self.grid.bounds()}")
        if not self.grid.in_bounds(self.goal_cell):
            raise InvalidParameter(f"destination {self.goal_cell} outside grid {self.grid.bounds()}")

    # -------------------- helpers --------------------

    def _h(self, loc: Location) -> int:
        (r, c) = loc
        (gr, gc) = self.goal_cell
        return (abs(gr - r) + abs(gc - c)) * self._h_scale

    def _make(self, loc: Location, hd: Heading, run: int, g: int,
              prev: Optional[SearchState]) -> SearchState:
        return SearchState(loc, hd, run, g, g + self._h(loc), prev)

    def is_terminal(self, s: SearchState) -> bool:
        return s.location == self.goal_cell and s.run_length >= self.min_run

    def successors(self, s: SearchState) -> List[SearchState]:
        """Continue straight (if under max_run) and quarter-turn (if the run allows it)."""
        out: List[SearchState] = []

        if s.run_length < self.max_run:
            nxt = self.grid.step(s.location, s.heading)
            if nxt is not None:
                out.append(self._make(nxt, s.heading, s.run_length + 1,
                                      s.g + self.grid.cost(nxt), s))

        if s.run_length == 0 or s.run_length >= self.min_run:
            for hd in (s.heading.left(), s.heading.right()):
                nxt = self.grid.step(s.location, hd)
                if nxt is not None:
                    out.append(self._make(nxt, hd, 1, s.g + self.grid.cost(nxt), s))

        return out

    # -------------------- main stepping logic --------------------

    def step(self) -> StepResult:
        """
        Run ONE expansion:
          - Pop the lowest-f state; skip it if it went stale.
          - If terminal, keep it when it beats the best so far.
          - Offer successors to the dominance cache and push the survivors.
        """
        if self.grid is None:
            return StepResult(status="idle", metrics={"algo": self.name})

        if self.done:
            return self._finished()

        if not self.frontier:
            self.done = True
            return self._finished()

        if self.max_expansions is not None and self.popped_count >= self.max_expansions:
            raise SearchAborted(self.popped_count, self.max_expansions)

        u = self.frontier.pop()

        # Ignore stale pops
        if self.cache.is_stale(u):
            return StepResult(status="running", current=u.location, metrics=self._metrics())

        self.popped_count += 1
        self.closed_set.add(u.location)

        if self.is_terminal(u) and (self.best is None or u.g < self.best.g):
            self.best = u
            logger.debug("[Search] new best %s at expansion %s", u.g, self.popped_count)
            if self.early_exit:
                self.done = True
                return self._finished(closed=[u.location], current=u.location)

        opened_now: List[Location] = []
        for v in self.successors(u):
            if self.cache.offer(v):
                self.frontier.push(v)
                self.pushed_count += 1
                opened_now.append(v.location)
            else:
                self.pruned_count += 1

        return StepResult(
            status="running",
            opened=opened_now,
            closed=[u.location],
            current=u.location,
            path=self.best.path() if self.best else None,
            metrics=self._metrics(),
        )

    def _finished(self, closed: Optional[List[Location]] = None,
                  current: Optional[Location] = None) -> StepResult:
        if self.best is None:
            return StepResult(status="no_path", metrics=self._metrics())
        path = self.best.path()
        return StepResult(
            status="done",
            closed=closed or [],
            current=current,
            path=path,
            metrics=self._metrics(path_len=len(path)),
        )

    def solve(self) -> SearchOutcome:
        """Step until the frontier drains (or early exit) and report the outcome."""
        if self.grid is None:
            raise InvalidParameter("solve() called before init(grid)")
        logger.info("[Search] %sx%s grid, runs %s..%s, key=%s, early_exit=%s",
                    self.grid.rows, self.grid.cols, self.min_run, self.max_run,
                    self.cache_key, self.early_exit)
        while not self.done:
            self.step()
        outcome = self.outcome()
        logger.info("[Search] cost=%s expanded=%s pushed=%s pruned=%s",
                    outcome.cost, outcome.expanded, outcome.pushed, outcome.pruned)
        return outcome

    def outcome(self) -> SearchOutcome:
        return SearchOutcome(
            cost=self.best.g if self.best else None,
            path=self.best.path() if self.best else [],
            expanded=self.popped_count,
            pushed=self.pushed_count,
            pruned=self.pruned_count,
        )

    # -------------------- metrics --------------------

    def _metrics(self, path_len: int = 0) -> dict:
        return {
            "algo": self.name,
            "popped": self.popped_count,
            "open_size": len(self.frontier),
            "closed_count": len(self.closed_set),
            "cache_size": len(self.cache),
            "pruned": self.pruned_count,
            "path_len": path_len,
            "total_cost": self.best.g if self.best else None,
        }
