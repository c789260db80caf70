#!/usr/bin/env python3
# crucible/core/dominance.py
"""
Best-g memo used to drop dominated re-expansions.

Key policies:
- "full"    : (location, heading, run_length). Sound: a state is only dropped
              when an identical state was already reached at <= cost.
- "heading" : (location, heading). Coarser, fewer entries, but may drop a
              state whose different run length would have led somewhere
              cheaper. Answers are never below the optimum, may be above it.
"""

from dataclasses import dataclass, field
from typing import Dict, Hashable
from math import inf

from crucible.core.errors import InvalidParameter
from crucible.core.types import SearchState

KEY_POLICIES = ("full", "heading")


@dataclass
class DominanceCache:
    policy: str = "full"
    best: Dict[Hashable, int] = field(default_factory=dict)

    def __post_init__(self):
        if self.policy not in KEY_POLICIES:
            raise InvalidParameter(f"unknown cache key policy {self.policy!r}, expected one of {KEY_POLICIES}")

    def key(self, s: SearchState) -> Hashable:
        if self.policy == "full":
            return (s.location, s.heading, s.run_length)
        return (s.location, s.heading)

    def offer(self, s: SearchState) -> bool:
        """Record s if it strictly improves on its key. False means dominated."""
        k = self.key(s)
        if s.g < self.best.get(k, inf):
            self.best[k] = s.g
            return True
        return False

    def is_stale(self, s: SearchState) -> bool:
        """A queued state that something cheaper has overtaken since it was pushed."""
        return s.g > self.best.get(self.key(s), inf)

    def __len__(self) -> int:
        return len(self.best)
