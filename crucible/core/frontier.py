#!/usr/bin/env python3
# crucible/core/frontier.py
from dataclasses import dataclass, field
from typing import List, Tuple
import heapq

from crucible.core.errors import InvariantViolation
from crucible.core.types import SearchState


@dataclass
class Frontier:
    """
    Min-heap of search states.

    Tie-breaking: (f, h, seq) -> lower f, then lower h (closer to the goal),
    then FIFO by seq so runs are reproducible.
    """
    heap: List[Tuple[int, int, int, SearchState]] = field(default_factory=list)
    seq: int = 0  # monotonic counter for PQ stability

    def _bump(self) -> int:
        self.seq += 1
        return self.seq

    def push(self, s: SearchState) -> None:
        h = s.f - s.g
        heapq.heappush(self.heap, (s.f, h, self._bump(), s))

    def pop(self) -> SearchState:
        if not self.heap:
            raise InvariantViolation("pop from an empty frontier")
        return heapq.heappop(self.heap)[-1]

    def peek_priority(self) -> int:
        if not self.heap:
            raise InvariantViolation("peek at an empty frontier")
        return self.heap[0][0]

    def __len__(self) -> int:
        return len(self.heap)

    def __bool__(self) -> bool:
        return bool(self.heap)
