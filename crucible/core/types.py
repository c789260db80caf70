#!/usr/bin/env python3
# crucible/core/types.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple, Optional, Dict, Any, Sequence

from crucible.core.errors import InvalidParameter, InvariantViolation

Location = Tuple[int, int]  # (row, col)


class Heading(Enum):
    NORTH = (-1, 0)
    EAST = (0, 1)
    SOUTH = (1, 0)
    WEST = (0, -1)

    @property
    def delta(self) -> Tuple[int, int]:
        return self.value

    # Only quarter turns exist; going back the way we came is unrepresentable.
    def left(self) -> "Heading":
        return _LEFT[self]

    def right(self) -> "Heading":
        return _RIGHT[self]


_LEFT = {
    Heading.NORTH: Heading.WEST,
    Heading.EAST: Heading.NORTH,
    Heading.SOUTH: Heading.EAST,
    Heading.WEST: Heading.SOUTH,
}
_RIGHT = {v: k for k, v in _LEFT.items()}


@dataclass(frozen=True)
class Grid:
    cells: Tuple[Tuple[int, ...], ...]   # [row][col]

    def __post_init__(self):
        if not self.cells or not self.cells[0]:
            raise InvalidParameter("grid must have at least one row and one column")
        width = len(self.cells[0])
        for r, row in enumerate(self.cells):
            if len(row) != width:
                raise InvalidParameter(f"row {r} has {len(row)} cells, expected {width}")
            for c, v in enumerate(row):
                if v < 0:
                    raise InvalidParameter(f"negative cost {v} at {(r, c)}")

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Grid":
        return cls(tuple(tuple(int(v) for v in row) for row in rows))

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0])

    def bounds(self) -> Tuple[int, int]:
        return self.rows, self.cols

    def in_bounds(self, loc: Location) -> bool:
        r, c = loc
        return 0 <= r < self.rows and 0 <= c < self.cols

    def cost(self, loc: Location) -> int:
        if not self.in_bounds(loc):
            raise InvariantViolation(f"cost asked for {loc} outside {self.bounds()}")
        r, c = loc
        return self.cells[r][c]

    def step(self, loc: Location, heading: Heading) -> Optional[Location]:
        dr, dc = heading.delta
        nxt = (loc[0] + dr, loc[1] + dc)
        return nxt if self.in_bounds(nxt) else None

    def top_left(self) -> Location:
        return (0, 0)

    def bottom_right(self) -> Location:
        return (self.rows - 1, self.cols - 1)

    def min_cost(self) -> int:
        return min(min(row) for row in self.cells)


@dataclass(frozen=True)
class SearchState:
    location: Location
    heading: Heading
    run_length: int
    g: int
    f: int
    prev: Optional["SearchState"] = field(default=None, compare=False, repr=False)

    def path(self) -> List[Location]:
        """Locations from the seed to this state, inclusive."""
        out: List[Location] = []
        cur: Optional[SearchState] = self
        while cur is not None:
            out.append(cur.location)
            cur = cur.prev
        out.reverse()
        return out


@dataclass
class SearchOutcome:
    cost: Optional[int]                    # None == no path
    path: List[Location] = field(default_factory=list)
    expanded: int = 0
    pushed: int = 0
    pruned: int = 0

    @property
    def found(self) -> bool:
        return self.cost is not None


@dataclass
class StepResult:
    status: str                   # "idle" | "running" | "done" | "no_path"
    opened: List[Location] = field(default_factory=list)
    closed: List[Location] = field(default_factory=list)
    current: Optional[Location] = None
    path: Optional[List[Location]] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
