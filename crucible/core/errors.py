#!/usr/bin/env python3
# crucible/core/errors.py
"""
Error taxonomy for the crucible search.

- ParseError        : the grid text / map file can't become a Grid
- InvalidParameter  : query or grid rejected before the frontier is seeded
- InvariantViolation: programming bug (empty frontier pop, out-of-bounds cost)
- SearchAborted     : the expansion budget ran out

"No path" is not an error; it is SearchOutcome(cost=None).
"""

from typing import Optional


class CrucibleError(Exception):
    """Base class for every error raised by this package."""


class ParseError(CrucibleError, ValueError):
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        where = ""
        if line is not None:
            where = f" (line {line}" + (f", column {column}" if column is not None else "") + ")"
        super().__init__(f"{message}{where}")


class InvalidParameter(CrucibleError, ValueError):
    pass


class InvariantViolation(CrucibleError, RuntimeError):
    pass


class SearchAborted(CrucibleError, RuntimeError):
    def __init__(self, expanded: int, limit: int):
        self.expanded = expanded
        self.limit = limit
        super().__init__(f"search aborted after {expanded} expansions (limit {limit})")
