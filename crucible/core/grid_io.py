#!/usr/bin/env python3
# crucible/core/grid_io.py
"""
Loaders: digit text -> Grid, JSON map -> MapSpec.

Digit text is one row per line, each character 0-9 is that cell's cost.
JSON maps look like

    {
      "name": "lava_pool",
      "rows": ["2413432311323", ...]      # or "cells": [[2, 4, 1, ...], ...]
      "start": [0, 0],                     # optional, (row, col)
      "goal": [12, 12],                    # optional, (row, col)
      "min_run": 4, "max_run": 10          # optional query defaults
    }
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from crucible.core.errors import InvalidParameter, ParseError
from crucible.core.types import Grid, Location

PathLike = Union[str, Path]


@dataclass(frozen=True)
class MapSpec:
    name: str
    grid: Grid
    start: Optional[Location] = None
    goal: Optional[Location] = None
    min_run: Optional[int] = None
    max_run: Optional[int] = None


def parse_grid(text: str) -> Grid:
    lines = text.strip().splitlines()
    if not lines:
        raise ParseError("empty grid input")

    rows: List[List[int]] = []
    width = len(lines[0].strip())
    for i, raw in enumerate(lines, start=1):
        line = raw.strip()
        if len(line) != width:
            raise ParseError(f"ragged row: {len(line)} cells, expected {width}", line=i)
        row = []
        for j, ch in enumerate(line, start=1):
            if not ("0" <= ch <= "9"):
                raise ParseError(f"non-digit character {ch!r}", line=i, column=j)
            row.append(ord(ch) - ord("0"))
        rows.append(row)
    return Grid.from_rows(rows)


def load_grid(path: PathLike) -> Grid:
    with open(path, "r") as f:
        return parse_grid(f.read())


def _int(value: Any, what: str) -> int:
    # JSON floats and booleans are not cell costs or coordinates
    if not isinstance(value, int) or isinstance(value, bool):
        raise ParseError(f"{what} must be an integer, got {value!r}")
    return value


def _cell(data: Dict[str, Any], key: str) -> Optional[Location]:
    if key not in data:
        return None
    value = data[key]
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ParseError(f"{key!r} must be a [row, col] pair, got {value!r}")
    return (_int(value[0], key), _int(value[1], key))


def _optional_int(data: Dict[str, Any], key: str) -> Optional[int]:
    return _int(data[key], repr(key)) if key in data else None


def map_from_dict(data: Dict[str, Any], name: str = "custom") -> MapSpec:
    if "rows" in data:
        rows = data["rows"]
        if not isinstance(rows, list) or not all(isinstance(r, str) for r in rows):
            raise ParseError("'rows' must be a list of digit strings")
        grid = parse_grid("\n".join(rows))
    elif "cells" in data:
        cells = data["cells"]
        if not isinstance(cells, list) or not cells or not all(isinstance(r, list) for r in cells):
            raise ParseError("'cells' must be a non-empty list of rows")
        try:
            grid = Grid.from_rows([[_int(v, "cell cost") for v in row] for row in cells])
        except InvalidParameter as ex:
            raise ParseError(f"bad 'cells': {ex}") from ex
    else:
        raise ParseError("map needs 'rows' or 'cells'")

    start = _cell(data, "start")
    goal = _cell(data, "goal")
    for label, c in (("start", start), ("goal", goal)):
        if c is not None and not grid.in_bounds(c):
            raise ParseError(f"{label} {c} out of bounds for {grid.bounds()}")

    return MapSpec(
        name=str(data.get("name", name)),
        grid=grid,
        start=start,
        goal=goal,
        min_run=_optional_int(data, "min_run"),
        max_run=_optional_int(data, "max_run"),
    )


def load_map(path: PathLike) -> MapSpec:
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as ex:
        raise ParseError(f"invalid JSON in {path.name}: {ex.msg}", line=ex.lineno, column=ex.colno) from ex
    if not isinstance(data, dict):
        raise ParseError(f"{path.name}: top level must be an object")
    return map_from_dict(data, name=path.stem)


def load_any(path: PathLike) -> MapSpec:
    """JSON maps by extension, digit text otherwise."""
    path = Path(path)
    if path.suffix.lower() == ".json":
        return load_map(path)
    return MapSpec(name=path.stem, grid=load_grid(path))
