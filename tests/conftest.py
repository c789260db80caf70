import os

import pytest

from crucible.core.grid_io import parse_grid

# pygame must not try to open a real window under test
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

LAVA_POOL = """\
2413432311323
3215453535623
3255245654254
3446585845452
4546657867536
1438598798454
4457876987766
3637877979653
4654967986887
4564679986453
1224686865563
2546548887735
4322674655533
"""

ULTRA_CORRIDOR = """\
111111111111
999999999991
999999999991
999999999991
999999999991
"""


@pytest.fixture
def lava_pool():
    return parse_grid(LAVA_POOL)


@pytest.fixture
def ultra_corridor():
    return parse_grid(ULTRA_CORRIDOR)


@pytest.fixture
def lava_pool_text():
    return LAVA_POOL


@pytest.fixture
def ultra_corridor_text():
    return ULTRA_CORRIDOR
