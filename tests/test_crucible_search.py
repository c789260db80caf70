import pytest

from crucible.core.crucible_search import PathCostEngine
from crucible.core.errors import InvalidParameter, SearchAborted
from crucible.core.grid_io import parse_grid
from crucible.core.types import Grid, Heading


def _solve(grid, min_run, max_run, **kw):
    engine = PathCostEngine(min_run=min_run, max_run=max_run, **kw)
    engine.init(grid)
    return engine.solve()


def test_lava_pool_part_one(lava_pool):
    assert _solve(lava_pool, 0, 3).cost == 102


def test_lava_pool_part_two(lava_pool):
    assert _solve(lava_pool, 4, 10).cost == 94


def test_ultra_corridor_part_two(ultra_corridor):
    assert _solve(ultra_corridor, 4, 10).cost == 71


def test_path_cost_matches_reported_cost(lava_pool):
    out = _solve(lava_pool, 4, 10)
    assert out.path[0] == (0, 0)
    assert out.path[-1] == (12, 12)
    assert sum(lava_pool.cost(loc) for loc in out.path[1:]) == out.cost


def test_path_is_made_of_unit_steps_without_reversal(lava_pool):
    out = _solve(lava_pool, 0, 3)
    moves = [(b[0] - a[0], b[1] - a[1]) for a, b in zip(out.path, out.path[1:])]
    for m in moves:
        assert abs(m[0]) + abs(m[1]) == 1
    for m1, m2 in zip(moves, moves[1:]):
        assert m2 != (-m1[0], -m1[1])


def test_runs_respect_limits(lava_pool):
    out = _solve(lava_pool, 4, 10)
    moves = [(b[0] - a[0], b[1] - a[1]) for a, b in zip(out.path, out.path[1:])]
    runs = []
    for m in moves:
        if runs and runs[-1][0] == m:
            runs[-1][1] += 1
        else:
            runs.append([m, 1])
    assert all(4 <= n <= 10 for _, n in runs)


def test_g_is_monotonic_along_path(lava_pool):
    out = _solve(lava_pool, 0, 3)
    g, prev = 0, 0
    for loc in out.path[1:]:
        g += lava_pool.cost(loc)
        assert g >= prev
        prev = g
    assert g == out.cost


def test_deterministic(lava_pool):
    a = _solve(lava_pool, 4, 10)
    b = _solve(lava_pool, 4, 10)
    assert (a.cost, a.path, a.expanded) == (b.cost, b.path, b.expanded)


def test_heuristic_does_not_change_the_answer(lava_pool):
    assert _solve(lava_pool, 0, 3, use_heuristic=False).cost == 102
    assert _solve(lava_pool, 4, 10, use_heuristic=False).cost == 94


def test_more_room_never_costs_more(lava_pool):
    costs = [_solve(lava_pool, 1, hi).cost for hi in range(1, 8)]
    assert all(c is not None for c in costs[1:])
    for tighter, looser in zip(costs, costs[1:]):
        if tighter is not None:
            assert looser <= tighter


def test_early_exit_agrees_with_full_drain(lava_pool, ultra_corridor):
    for grid, lo, hi in ((lava_pool, 0, 3), (lava_pool, 4, 10), (ultra_corridor, 4, 10)):
        drained = _solve(grid, lo, hi)
        early = _solve(grid, lo, hi, early_exit=True)
        assert early.cost == drained.cost
        assert early.expanded <= drained.expanded


def test_heading_key_never_beats_full_key(lava_pool, ultra_corridor):
    # min_run 0: every arrival at the goal is terminal, so the coarse key still finds one
    full = _solve(lava_pool, 0, 3).cost
    coarse = _solve(lava_pool, 0, 3, cache_key="heading").cost
    assert coarse is not None
    assert coarse >= full

    # with a minimum run the coarse key may drop every long-enough arrival
    for grid, lo, hi in ((lava_pool, 4, 10), (ultra_corridor, 4, 10)):
        full = _solve(grid, lo, hi).cost
        coarse = _solve(grid, lo, hi, cache_key="heading").cost
        if coarse is not None:
            assert coarse >= full


def test_heading_key_on_a_small_open_grid():
    grid = Grid.from_rows([[1, 1], [1, 1]])
    assert _solve(grid, 0, 3, cache_key="heading").cost == 2
    assert _solve(grid, 0, 3).cost == 2


def test_single_cell_no_path_when_a_run_is_required():
    grid = Grid.from_rows([[5]])
    out = _solve(grid, 1, 3)
    assert out.cost is None
    assert not out.found
    assert out.path == []


def test_single_cell_zero_cost_when_no_run_required():
    out = _solve(Grid.from_rows([[5]]), 0, 3)
    assert out.cost == 0
    assert out.path == [(0, 0)]


def test_destination_only_reachable_mid_run_is_no_path():
    # 1x3 strip, the goal is 2 steps away but every run must be 3 long
    assert _solve(parse_grid("111"), 3, 5).cost is None
    assert _solve(parse_grid("111"), 2, 5).cost == 2


def test_zero_cost_cells():
    grid = parse_grid("000\n000\n000")
    assert _solve(grid, 0, 3).cost == 0
    assert _solve(grid, 0, 3, early_exit=True).cost == 0


def test_custom_origin_and_destination():
    grid = parse_grid("19\n11")
    assert _solve(grid, 0, 3, origin=(1, 1), destination=(0, 0)).cost == 2


@pytest.mark.parametrize("kw", [
    dict(min_run=4, max_run=3),
    dict(min_run=-1, max_run=3),
    dict(min_run=0, max_run=3, cache_key="heading", early_exit=True),
    dict(min_run=0, max_run=3, cache_key="nope"),
    dict(min_run=0, max_run=3, origin=(13, 0)),
    dict(min_run=0, max_run=3, destination=(0, -1)),
    dict(min_run=0, max_run=3, max_expansions=0),
])
def test_invalid_parameters_rejected_before_search(kw, lava_pool):
    engine = PathCostEngine(**kw)
    with pytest.raises(InvalidParameter):
        engine.init(lava_pool)


def test_expansion_budget(lava_pool):
    engine = PathCostEngine(min_run=4, max_run=10, max_expansions=10)
    engine.init(lava_pool)
    with pytest.raises(SearchAborted) as ei:
        engine.solve()
    assert ei.value.limit == 10


def test_seeds_and_successor_rules():
    grid = parse_grid("1111\n1111\n1111\n1111")
    engine = PathCostEngine(min_run=2, max_run=3)
    engine.init(grid)
    seeds = sorted((s.heading.name for s in (engine.frontier.pop(), engine.frontier.pop())))
    assert seeds == ["EAST", "SOUTH"]

    seed = engine._make((0, 0), Heading.EAST, 0, 0, None)
    kids = {(s.location, s.heading, s.run_length) for s in engine.successors(seed)}
    assert kids == {((0, 1), Heading.EAST, 1), ((1, 0), Heading.SOUTH, 1)}

    # below min_run: straight only
    mid = engine._make((1, 1), Heading.EAST, 1, 2, None)
    assert [(s.location, s.run_length) for s in engine.successors(mid)] == [((1, 2), 2)]

    # at max_run: turns only
    full = engine._make((1, 1), Heading.EAST, 3, 2, None)
    kids = {(s.location, s.heading) for s in engine.successors(full)}
    assert kids == {((0, 1), Heading.NORTH), ((2, 1), Heading.SOUTH)}


def test_step_api_reports_progress_then_done(lava_pool):
    engine = PathCostEngine(min_run=0, max_run=3)
    assert engine.step().status == "idle"
    engine.init(lava_pool)
    first = engine.step()
    assert first.status == "running"
    assert first.closed == [(0, 0)]
    assert first.opened

    res = first
    while res.status == "running":
        res = engine.step()
    assert res.status == "done"
    assert res.metrics["total_cost"] == 102
    assert res.path[-1] == (12, 12)
    # once done it stays done
    assert engine.step().status == "done"

    engine.reset()
    assert engine.popped_count == 0
    assert len(engine.frontier) == 2
    assert engine.solve().cost == 102


def test_step_api_no_path():
    engine = PathCostEngine(min_run=2, max_run=3)
    engine.init(Grid.from_rows([[1]]))
    res = engine.step()
    while res.status == "running":
        res = engine.step()
    assert res.status == "no_path"
