from crucible.config import Settings
from crucible.core.queries import PART_ONE, PART_TWO, min_heat_loss, part_one, part_two, solve_variants


def test_part_one_and_two(lava_pool, ultra_corridor):
    assert part_one(lava_pool) == 102
    assert part_two(lava_pool) == 94
    assert part_two(ultra_corridor) == 71


def test_settings_are_passed_through(lava_pool):
    out = min_heat_loss(lava_pool, 4, 10, settings=Settings(early_exit=True))
    assert out.cost == 94
    drained = min_heat_loss(lava_pool, 4, 10)
    assert out.expanded <= drained.expanded


def test_variants_share_one_grid(lava_pool):
    results = solve_variants(lava_pool, [PART_ONE, PART_TWO, PART_ONE], max_workers=2)
    assert set(results) == {PART_ONE, PART_TWO}
    assert results[PART_ONE].cost == 102
    assert results[PART_TWO].cost == 94


def test_variants_include_no_path(ultra_corridor):
    results = solve_variants(ultra_corridor, [(4, 10), (20, 30)])
    assert results[(4, 10)].cost == 71
    assert not results[(20, 30)].found
