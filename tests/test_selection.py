from collections import Counter
from random import Random

import pytest

from loadoutforge.domain.constraints import DEFAULT_RULES, QuotaConfig
from loadoutforge.domain.items import BASE_GAME_KEY, CatalogItem, SourcePackSelection
from loadoutforge.domain.random_source import PythonRandomSource
from loadoutforge.domain.selection import (
    allocate_quotas,
    fill_remaining,
    filter_pool,
    is_unlocked,
    pick_loadout,
)
from loadoutforge.testing import ItemFactory, SequenceRandomSource


def item(item_id: str, category: str, *, pack: str | None = None, level: int | None = None) -> CatalogItem:
    return CatalogItem(item_id=item_id, name=item_id.title(), category=category, source_pack=pack, unlock_level=level)


def mixed_pool() -> list[CatalogItem]:
    return [
        item("orbital_a", "orbital", level=1),
        item("orbital_b", "orbital", level=10),
        item("eagle_a", "eagle", level=3),
        item("eagle_b", "eagle", pack="cutting_edge"),
        item("sentry_a", "sentry", level=20),
        item("backpack_a", "backpack", level=5),
        item("backpack_b", "backpack", pack="chemical_agents"),
        item("backpack_c", "backpack"),
        item("support_a", "support_weapon"),
        item("support_b", "support_weapon", pack="cutting_edge", level=15),
    ]


def test_is_unlocked_respects_gate():
    gated = item("late", "orbital", level=15)
    assert not is_unlocked(gated, 10)
    assert is_unlocked(gated, 15)
    assert is_unlocked(item("capstone", "orbital", level=25), 25)
    assert is_unlocked(item("free", "orbital"), 1)


def test_max_level_does_not_bypass_unlock_levels():
    beyond = item("beyond", "orbital", level=30)
    assert not is_unlocked(beyond, 25)

    catalog = [beyond, item("free", "orbital")]
    pool = filter_pool(catalog, SourcePackSelection.of([BASE_GAME_KEY]), 25)
    assert [entry.item_id for entry in pool] == ["free"]

    result = pick_loadout(catalog, QuotaConfig.unconstrained(), DEFAULT_RULES, 25, rng=PythonRandomSource(Random(3)))
    assert [entry.item_id for entry in result] == ["free"]


def test_filter_pool_keeps_enabled_packs_only():
    selection = SourcePackSelection.of([BASE_GAME_KEY, "cutting_edge"])
    pool = filter_pool(mixed_pool(), selection, 25)
    ids = {entry.item_id for entry in pool}
    assert "backpack_b" not in ids
    assert {"eagle_b", "support_b", "orbital_a"} <= ids


def test_filter_pool_without_baseline_drops_baseline_items():
    pool = filter_pool(mixed_pool(), SourcePackSelection.of(["cutting_edge"]), 25)
    assert {entry.item_id for entry in pool} == {"eagle_b", "support_b"}


def test_filter_pool_applies_level_gate():
    selection = SourcePackSelection.of([BASE_GAME_KEY, "cutting_edge", "chemical_agents"])
    pool = filter_pool(mixed_pool(), selection, 5)
    assert all(entry.unlock_level is None or entry.unlock_level <= 5 for entry in pool)
    assert "sentry_a" not in {entry.item_id for entry in pool}


@pytest.mark.parametrize("seed", range(40))
def test_result_properties_hold_for_random_inputs(seed):
    rng = Random(seed)
    factory = ItemFactory(rng=rng)
    packs = ["alpha", "beta"]
    catalog = []
    for _ in range(rng.randint(0, 16)):
        catalog.append(
            factory.build(
                source_pack=rng.choice([None, *packs]),
                unlock_level=rng.choice([None, 1, 5, 12, 20, 25]),
            )
        )
    selection = SourcePackSelection.of(rng.sample([BASE_GAME_KEY, *packs], rng.randint(0, 3)))
    level = rng.randint(1, 25)
    pins = {category: rng.randint(0, 2) for category in rng.sample(["orbital", "eagle", "sentry"], 2)}
    quotas = QuotaConfig.pinned(**pins)

    pool = filter_pool(catalog, selection, level)
    result = pick_loadout(pool, quotas, DEFAULT_RULES, level, rng=PythonRandomSource(Random(seed)))

    assert len(result) <= 4
    assert len({entry.item_id for entry in result}) == len(result)
    for entry in result:
        assert selection.allows(entry)
        assert entry.unlock_level is None or entry.unlock_level <= level

    counts = Counter(entry.category for entry in result)
    available = Counter(entry.category for entry in pool)
    for category, count in pins.items():
        if available[category] >= count:
            assert counts[category] == count
        else:
            assert counts[category] == available[category]
    assert counts["backpack"] <= 1


def test_pin_example_two_orbitals_out_of_five():
    pool = [
        item("orbital_1", "orbital"),
        item("orbital_2", "orbital"),
        item("orbital_3", "orbital"),
        item("eagle_1", "eagle"),
        item("eagle_2", "eagle"),
    ]
    quotas = QuotaConfig.pinned(orbital=2)
    for seed in range(25):
        result = pick_loadout(pool, quotas, frozenset(), 25, rng=PythonRandomSource.seeded(seed))
        assert len(result) == 4
        assert sum(1 for entry in result if entry.category == "orbital") == 2
        assert len({entry.item_id for entry in result}) == 4
        # The pin caps orbitals, so the remaining slots must be the two eagles.
        assert {entry.item_id for entry in result if entry.category == "eagle"} == {"eagle_1", "eagle_2"}


def test_single_eligible_item_gives_short_result():
    pool = [item("lonely", "sentry")]
    result = pick_loadout(pool, QuotaConfig.unconstrained(), DEFAULT_RULES, 25, rng=PythonRandomSource.seeded(1))
    assert [entry.item_id for entry in result] == ["lonely"]


def test_empty_pool_gives_empty_result():
    assert pick_loadout([], QuotaConfig.pinned(orbital=2), DEFAULT_RULES, 25, rng=PythonRandomSource.seeded(1)) == []


def test_backpack_rule_allows_at_most_one():
    pool = [
        item("backpack_1", "backpack"),
        item("backpack_2", "backpack"),
        item("backpack_3", "backpack"),
        item("orbital_1", "orbital"),
        item("eagle_1", "eagle"),
        item("sentry_1", "sentry"),
    ]
    for seed in range(50):
        result = pick_loadout(pool, QuotaConfig.unconstrained(), DEFAULT_RULES, 25, rng=PythonRandomSource.seeded(seed))
        assert sum(1 for entry in result if entry.category == "backpack") <= 1
        assert len(result) == 4


def test_backpack_rule_disabled_allows_many():
    pool = [item(f"backpack_{idx}", "backpack") for idx in range(4)]
    result = pick_loadout(pool, QuotaConfig.unconstrained(), frozenset(), 25, rng=PythonRandomSource.seeded(3))
    assert len(result) == 4


def test_determinism_with_identical_sequences():
    pool = mixed_pool()
    quotas = QuotaConfig.pinned(eagle=1)
    values = [0.91, 0.13, 0.57, 0.02, 0.76, 0.44, 0.38, 0.65]
    first = pick_loadout(pool, quotas, DEFAULT_RULES, 25, rng=SequenceRandomSource(values))
    second = pick_loadout(pool, quotas, DEFAULT_RULES, 25, rng=SequenceRandomSource(values))
    assert first == second


def test_determinism_with_same_seed():
    pool = mixed_pool()
    first = pick_loadout(pool, QuotaConfig.unconstrained(), DEFAULT_RULES, 25, rng=PythonRandomSource.seeded(99))
    second = pick_loadout(pool, QuotaConfig.unconstrained(), DEFAULT_RULES, 25, rng=PythonRandomSource.seeded(99))
    assert first == second


def test_zero_source_values_pick_deterministically():
    # With next() == 0.0 the Fisher-Yates pass rotates the list left by one.
    pool = [item("a", "orbital"), item("b", "eagle"), item("c", "sentry")]
    result = pick_loadout(pool, QuotaConfig.unconstrained(), frozenset(), 25, rng=SequenceRandomSource([0.0]))
    assert [entry.item_id for entry in result] == ["b", "c", "a"]


def test_pins_above_slot_count_are_clamped_in_priority_order(caplog):
    pool = [item(f"orbital_{idx}", "orbital") for idx in range(3)] + [
        item(f"eagle_{idx}", "eagle") for idx in range(3)
    ]
    quotas = QuotaConfig.pinned(orbital=3, eagle=3)
    with caplog.at_level("WARNING"):
        result = pick_loadout(pool, quotas, frozenset(), 25, rng=PythonRandomSource.seeded(5))
    counts = Counter(entry.category for entry in result)
    assert len(result) == 4
    assert counts == {"orbital": 3, "eagle": 1}
    assert "clamped" in caplog.text


def test_exact_zero_excludes_category():
    pool = [item("orbital_1", "orbital"), item("eagle_1", "eagle"), item("sentry_1", "sentry")]
    result = pick_loadout(pool, QuotaConfig.pinned(orbital=0), frozenset(), 25, rng=PythonRandomSource.seeded(2))
    assert {entry.item_id for entry in result} == {"eagle_1", "sentry_1"}


def test_pin_caps_category_during_fill():
    pool = [item(f"support_{idx}", "support_weapon") for idx in range(3)]
    result = pick_loadout(pool, QuotaConfig.pinned(support_weapon=2), DEFAULT_RULES, 25, rng=PythonRandomSource.seeded(8))
    assert len(result) == 2


def test_pin_shortfall_does_not_borrow_from_other_categories():
    pool = [item("orbital_1", "orbital"), item("eagle_1", "eagle"), item("eagle_2", "eagle")]
    result = pick_loadout(pool, QuotaConfig.pinned(orbital=3), frozenset(), 25, rng=PythonRandomSource.seeded(4))
    counts = Counter(entry.category for entry in result)
    assert counts["orbital"] == 1
    assert counts["eagle"] == 2


def test_allocate_quotas_marks_used_ids():
    pool = [item("orbital_1", "orbital"), item("orbital_2", "orbital"), item("eagle_1", "eagle")]
    used: set[str] = set()
    picked = allocate_quotas(pool, QuotaConfig.pinned(orbital=1), PythonRandomSource.seeded(1), used_ids=used)
    assert len(picked) == 1
    assert used == {picked[0].item_id}


def test_fill_remaining_never_duplicates_picked_items():
    pool = [item("orbital_1", "orbital"), item("eagle_1", "eagle")]
    picked = [pool[0]]
    result = fill_remaining(pool, picked, QuotaConfig.unconstrained(), frozenset(), PythonRandomSource.seeded(1))
    assert [entry.item_id for entry in result] == ["orbital_1", "eagle_1"]


def test_pick_loadout_reapplies_level_gate():
    pool = [item("early", "orbital", level=1), item("late", "eagle", level=20)]
    result = pick_loadout(pool, QuotaConfig.unconstrained(), frozenset(), 10, rng=PythonRandomSource.seeded(1))
    assert [entry.item_id for entry in result] == ["early"]


def test_custom_slot_count():
    pool = mixed_pool()
    result = pick_loadout(pool, QuotaConfig.unconstrained(), DEFAULT_RULES, 25, rng=PythonRandomSource.seeded(1), slots=2)
    assert len(result) == 2
