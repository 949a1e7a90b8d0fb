from dataclasses import replace
from random import Random

import pytest

from loadoutforge.diagnostics import RollSimulator, run_checklist
from loadoutforge.domain.constraints import QuotaConfig
from loadoutforge.domain.items import CatalogItem, SourcePack
from loadoutforge.domain.preferences import default_preferences


def populate(app) -> None:
    app.items.pack(SourcePack(pack_id="cutting_edge", name="Cutting Edge"))
    app.items.pack(SourcePack(pack_id="empty_pack", name="Empty"))
    app.items.items(
        CatalogItem(item_id="orbital_1", name="Orbital 1", category="orbital"),
        CatalogItem(item_id="orbital_2", name="Orbital 2", category="orbital"),
        CatalogItem(item_id="eagle_1", name="Eagle 1", category="eagle"),
        CatalogItem(item_id="backpack_1", name="Backpack 1", category="backpack"),
        CatalogItem(item_id="backpack_2", name="Backpack 2", category="backpack", source_pack="cutting_edge"),
    )


def test_simulator_counts_categories_and_respects_rules(memory_app):
    populate(memory_app)
    result = RollSimulator(memory_app, rng=Random(3)).simulate(rolls=200)

    assert result.rolls == 200
    assert result.pool_size == 5
    assert result.category_counts["backpack"] == 200
    assert result.average_size == pytest.approx(4.0)
    assert result.short_rolls == 0
    assert result.empty_rolls == 0


def test_simulator_reports_short_rolls(memory_app):
    populate(memory_app)
    preferences = replace(default_preferences(memory_app.catalog), quotas=QuotaConfig.pinned(orbital=0, eagle=0))
    result = RollSimulator(memory_app, rng=Random(1)).simulate(preferences, rolls=50)

    assert result.short_rolls == 50
    assert result.average_size == pytest.approx(1.0)
    assert set(result.category_counts) == {"backpack"}


def test_simulator_rejects_non_positive_rolls(memory_app):
    populate(memory_app)
    with pytest.raises(ValueError):
        RollSimulator(memory_app).simulate(rolls=0)


def test_checklist_flags_gaps(memory_app):
    populate(memory_app)
    issues = run_checklist(memory_app)
    messages = [issue.message for issue in issues]

    assert any("'sentry' has no items" in message for message in messages)
    assert any("'orbital' has only 2" in message for message in messages)
    assert any("'empty_pack' has no items" in message for message in messages)
    assert all(issue.severity != "error" for issue in issues)


def test_checklist_on_empty_catalog(memory_app):
    [issue] = run_checklist(memory_app)
    assert issue.severity == "error"
