import pytest

from loadoutforge.app import LoadoutApp
from loadoutforge.config import LoadoutForgeConfig
from loadoutforge.domain.constraints import Exact, UNCONSTRAINED
from loadoutforge.domain.events import PREFERENCES_CHANGED
from loadoutforge.domain.exceptions import (
    InvalidPlayerLevel,
    QuotaLimitExceeded,
    UnknownCategory,
    UnknownRule,
    UnknownSourcePack,
)
from loadoutforge.domain.items import BASE_GAME_KEY, CatalogItem, SourcePack
from loadoutforge.domain.preferences import preferences_to_dict


def build_app() -> LoadoutApp:
    app = LoadoutApp(LoadoutForgeConfig(bot_token="test", rng_seed=7))
    app.items.pack(SourcePack(pack_id="cutting_edge", name="Cutting Edge"))
    app.items.item(CatalogItem(item_id="arc_thrower", name="Arc Thrower", category="support_weapon", source_pack="cutting_edge"))
    return app


@pytest.mark.asyncio()
async def test_fetch_returns_defaults_for_new_user():
    app = build_app()
    preferences = await app.profile_service.fetch(1)
    assert preferences.source_packs.enabled == {BASE_GAME_KEY, "cutting_edge"}


@pytest.mark.asyncio()
async def test_toggle_pack_persists_and_publishes():
    app = build_app()
    app.event_bus.record()
    preferences = await app.profile_service.toggle_pack(1, "cutting_edge")
    assert "cutting_edge" not in preferences.source_packs.enabled
    assert "cutting_edge" not in (await app.profile_service.fetch(1)).source_packs.enabled
    [event] = app.event_bus.published(PREFERENCES_CHANGED)
    assert event.payload["user_id"] == 1

    preferences = await app.profile_service.toggle_pack(1, "cutting_edge")
    assert "cutting_edge" in preferences.source_packs.enabled


@pytest.mark.asyncio()
async def test_toggle_unknown_pack_raises():
    app = build_app()
    with pytest.raises(UnknownSourcePack):
        await app.profile_service.toggle_pack(1, "nope")


@pytest.mark.asyncio()
async def test_set_all_packs():
    app = build_app()
    preferences = await app.profile_service.set_all_packs(1, False)
    assert preferences.source_packs.enabled == frozenset()
    preferences = await app.profile_service.set_all_packs(1, True)
    assert preferences.source_packs.enabled == {BASE_GAME_KEY, "cutting_edge"}


@pytest.mark.asyncio()
async def test_set_quota_pins_and_unpins():
    app = build_app()
    preferences = await app.profile_service.set_quota(1, "orbital", 2)
    assert preferences.quotas.get("orbital") == Exact(2)
    preferences = await app.profile_service.set_quota(1, "orbital", None)
    assert preferences.quotas.get("orbital") is UNCONSTRAINED


@pytest.mark.asyncio()
async def test_set_quota_rejects_total_over_loadout():
    app = build_app()
    await app.profile_service.set_quota(1, "orbital", 3)
    with pytest.raises(QuotaLimitExceeded) as excinfo:
        await app.profile_service.set_quota(1, "eagle", 2)
    assert excinfo.value.requested_total == 5
    assert excinfo.value.limit == 4
    # Re-pinning the same category replaces its count rather than adding to it.
    preferences = await app.profile_service.set_quota(1, "orbital", 4)
    assert preferences.quotas.pinned_total() == 4


@pytest.mark.asyncio()
async def test_set_quota_validates_category_and_count():
    app = build_app()
    with pytest.raises(UnknownCategory):
        await app.profile_service.set_quota(1, "backpack", 1)
    with pytest.raises(ValueError):
        await app.profile_service.set_quota(1, "orbital", -1)


@pytest.mark.asyncio()
async def test_toggle_rule():
    app = build_app()
    preferences = await app.profile_service.toggle_rule(1, "no_double_backpack")
    assert preferences.rules == frozenset()
    with pytest.raises(UnknownRule):
        await app.profile_service.toggle_rule(1, "no_fun")


@pytest.mark.asyncio()
async def test_set_level_and_reset():
    app = build_app()
    preferences = await app.profile_service.set_level(1, 10)
    assert preferences.player_level == 10
    with pytest.raises(InvalidPlayerLevel):
        await app.profile_service.set_level(1, 0)
    with pytest.raises(InvalidPlayerLevel):
        await app.profile_service.set_level(1, 26)

    preferences = await app.profile_service.reset(1)
    assert preferences.player_level == 25
    assert (await app.profile_service.fetch(1)).player_level == 25


@pytest.mark.asyncio()
async def test_reset_publishes_default_preferences():
    app = build_app()
    await app.profile_service.set_level(1, 10)
    app.event_bus.record()

    preferences = await app.profile_service.reset(1)

    [event] = app.event_bus.published(PREFERENCES_CHANGED)
    assert event.payload == {"user_id": 1, "preferences": preferences_to_dict(preferences)}
    assert event.payload["preferences"]["player_level"] == 25
