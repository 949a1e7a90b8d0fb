from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from loadoutforge.app import LoadoutApp
from loadoutforge.config import LoadoutForgeConfig, StorageConfig
from loadoutforge.domain.items import CatalogItem
from loadoutforge.storage import (
    AsyncSQLAlchemyStorage,
    InMemoryPreferenceStore,
    InMemoryRollHistoryStore,
    PreferenceRecord,
    RollHistoryRecord,
)

NOW = datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio()
async def test_memory_preference_store_copies_data():
    store = InMemoryPreferenceStore()
    data = {"rules": ["no_double_backpack"]}
    await store.save(PreferenceRecord(user_id=1, data=data, updated_at=NOW))
    data["rules"].append("mutated")

    record = await store.get(1)
    assert record.data == {"rules": ["no_double_backpack"]}
    record.data["rules"].clear()
    assert (await store.get(1)).data == {"rules": ["no_double_backpack"]}

    await store.delete(1)
    assert await store.get(1) is None


@pytest.mark.asyncio()
async def test_memory_history_store_filters_by_user():
    store = InMemoryRollHistoryStore(maxlen=3)
    for idx in range(4):
        await store.add_record(RollHistoryRecord(user_id=1, item_ids=[f"item_{idx}"], timestamp=NOW))
    await store.add_record(RollHistoryRecord(user_id=2, item_ids=["other"], timestamp=NOW))

    records = await store.recent_for_user(1)
    assert [record.item_ids for record in records] == [["item_3"], ["item_2"]]


@pytest.mark.asyncio()
async def test_sqlalchemy_storage_round_trip(tmp_path: Path):
    storage = AsyncSQLAlchemyStorage(f"sqlite+aiosqlite:///{(tmp_path / 'forge.db').as_posix()}")
    await storage.init_models()
    try:
        preferences = storage.preference_store()
        await preferences.save(PreferenceRecord(user_id=5, data={"player_level": 9}, updated_at=NOW))
        await preferences.save(PreferenceRecord(user_id=5, data={"player_level": 10}, updated_at=NOW))
        record = await preferences.get(5)
        assert record.data == {"player_level": 10}
        await preferences.delete(5)
        assert await preferences.get(5) is None

        history = storage.roll_history_store()
        for idx in range(3):
            await history.add_record(
                RollHistoryRecord(user_id=5, item_ids=[f"item_{idx}"], timestamp=NOW + timedelta(minutes=idx))
            )
        records = await history.recent_for_user(5, limit=2)
        assert [list(record.item_ids) for record in records] == [["item_2"], ["item_1"]]
    finally:
        await storage.dispose()


@pytest.mark.asyncio()
async def test_app_with_sqlalchemy_backend(tmp_path: Path):
    dsn = f"sqlite+aiosqlite:///{(tmp_path / 'app.db').as_posix()}"
    app = LoadoutApp(LoadoutForgeConfig(bot_token="test", storage=StorageConfig(backend="sqlalchemy", dsn=dsn)))
    app.items.items(*(CatalogItem(item_id=f"eagle_{idx}", name=f"Eagle {idx}", category="eagle") for idx in range(5)))
    await app.init_backend()
    try:
        await app.profile_service.set_level(3, 12)
        outcome = await app.loadout_service.roll(3)
        assert (await app.profile_service.fetch(3)).player_level == 12
        [record] = await app.loadout_service.recent_rolls(3)
        assert list(record.item_ids) == [item.item_id for item in outcome.items]
    finally:
        await app.close()


def test_unknown_backend_is_rejected():
    config = LoadoutForgeConfig(bot_token="test", storage=StorageConfig(backend="redis"))
    with pytest.raises(ValueError):
        LoadoutApp(config)
