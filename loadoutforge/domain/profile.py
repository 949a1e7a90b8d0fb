"""Player-facing preference operations."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from .constraints import CONFIGURED_CATEGORIES, LOADOUT_SIZE, UNCONSTRAINED, Exact, find_rule
from .events import PREFERENCES_CHANGED, EventBus
from .exceptions import (
    InvalidPlayerLevel,
    QuotaLimitExceeded,
    UnknownCategory,
    UnknownRule,
    UnknownSourcePack,
)
from .items import MAX_PLAYER_LEVEL, MIN_PLAYER_LEVEL, ItemCatalog, SourcePackSelection
from .preferences import (
    LoadoutPreferences,
    default_preferences,
    parse_preferences,
    preferences_to_dict,
)
from ..storage.base import PreferenceRecord, PreferenceStore


class ProfileService:
    """Expose read/write operations for a user's loadout preferences.

    Unlike the selection engine, these mutations validate eagerly and raise,
    so a front-end can reject an action (for example a fifth pin) instead of
    persisting it.
    """

    def __init__(
        self,
        store: PreferenceStore,
        catalog: ItemCatalog,
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._event_bus = event_bus

    async def fetch(self, user_id: int) -> LoadoutPreferences:
        record = await self._store.get(user_id)
        return parse_preferences(record.data if record else None, self._catalog)

    async def save(self, user_id: int, preferences: LoadoutPreferences) -> LoadoutPreferences:
        await self._store.save(
            PreferenceRecord(
                user_id=user_id,
                data=preferences_to_dict(preferences),
                updated_at=datetime.now(timezone.utc),
            )
        )
        await self._publish(user_id, preferences)
        return preferences

    async def toggle_pack(self, user_id: int, key: str) -> LoadoutPreferences:
        if key not in self._catalog.selection_keys():
            raise UnknownSourcePack(f"Source pack {key} is not in the catalog")
        preferences = await self.fetch(user_id)
        return await self.save(
            user_id, replace(preferences, source_packs=preferences.source_packs.toggled(key))
        )

    async def set_all_packs(self, user_id: int, enabled: bool) -> LoadoutPreferences:
        keys = self._catalog.selection_keys() if enabled else ()
        preferences = await self.fetch(user_id)
        return await self.save(
            user_id, replace(preferences, source_packs=SourcePackSelection.of(keys))
        )

    async def set_quota(self, user_id: int, category: str, count: int | None) -> LoadoutPreferences:
        """Pin ``category`` to ``count`` items, or unpin it with ``None``."""
        if category not in CONFIGURED_CATEGORIES:
            raise UnknownCategory(f"Category {category} cannot be pinned")
        preferences = await self.fetch(user_id)
        if count is None:
            quotas = preferences.quotas.with_quota(category, UNCONSTRAINED)
        else:
            if count < 0:
                raise ValueError("Count must not be negative")
            quotas = preferences.quotas.with_quota(category, UNCONSTRAINED)
            requested = quotas.pinned_total() + count
            if requested > LOADOUT_SIZE:
                raise QuotaLimitExceeded(requested, LOADOUT_SIZE)
            quotas = quotas.with_quota(category, Exact(count))
        return await self.save(user_id, replace(preferences, quotas=quotas))

    async def toggle_rule(self, user_id: int, key: str) -> LoadoutPreferences:
        if find_rule(key) is None:
            raise UnknownRule(f"Rule {key} does not exist")
        preferences = await self.fetch(user_id)
        rules = preferences.rules - {key} if key in preferences.rules else preferences.rules | {key}
        return await self.save(user_id, replace(preferences, rules=frozenset(rules)))

    async def set_level(self, user_id: int, level: int) -> LoadoutPreferences:
        if not MIN_PLAYER_LEVEL <= level <= MAX_PLAYER_LEVEL:
            raise InvalidPlayerLevel(
                f"Level must be within {MIN_PLAYER_LEVEL}..{MAX_PLAYER_LEVEL}, got {level}"
            )
        preferences = await self.fetch(user_id)
        return await self.save(user_id, replace(preferences, player_level=level))

    async def reset(self, user_id: int) -> LoadoutPreferences:
        await self._store.delete(user_id)
        preferences = default_preferences(self._catalog)
        await self._publish(user_id, preferences)
        return preferences

    async def _publish(self, user_id: int, preferences: LoadoutPreferences) -> None:
        if self._event_bus:
            await self._event_bus.publish(
                PREFERENCES_CHANGED,
                {"user_id": user_id, "preferences": preferences_to_dict(preferences)},
            )
