"""Roll loadouts for players and record the outcome."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from .constraints import CONFIGURED_CATEGORIES, LOADOUT_SIZE
from .events import ROLL_COMPLETED, EventBus
from .items import CatalogItem, ItemCatalog
from .preferences import LoadoutPreferences
from .profile import ProfileService
from .random_source import PythonRandomSource, RandomSource
from .selection import filter_pool, pick_loadout
from ..storage.base import RollHistoryRecord, RollHistoryStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RollOutcome:
    items: Sequence[CatalogItem]
    pool_size: int
    empty_slots: int
    rolled_at: datetime

    @property
    def is_empty(self) -> bool:
        return not self.items


class LoadoutService:
    """Run the selection engine against a user's stored preferences."""

    def __init__(
        self,
        catalog: ItemCatalog,
        profiles: ProfileService,
        history_store: RollHistoryStore,
        event_bus: EventBus,
        *,
        rng: RandomSource | None = None,
        slots: int = LOADOUT_SIZE,
        category_order: Sequence[str] = CONFIGURED_CATEGORIES,
    ) -> None:
        self._catalog = catalog
        self._profiles = profiles
        self._history_store = history_store
        self._event_bus = event_bus
        self._rng = rng or PythonRandomSource()
        self._slots = slots
        self._category_order = tuple(category_order)

    async def roll(self, user_id: int) -> RollOutcome:
        preferences = await self._profiles.fetch(user_id)
        outcome = self.roll_with(preferences)

        await self._history_store.add_record(
            RollHistoryRecord(
                user_id=user_id,
                item_ids=[item.item_id for item in outcome.items],
                timestamp=outcome.rolled_at,
            )
        )
        await self._event_bus.publish(
            ROLL_COMPLETED,
            {
                "user_id": user_id,
                "items": [item.item_id for item in outcome.items],
                "pool_size": outcome.pool_size,
                "empty_slots": outcome.empty_slots,
            },
        )
        return outcome

    def roll_with(self, preferences: LoadoutPreferences) -> RollOutcome:
        """Synchronous roll for callers that already hold preferences."""
        pool = self.eligible_pool(preferences)
        items = pick_loadout(
            pool,
            preferences.quotas,
            preferences.rules,
            preferences.player_level,
            rng=self._rng,
            order=self._category_order,
            slots=self._slots,
        )
        logger.info(
            "Rolled %s/%s items from a pool of %s.", len(items), self._slots, len(pool)
        )
        return RollOutcome(
            items=tuple(items),
            pool_size=len(pool),
            empty_slots=self._slots - len(items),
            rolled_at=datetime.now(timezone.utc),
        )

    def eligible_pool(self, preferences: LoadoutPreferences) -> list[CatalogItem]:
        return filter_pool(
            self._catalog.iter_items(), preferences.source_packs, preferences.player_level
        )

    async def recent_rolls(self, user_id: int, limit: int = 10) -> Sequence[RollHistoryRecord]:
        return await self._history_store.recent_for_user(user_id, limit)
