"""Loadout roll simulation helpers."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from random import Random

from ..app import LoadoutApp
from ..domain.items import CatalogItem
from ..domain.preferences import LoadoutPreferences, default_preferences
from ..domain.random_source import PythonRandomSource
from ..domain.selection import pick_loadout


@dataclass(slots=True)
class SimulationResult:
    rolls: int
    pool_size: int = 0
    category_counts: Counter = field(default_factory=Counter)
    item_counts: Counter = field(default_factory=Counter)
    short_rolls: int = 0
    empty_rolls: int = 0
    total_items: int = 0

    def merge(self, items: list[CatalogItem], slots: int) -> None:
        self.total_items += len(items)
        if not items:
            self.empty_rolls += 1
        elif len(items) < slots:
            self.short_rolls += 1
        for item in items:
            self.category_counts[item.category] += 1
            self.item_counts[item.item_id] += 1

    @property
    def average_size(self) -> float:
        return self.total_items / self.rolls if self.rolls else 0.0


class RollSimulator:
    """Monte-Carlo simulation of loadout rolls under fixed preferences."""

    def __init__(self, app: LoadoutApp, *, rng: Random | None = None) -> None:
        self._app = app
        self._rng = PythonRandomSource(rng or Random())

    def simulate(
        self, preferences: LoadoutPreferences | None = None, *, rolls: int = 1000
    ) -> SimulationResult:
        if rolls <= 0:
            raise ValueError("Rolls must be positive")
        preferences = preferences or default_preferences(self._app.catalog)
        pool = self._app.loadout_service.eligible_pool(preferences)
        slots = self._app.config.slot_count
        result = SimulationResult(rolls=rolls, pool_size=len(pool))
        for _ in range(rolls):
            items = pick_loadout(
                pool,
                preferences.quotas,
                preferences.rules,
                preferences.player_level,
                rng=self._rng,
                slots=slots,
            )
            result.merge(items, slots)
        return result
