"""Top level application object for LoadoutForge."""

from __future__ import annotations

from pathlib import Path
from random import Random
from typing import Any

from .config import LoadoutForgeConfig
from .domain.events import EventBus
from .domain.items import ItemCatalog
from .domain.profile import ProfileService
from .domain.random_source import PythonRandomSource, RandomSource
from .domain.randomizer import LoadoutService
from .domain.reveal import RevealScheduler, Timer
from .registry import CatalogRegistry
from .storage.base import PreferenceStore, RollHistoryStore
from .storage.memory import InMemoryPreferenceStore, InMemoryRollHistoryStore
from .storage.sqlalchemy import AsyncSQLAlchemyStorage


class LoadoutApp:
    """Central dependency container used by front-ends and tools."""

    def __init__(
        self,
        config: LoadoutForgeConfig,
        *,
        preference_store: PreferenceStore | None = None,
        history_store: RollHistoryStore | None = None,
        event_bus: EventBus | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self.config = config
        self.event_bus = event_bus or EventBus()
        self.items = CatalogRegistry()

        self._rng = rng or PythonRandomSource(
            Random(config.rng_seed) if config.rng_seed is not None else Random()
        )

        self._sqlalchemy_storage: AsyncSQLAlchemyStorage | None = None
        self.preference_store, self.history_store = self._wire_storage(
            preference_store, history_store
        )

        self.profile_service = ProfileService(
            self.preference_store, self.items.catalog, event_bus=self.event_bus
        )
        self.loadout_service = LoadoutService(
            catalog=self.items.catalog,
            profiles=self.profile_service,
            history_store=self.history_store,
            event_bus=self.event_bus,
            rng=self._rng,
            slots=self.config.slot_count,
        )

    @property
    def catalog(self) -> ItemCatalog:
        return self.items.catalog

    @property
    def rng(self) -> RandomSource:
        return self._rng

    def _wire_storage(
        self,
        preference_store: PreferenceStore | None,
        history_store: RollHistoryStore | None,
    ) -> tuple[PreferenceStore, RollHistoryStore]:
        if preference_store and history_store:
            return preference_store, history_store

        backend = self.config.storage.backend
        if backend == "memory":
            return (
                preference_store or InMemoryPreferenceStore(),
                history_store or InMemoryRollHistoryStore(),
            )
        if backend == "sqlalchemy":
            dsn = self.config.storage.resolve_dsn()
            if not dsn:
                raise ValueError("SQLAlchemy backend requires a DSN")
            storage = AsyncSQLAlchemyStorage(dsn, echo=self.config.storage.echo_sql)
            self._sqlalchemy_storage = storage
            return (
                preference_store or storage.preference_store(),
                history_store or storage.roll_history_store(),
            )
        raise ValueError(f"Unsupported storage backend {backend}")

    def new_reveal_scheduler(
        self, *, timer: Timer | None = None, rng: RandomSource | None = None
    ) -> RevealScheduler:
        """Create a scheduler using the configured timings.

        Cosmetic churn gets its own random source so that animating a reveal
        does not shift the sequence used for rolls.
        """
        return RevealScheduler(
            self.config.reveal,
            timer=timer,
            rng=rng or PythonRandomSource.seeded(self.config.rng_seed),
        )

    def load_configured_catalog(self) -> None:
        """Load the catalog named by ``config.catalog_path``, if any."""
        from .loaders import load_catalog_from_json

        if self.config.catalog_path:
            load_catalog_from_json(self, Path(self.config.catalog_path))

    def snapshot(self) -> dict[str, Any]:
        """Export current configuration for debugging."""
        return {
            "storage": self.config.storage.backend,
            "items": [item.item_id for item in self.catalog.iter_items()],
            "packs": [pack.pack_id for pack in self.catalog.iter_packs()],
            "categories": sorted(self.catalog.categories()),
            "slot_count": self.config.slot_count,
        }

    async def init_backend(self) -> None:
        """Initialize storage backend resources (e.g., database tables)."""
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.init_models()

    async def close(self) -> None:
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.dispose()
