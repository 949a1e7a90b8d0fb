"""Catalog item models and the in-memory catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

# Sentinel selection key for baseline items (those without a source pack).
BASE_GAME_KEY = "__base_game__"

# Highest unlock level in the dataset; a player at this level sees everything.
MAX_PLAYER_LEVEL = 25
MIN_PLAYER_LEVEL = 1


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def arrow(self) -> str:
        return _ARROWS[self]


_ARROWS = {
    Direction.UP: "⬆",
    Direction.DOWN: "⬇",
    Direction.LEFT: "⬅",
    Direction.RIGHT: "➡",
}


@dataclass(frozen=True, slots=True)
class CatalogItem:
    """A selectable stratagem. Reference data, never mutated at runtime."""

    item_id: str
    name: str
    category: str
    code: tuple[Direction, ...] = field(default_factory=tuple)
    source_pack: str | None = None
    unlock_level: int | None = None

    @property
    def is_baseline(self) -> bool:
        return self.source_pack is None

    @property
    def selection_key(self) -> str:
        return self.source_pack if self.source_pack is not None else BASE_GAME_KEY

    def code_arrows(self) -> str:
        return "".join(direction.arrow for direction in self.code)


@dataclass(frozen=True, slots=True)
class SourcePack:
    """Optional grouping of items that the user enables as a unit."""

    pack_id: str
    name: str


@dataclass(frozen=True, slots=True)
class SourcePackSelection:
    """Enabled source packs, with ``BASE_GAME_KEY`` standing for baseline items."""

    enabled: frozenset[str] = frozenset()

    @classmethod
    def of(cls, keys: Iterable[str]) -> "SourcePackSelection":
        return cls(enabled=frozenset(keys))

    @property
    def baseline_enabled(self) -> bool:
        return BASE_GAME_KEY in self.enabled

    def allows(self, item: CatalogItem) -> bool:
        return item.selection_key in self.enabled

    def toggled(self, key: str) -> "SourcePackSelection":
        if key in self.enabled:
            return SourcePackSelection(enabled=self.enabled - {key})
        return SourcePackSelection(enabled=self.enabled | {key})


class ItemCatalog:
    """Registry of items and source packs."""

    def __init__(self) -> None:
        self._items: dict[str, CatalogItem] = {}
        self._packs: dict[str, SourcePack] = {}

    def register_item(self, item: CatalogItem) -> None:
        if item.item_id in self._items:
            raise ValueError(f"Item {item.item_id} already registered")
        self._items[item.item_id] = item

    def register_items(self, items: Iterable[CatalogItem]) -> None:
        for item in items:
            self.register_item(item)

    def has_item(self, item_id: str) -> bool:
        return item_id in self._items

    def get_item(self, item_id: str) -> CatalogItem:
        try:
            return self._items[item_id]
        except KeyError as exc:
            raise KeyError(f"Item {item_id} not found") from exc

    def register_pack(self, pack: SourcePack) -> None:
        if pack.pack_id == BASE_GAME_KEY:
            raise ValueError(f"Pack id {BASE_GAME_KEY} is reserved for baseline items")
        if pack.pack_id in self._packs:
            raise ValueError(f"Pack {pack.pack_id} already registered")
        self._packs[pack.pack_id] = pack

    def get_pack(self, pack_id: str) -> SourcePack:
        try:
            return self._packs[pack_id]
        except KeyError as exc:
            raise KeyError(f"Pack {pack_id} not found") from exc

    def has_pack(self, pack_id: str) -> bool:
        return pack_id in self._packs

    def iter_items(self) -> Iterable[CatalogItem]:
        return self._items.values()

    def iter_packs(self) -> Iterable[SourcePack]:
        return self._packs.values()

    def selection_keys(self) -> tuple[str, ...]:
        """Every selectable key: baseline first, then packs in registration order."""
        return (BASE_GAME_KEY, *self._packs.keys())

    def categories(self) -> set[str]:
        return {item.category for item in self._items.values()}

    def __len__(self) -> int:
        return len(self._items)
