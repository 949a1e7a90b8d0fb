"""Factories for tests and prototyping."""

from __future__ import annotations

from dataclasses import dataclass, field
from random import Random
from typing import Iterable

from faker import Faker

from ..domain.constraints import CONFIGURED_CATEGORIES
from ..domain.items import CatalogItem, Direction, SourcePack


@dataclass(slots=True)
class ItemFactory:
    faker: Faker = field(default_factory=Faker)
    rng: Random = field(default_factory=Random)

    def build(
        self,
        category: str | None = None,
        *,
        source_pack: str | None = None,
        unlock_level: int | None = None,
    ) -> CatalogItem:
        category = category or self.rng.choice(CONFIGURED_CATEGORIES + ("backpack",))
        item_id = f"{category}_{self.faker.unique.lexify(text='????')}"
        code = tuple(self.rng.choice(list(Direction)) for _ in range(self.rng.randint(3, 8)))
        return CatalogItem(
            item_id=item_id,
            name=f"{self.faker.word().title()} {category.replace('_', ' ').title()}",
            category=category,
            code=code,
            source_pack=source_pack,
            unlock_level=unlock_level,
        )

    def batch(self, count: int, category: str | None = None, **kwargs) -> Iterable[CatalogItem]:
        for _ in range(count):
            yield self.build(category, **kwargs)


@dataclass(slots=True)
class PackFactory:
    faker: Faker = field(default_factory=Faker)

    def build(self, pack_id: str | None = None) -> SourcePack:
        pack_id = pack_id or f"warbond_{self.faker.unique.lexify(text='????')}"
        return SourcePack(pack_id=pack_id, name=self.faker.catch_phrase())
