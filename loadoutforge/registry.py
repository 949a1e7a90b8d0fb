"""Runtime registry for catalog items and source packs."""

from __future__ import annotations

from .domain.items import CatalogItem, ItemCatalog, SourcePack


class CatalogRegistry:
    """Facade around ItemCatalog with chainable API."""

    def __init__(self, catalog: ItemCatalog | None = None) -> None:
        self.catalog = catalog or ItemCatalog()

    def item(self, item: CatalogItem) -> "CatalogRegistry":
        self.catalog.register_item(item)
        return self

    def items(self, *items: CatalogItem) -> "CatalogRegistry":
        self.catalog.register_items(items)
        return self

    def pack(self, pack: SourcePack) -> "CatalogRegistry":
        self.catalog.register_pack(pack)
        return self


__all__ = ["CatalogRegistry"]
