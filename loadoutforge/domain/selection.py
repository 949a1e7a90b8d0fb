"""Constrained loadout selection: pool filter, quota allocator and fill engine.

The pipeline is synchronous and never raises for data reasons. An empty pool
yields an empty loadout and an undersized pool yields a short one.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Sequence

from .constraints import (
    CONFIGURED_CATEGORIES,
    LOADOUT_SIZE,
    RULES,
    Exact,
    ExclusivityRule,
    QuotaConfig,
    effective_cap,
)
from .items import CatalogItem, SourcePackSelection
from .random_source import RandomSource, shuffle

logger = logging.getLogger(__name__)


def is_unlocked(item: CatalogItem, player_level: int) -> bool:
    return item.unlock_level is None or item.unlock_level <= player_level


def filter_by_level(items: Iterable[CatalogItem], player_level: int) -> list[CatalogItem]:
    return [item for item in items if is_unlocked(item, player_level)]


def filter_pool(
    items: Iterable[CatalogItem],
    selection: SourcePackSelection,
    player_level: int,
) -> list[CatalogItem]:
    """Keep items from enabled source packs that the player has unlocked."""
    return [
        item
        for item in items
        if selection.allows(item) and is_unlocked(item, player_level)
    ]


def allocate_quotas(
    pool: Sequence[CatalogItem],
    quotas: QuotaConfig,
    rng: RandomSource,
    *,
    order: Sequence[str] = CONFIGURED_CATEGORIES,
    slots: int = LOADOUT_SIZE,
    used_ids: set[str] | None = None,
) -> list[CatalogItem]:
    """Draw exactly-pinned categories first, in ``order``.

    Each pinned category draws from a full shuffle of its unused items. The
    pass stops taking items once ``slots`` are filled, so pins summing above
    the loadout size are honoured in priority order and the rest dropped.
    """
    used = used_ids if used_ids is not None else set()
    picked: list[CatalogItem] = []
    for category in order:
        quota = quotas.get(category)
        if not isinstance(quota, Exact) or quota.count == 0:
            continue

        candidates = shuffle(
            [item for item in pool if item.category == category and item.item_id not in used],
            rng,
        )
        budget = slots - len(picked)
        wanted = min(quota.count, budget)
        if wanted < quota.count:
            logger.warning(
                "Pinned quotas exceed %s slots; '%s' clamped from %s to %s.",
                slots,
                category,
                quota.count,
                wanted,
            )
        for item in candidates[:wanted]:
            picked.append(item)
            used.add(item.item_id)
    return picked


def fill_remaining(
    pool: Sequence[CatalogItem],
    picked: Sequence[CatalogItem],
    quotas: QuotaConfig,
    active_rules: Iterable[str],
    rng: RandomSource,
    *,
    slots: int = LOADOUT_SIZE,
    rules: Sequence[ExclusivityRule] = RULES,
) -> list[CatalogItem]:
    """Top up ``picked`` to ``slots`` items from a single shuffle of the rest of the pool."""
    result = list(picked)
    if len(result) >= slots:
        return result

    active = frozenset(active_rules)
    used = {item.item_id for item in result}
    per_category: Counter[str] = Counter(item.category for item in result)
    caps: dict[str, int | None] = {}

    candidates = shuffle([item for item in pool if item.item_id not in used], rng)
    for item in candidates:
        if len(result) >= slots:
            break
        if item.item_id in used:
            continue
        if item.category not in caps:
            caps[item.category] = effective_cap(item.category, quotas, active, rules=rules)
        cap = caps[item.category]
        if cap is not None and per_category[item.category] >= cap:
            continue
        result.append(item)
        used.add(item.item_id)
        per_category[item.category] += 1
    return result


def pick_loadout(
    pool: Iterable[CatalogItem],
    quotas: QuotaConfig,
    active_rules: Iterable[str],
    player_level: int,
    *,
    rng: RandomSource,
    order: Sequence[str] = CONFIGURED_CATEGORIES,
    slots: int = LOADOUT_SIZE,
    rules: Sequence[ExclusivityRule] = RULES,
) -> list[CatalogItem]:
    """Pick up to ``slots`` distinct items honouring pins, rules and the level gate.

    ``pool`` is normally already restricted to enabled source packs; the level
    gate is (re)applied here so callers can pass a pack-filtered list directly.
    """
    levelled = filter_by_level(pool, player_level)
    active = frozenset(active_rules)
    used: set[str] = set()
    picked = allocate_quotas(levelled, quotas, rng, order=order, slots=slots, used_ids=used)
    return fill_remaining(levelled, picked, quotas, active, rng, slots=slots, rules=rules)
