"""Quota and exclusivity-rule models used by the selection engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Union

# Slots in a loadout.
LOADOUT_SIZE = 4

# Categories the user can pin, in allocation priority order.
CONFIGURED_CATEGORIES: tuple[str, ...] = (
    "orbital",
    "eagle",
    "sentry",
    "vehicle",
    "emplacement",
    "support_weapon",
)

CATEGORY_LABELS: Mapping[str, str] = {
    "orbital": "Orbitals",
    "eagle": "Eagles",
    "sentry": "Sentries",
    "vehicle": "Vehicles",
    "emplacement": "Mines & Emplacements",
    "support_weapon": "Support Weapons",
    "backpack": "Backpacks",
}


@dataclass(frozen=True, slots=True)
class Unconstrained:
    """Pick freely from the category."""

    def __str__(self) -> str:
        return "any"


@dataclass(frozen=True, slots=True)
class Exact:
    """Require exactly ``count`` items of the category."""

    count: int

    def __post_init__(self) -> None:
        if not isinstance(self.count, int) or isinstance(self.count, bool):
            raise TypeError(f"Quota count must be an integer, got {self.count!r}")
        if not 0 <= self.count <= LOADOUT_SIZE:
            raise ValueError(f"Quota count must be within 0..{LOADOUT_SIZE}, got {self.count}")

    def __str__(self) -> str:
        return str(self.count)


Quota = Union[Unconstrained, Exact]
UNCONSTRAINED = Unconstrained()


@dataclass(frozen=True, slots=True)
class QuotaConfig:
    """Per-category quotas; categories not listed are unconstrained."""

    quotas: Mapping[str, Quota]

    @classmethod
    def unconstrained(cls) -> "QuotaConfig":
        return cls(quotas={category: UNCONSTRAINED for category in CONFIGURED_CATEGORIES})

    @classmethod
    def pinned(cls, **counts: int) -> "QuotaConfig":
        quotas: dict[str, Quota] = {category: UNCONSTRAINED for category in CONFIGURED_CATEGORIES}
        for category, count in counts.items():
            quotas[category] = Exact(count)
        return cls(quotas=quotas)

    def get(self, category: str) -> Quota:
        return self.quotas.get(category, UNCONSTRAINED)

    def with_quota(self, category: str, quota: Quota) -> "QuotaConfig":
        updated = dict(self.quotas)
        updated[category] = quota
        return QuotaConfig(quotas=updated)

    def pinned_total(self) -> int:
        return sum(quota.count for quota in self.quotas.values() if isinstance(quota, Exact))

    def pinned_items(self) -> Iterable[tuple[str, Exact]]:
        for category, quota in self.quotas.items():
            if isinstance(quota, Exact):
                yield category, quota


@dataclass(frozen=True, slots=True)
class ExclusivityRule:
    key: str
    label: str
    description: str
    category: str
    max_count: int


RULES: tuple[ExclusivityRule, ...] = (
    ExclusivityRule(
        key="no_double_backpack",
        label="Singular backpack",
        description="You've only got one back to carry with.",
        category="backpack",
        max_count=1,
    ),
)

DEFAULT_RULES: frozenset[str] = frozenset({"no_double_backpack"})


def find_rule(key: str) -> ExclusivityRule | None:
    return next((rule for rule in RULES if rule.key == key), None)


def effective_cap(
    category: str,
    quotas: QuotaConfig,
    active_rules: Iterable[str],
    *,
    rules: Iterable[ExclusivityRule] = RULES,
) -> int | None:
    """Return the maximum items allowed for ``category``; ``None`` means uncapped.

    A pin wins over a rule: once the quota pass has satisfied ``Exact(n)`` the
    fill pass may not add more of that category.
    """
    quota = quotas.get(category)
    if isinstance(quota, Exact):
        return quota.count
    active = set(active_rules)
    for rule in rules:
        if rule.category == category and rule.key in active:
            return rule.max_count
    return None
