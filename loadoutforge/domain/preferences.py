"""Per-user loadout preferences and their tolerant (de)serialisation.

Persisted data may be stale or hand-edited. ``parse_preferences`` never
raises: each malformed field falls back to its default on its own, so one bad
field does not wipe the rest of a user's configuration.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from .constraints import (
    CONFIGURED_CATEGORIES,
    DEFAULT_RULES,
    LOADOUT_SIZE,
    RULES,
    UNCONSTRAINED,
    Exact,
    Quota,
    QuotaConfig,
)
from .items import MAX_PLAYER_LEVEL, MIN_PLAYER_LEVEL, ItemCatalog, SourcePackSelection

logger = logging.getLogger(__name__)

KEY_SOURCE_PACKS = "source_packs"
KEY_QUOTAS = "quotas"
KEY_RULES = "rules"
KEY_PLAYER_LEVEL = "player_level"


@dataclass(frozen=True, slots=True)
class LoadoutPreferences:
    source_packs: SourcePackSelection
    quotas: QuotaConfig = field(default_factory=QuotaConfig.unconstrained)
    rules: frozenset[str] = DEFAULT_RULES
    player_level: int = MAX_PLAYER_LEVEL


def default_preferences(catalog: ItemCatalog) -> LoadoutPreferences:
    """Everything enabled, nothing pinned, default rules, no level gate."""
    return LoadoutPreferences(source_packs=SourcePackSelection.of(catalog.selection_keys()))


def preferences_to_dict(preferences: LoadoutPreferences) -> dict[str, Any]:
    quotas: dict[str, int | None] = {}
    for category, quota in preferences.quotas.quotas.items():
        quotas[category] = quota.count if isinstance(quota, Exact) else None
    return {
        KEY_SOURCE_PACKS: sorted(preferences.source_packs.enabled),
        KEY_QUOTAS: quotas,
        KEY_RULES: sorted(preferences.rules),
        KEY_PLAYER_LEVEL: preferences.player_level,
    }


def parse_preferences(raw: Mapping[str, Any] | str | bytes | None, catalog: ItemCatalog) -> LoadoutPreferences:
    """Return validated preferences, substituting defaults for anything malformed."""
    defaults = default_preferences(catalog)
    if raw is None:
        return defaults
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except (ValueError, TypeError):
            logger.warning("Stored preferences are not valid JSON; using defaults.")
            return defaults
    if not isinstance(raw, Mapping):
        logger.warning("Stored preferences are not an object; using defaults.")
        return defaults

    return LoadoutPreferences(
        source_packs=_parse_source_packs(raw.get(KEY_SOURCE_PACKS), catalog, defaults.source_packs),
        quotas=_parse_quotas(raw.get(KEY_QUOTAS), defaults.quotas),
        rules=_parse_rules(raw.get(KEY_RULES), defaults.rules),
        player_level=_parse_level(raw.get(KEY_PLAYER_LEVEL), defaults.player_level),
    )


def _parse_source_packs(
    value: Any, catalog: ItemCatalog, default: SourcePackSelection
) -> SourcePackSelection:
    if value is None:
        return default
    if not isinstance(value, list) or not all(isinstance(key, str) for key in value):
        logger.warning("Ignoring malformed '%s': %r", KEY_SOURCE_PACKS, value)
        return default
    known = set(catalog.selection_keys())
    # Packs removed from the catalog since the preferences were saved are dropped.
    return SourcePackSelection.of(key for key in value if key in known)


def _parse_quotas(value: Any, default: QuotaConfig) -> QuotaConfig:
    if value is None:
        return default
    if not isinstance(value, Mapping):
        logger.warning("Ignoring malformed '%s': %r", KEY_QUOTAS, value)
        return default

    quotas: dict[str, Quota] = {category: UNCONSTRAINED for category in CONFIGURED_CATEGORIES}
    for category in CONFIGURED_CATEGORIES:
        count = value.get(category)
        if count is None:
            continue
        if isinstance(count, bool) or not isinstance(count, int) or not 0 <= count <= LOADOUT_SIZE:
            logger.warning("Ignoring malformed '%s': %r", KEY_QUOTAS, value)
            return default
        quotas[category] = Exact(count)

    parsed = QuotaConfig(quotas=quotas)
    if parsed.pinned_total() > LOADOUT_SIZE:
        logger.warning(
            "Ignoring '%s' pinning %s items into %s slots.",
            KEY_QUOTAS,
            parsed.pinned_total(),
            LOADOUT_SIZE,
        )
        return default
    return parsed


def _parse_rules(value: Any, default: frozenset[str]) -> frozenset[str]:
    if value is None:
        return default
    if not isinstance(value, list) or not all(isinstance(key, str) for key in value):
        logger.warning("Ignoring malformed '%s': %r", KEY_RULES, value)
        return default
    known = {rule.key for rule in RULES}
    return frozenset(key for key in value if key in known)


def _parse_level(value: Any, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        logger.warning("Ignoring malformed '%s': %r", KEY_PLAYER_LEVEL, value)
        return default
    if not MIN_PLAYER_LEVEL <= value <= MAX_PLAYER_LEVEL:
        logger.warning("Ignoring out-of-range '%s': %r", KEY_PLAYER_LEVEL, value)
        return default
    return value
