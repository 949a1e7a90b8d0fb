"""Domain models and services."""

from .constraints import (
    CONFIGURED_CATEGORIES,
    DEFAULT_RULES,
    LOADOUT_SIZE,
    RULES,
    UNCONSTRAINED,
    Exact,
    ExclusivityRule,
    Quota,
    QuotaConfig,
    Unconstrained,
    effective_cap,
)
from .exceptions import (
    InvalidPlayerLevel,
    LoadoutForgeError,
    QuotaLimitExceeded,
    UnknownCategory,
    UnknownRule,
    UnknownSourcePack,
)
from .items import (
    BASE_GAME_KEY,
    MAX_PLAYER_LEVEL,
    CatalogItem,
    Direction,
    ItemCatalog,
    SourcePack,
    SourcePackSelection,
)
from .preferences import LoadoutPreferences, default_preferences, parse_preferences
from .profile import ProfileService
from .random_source import PythonRandomSource, RandomSource, shuffle
from .randomizer import LoadoutService, RollOutcome
from .reveal import RevealEvent, RevealPhase, RevealScheduler, RevealSnapshot
from .selection import allocate_quotas, fill_remaining, filter_pool, pick_loadout

__all__ = [
    "BASE_GAME_KEY",
    "CONFIGURED_CATEGORIES",
    "DEFAULT_RULES",
    "LOADOUT_SIZE",
    "MAX_PLAYER_LEVEL",
    "RULES",
    "UNCONSTRAINED",
    "CatalogItem",
    "Direction",
    "Exact",
    "ExclusivityRule",
    "InvalidPlayerLevel",
    "ItemCatalog",
    "LoadoutForgeError",
    "LoadoutPreferences",
    "LoadoutService",
    "PythonRandomSource",
    "ProfileService",
    "Quota",
    "QuotaConfig",
    "QuotaLimitExceeded",
    "RandomSource",
    "RevealEvent",
    "RevealPhase",
    "RevealScheduler",
    "RevealSnapshot",
    "RollOutcome",
    "SourcePack",
    "SourcePackSelection",
    "Unconstrained",
    "UnknownCategory",
    "UnknownRule",
    "UnknownSourcePack",
    "allocate_quotas",
    "default_preferences",
    "effective_cap",
    "fill_remaining",
    "filter_pool",
    "parse_preferences",
    "pick_loadout",
    "shuffle",
]
