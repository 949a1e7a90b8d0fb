"""Storage backends for LoadoutForge."""

from .base import PreferenceRecord, PreferenceStore, RollHistoryRecord, RollHistoryStore
from .memory import InMemoryPreferenceStore, InMemoryRollHistoryStore
from .sqlalchemy import AsyncSQLAlchemyStorage

__all__ = [
    "PreferenceRecord",
    "PreferenceStore",
    "RollHistoryRecord",
    "RollHistoryStore",
    "InMemoryPreferenceStore",
    "InMemoryRollHistoryStore",
    "AsyncSQLAlchemyStorage",
]
