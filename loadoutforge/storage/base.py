"""Storage abstractions used by the LoadoutForge services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, Sequence


@dataclass(slots=True)
class PreferenceRecord:
    """Raw persisted preferences; ``data`` is validated on read, not on write."""

    user_id: int
    data: dict[str, Any] = field(default_factory=dict)
    updated_at: datetime | None = None


@dataclass(slots=True)
class RollHistoryRecord:
    user_id: int
    item_ids: Sequence[str]
    timestamp: datetime


class PreferenceStore(Protocol):
    async def get(self, user_id: int) -> PreferenceRecord | None:
        ...

    async def save(self, record: PreferenceRecord) -> None:
        ...

    async def delete(self, user_id: int) -> None:
        ...


class RollHistoryStore(Protocol):
    async def add_record(self, record: RollHistoryRecord) -> None:
        ...

    async def recent_for_user(self, user_id: int, limit: int = 20) -> Sequence[RollHistoryRecord]:
        ...
