"""In-memory storage backend for LoadoutForge."""

from __future__ import annotations

import copy
from collections import deque
from typing import Deque, Sequence

from .base import PreferenceRecord, PreferenceStore, RollHistoryRecord, RollHistoryStore


class InMemoryPreferenceStore(PreferenceStore):
    def __init__(self) -> None:
        self._records: dict[int, PreferenceRecord] = {}

    async def get(self, user_id: int) -> PreferenceRecord | None:
        record = self._records.get(user_id)
        if record is None:
            return None
        # Hand out copies so callers cannot mutate stored state in place.
        return PreferenceRecord(
            user_id=record.user_id,
            data=copy.deepcopy(record.data),
            updated_at=record.updated_at,
        )

    async def save(self, record: PreferenceRecord) -> None:
        self._records[record.user_id] = PreferenceRecord(
            user_id=record.user_id,
            data=copy.deepcopy(record.data),
            updated_at=record.updated_at,
        )

    async def delete(self, user_id: int) -> None:
        self._records.pop(user_id, None)


class InMemoryRollHistoryStore(RollHistoryStore):
    def __init__(self, *, maxlen: int = 5000) -> None:
        self._history: Deque[RollHistoryRecord] = deque(maxlen=maxlen)

    async def add_record(self, record: RollHistoryRecord) -> None:
        self._history.append(record)

    async def recent_for_user(self, user_id: int, limit: int = 20) -> Sequence[RollHistoryRecord]:
        filtered = [rec for rec in reversed(self._history) if rec.user_id == user_id]
        return filtered[:limit]
