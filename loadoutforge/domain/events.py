"""Domain event dispatch."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, DefaultDict, Iterable, Mapping

logger = logging.getLogger(__name__)

ROLL_COMPLETED = "loadout.roll.completed"
PREFERENCES_CHANGED = "loadout.preferences.changed"

EventPayload = Mapping[str, Any]
EventListener = Callable[[EventPayload], Awaitable[None]]


@dataclass(slots=True)
class Event:
    name: str
    payload: EventPayload


class EventBus:
    """Async pub-sub; listeners run in subscription order."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, list[EventListener]] = defaultdict(list)
        self._published: list[Event] = []
        self._record = False

    def subscribe(self, event_name: str, listener: EventListener) -> None:
        self._listeners[event_name].append(listener)

    async def publish(self, event_name: str, payload: EventPayload) -> None:
        listeners = list(self._listeners.get(event_name, ()))
        logger.debug("Publishing %s to %s listener(s).", event_name, len(listeners))
        if self._record:
            self._published.append(Event(name=event_name, payload=payload))
        for listener in listeners:
            await listener(payload)

    def record(self, enabled: bool = True) -> None:
        """Keep a log of published events (used by tests and the test client)."""
        self._record = enabled

    def published(self, event_name: str | None = None) -> list[Event]:
        return [event for event in self._published if event_name in (None, event.name)]

    def clear(self) -> None:
        self._listeners.clear()
        self._published.clear()

    def listeners(self, event_name: str) -> Iterable[EventListener]:
        return tuple(self._listeners.get(event_name, ()))
