"""Slot-machine reveal of an already computed loadout.

The scheduler owns its per-run state. Every timer callback is bound to the run
that scheduled it, and starting a new run both cancels the previous run's
handles and bumps the run id, so a stale callback can never touch new state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol, Sequence

from ..config import RevealConfig
from .items import CatalogItem
from .random_source import PythonRandomSource, RandomSource, random_index

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Timer(Protocol):
    """Subset of :class:`asyncio.AbstractEventLoop` the scheduler relies on."""

    def time(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class RevealPhase(str, Enum):
    IDLE = "idle"
    SPINNING = "spinning"
    DONE = "done"


class RevealEvent(str, Enum):
    STARTED = "started"
    TICK = "tick"
    LOCKED = "locked"
    FLASH_CLEARED = "flash_cleared"
    DONE = "done"


@dataclass(slots=True)
class SlotState:
    locked: bool = False
    just_locked: bool = False
    display_item: CatalogItem | None = None


@dataclass(frozen=True, slots=True)
class RevealSnapshot:
    run_id: int
    phase: RevealPhase
    display_slots: tuple[CatalogItem | None, ...]
    slot_locked: tuple[bool, ...]
    slot_just_locked: tuple[bool, ...]
    slot_index: int | None = None

    @property
    def spinning(self) -> bool:
        return self.phase is RevealPhase.SPINNING


RevealListener = Callable[[RevealEvent, RevealSnapshot], None]


@dataclass(slots=True)
class _Run:
    run_id: int
    result: tuple[CatalogItem, ...]
    catalog: tuple[CatalogItem, ...]
    slots: list[SlotState]
    handles: list[TimerHandle] = field(default_factory=list)
    tick_handle: TimerHandle | None = None


class RevealScheduler:
    """Timer-driven state machine animating a precomputed result."""

    def __init__(
        self,
        config: RevealConfig | None = None,
        *,
        timer: Timer | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self._config = config or RevealConfig()
        self._timer = timer
        self._rng = rng or PythonRandomSource()
        self._run_id = 0
        self._run: _Run | None = None
        self._phase = RevealPhase.IDLE
        self._listeners: list[RevealListener] = []

    # -- presentation-facing state -------------------------------------------------

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def phase(self) -> RevealPhase:
        return self._phase

    @property
    def spinning(self) -> bool:
        return self._phase is RevealPhase.SPINNING

    @property
    def display_slots(self) -> list[CatalogItem | None]:
        return [slot.display_item for slot in self._slots()]

    @property
    def slot_locked(self) -> list[bool]:
        return [slot.locked for slot in self._slots()]

    @property
    def slot_just_locked(self) -> list[bool]:
        return [slot.just_locked for slot in self._slots()]

    @property
    def result(self) -> tuple[CatalogItem, ...]:
        return self._run.result if self._run else ()

    def snapshot(self, slot_index: int | None = None) -> RevealSnapshot:
        slots = self._slots()
        return RevealSnapshot(
            run_id=self._run_id,
            phase=self._phase,
            display_slots=tuple(slot.display_item for slot in slots),
            slot_locked=tuple(slot.locked for slot in slots),
            slot_just_locked=tuple(slot.just_locked for slot in slots),
            slot_index=slot_index,
        )

    def subscribe(self, listener: RevealListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: RevealListener) -> None:
        self._listeners.remove(listener)

    # -- lifecycle -----------------------------------------------------------------

    def start_animation(
        self, result: Sequence[CatalogItem], catalog: Sequence[CatalogItem]
    ) -> int:
        """Start revealing ``result`` and return the new run id.

        Any run still in flight is cancelled first.
        """
        offsets = self._config.lock_offsets_ms
        if len(result) > len(offsets):
            raise ValueError(
                f"Cannot reveal {len(result)} slots with {len(offsets)} lock offsets"
            )

        self._cancel_current()
        self._run_id += 1
        run_id = self._run_id

        if not result:
            logger.debug("Reveal run %s has nothing to reveal.", run_id)
            self._run = None
            self._phase = RevealPhase.IDLE
            return run_id

        timer = self._resolve_timer()
        run = _Run(
            run_id=run_id,
            result=tuple(result),
            catalog=tuple(catalog),
            slots=[SlotState() for _ in result],
        )
        self._run = run
        self._phase = RevealPhase.SPINNING
        logger.debug("Reveal run %s started with %s slots.", run_id, len(result))
        self._emit(RevealEvent.STARTED)

        interval = self._config.tick_interval_ms / 1000
        run.tick_handle = timer.call_later(interval, self._on_tick, run_id)

        used_offsets = offsets[: len(result)]
        for index, offset_ms in enumerate(used_offsets):
            run.handles.append(timer.call_later(offset_ms / 1000, self._on_lock, run_id, index))

        finish_at = (used_offsets[-1] + self._config.grace_ms) / 1000
        run.handles.append(timer.call_later(finish_at, self._on_finish, run_id))
        return run_id

    def shutdown(self) -> None:
        """Cancel pending timers, for example when the owning chat goes away."""
        self._cancel_current()
        self._run_id += 1
        self._run = None
        self._phase = RevealPhase.IDLE

    # -- timer callbacks -----------------------------------------------------------

    def _on_tick(self, run_id: int) -> None:
        run = self._active(run_id)
        if run is None or self._phase is not RevealPhase.SPINNING:
            return
        for slot in run.slots:
            if not slot.locked:
                slot.display_item = self._random_display(run.catalog)
        interval = self._config.tick_interval_ms / 1000
        run.tick_handle = self._resolve_timer().call_later(interval, self._on_tick, run_id)
        self._emit(RevealEvent.TICK)

    def _on_lock(self, run_id: int, index: int) -> None:
        run = self._active(run_id)
        if run is None:
            return
        slot = run.slots[index]
        slot.display_item = run.result[index]
        slot.locked = True
        slot.just_locked = True
        logger.debug("Reveal run %s locked slot %s on %s.", run_id, index, slot.display_item.item_id)
        flash = self._config.flash_ms / 1000
        run.handles.append(
            self._resolve_timer().call_later(flash, self._on_flash_cleared, run_id, index)
        )
        self._emit(RevealEvent.LOCKED, index)

    def _on_flash_cleared(self, run_id: int, index: int) -> None:
        run = self._active(run_id)
        if run is None:
            return
        run.slots[index].just_locked = False
        self._emit(RevealEvent.FLASH_CLEARED, index)

    def _on_finish(self, run_id: int) -> None:
        run = self._active(run_id)
        if run is None:
            return
        if run.tick_handle is not None:
            run.tick_handle.cancel()
            run.tick_handle = None
        self._phase = RevealPhase.DONE
        logger.debug("Reveal run %s done.", run_id)
        self._emit(RevealEvent.DONE)

    # -- helpers -------------------------------------------------------------------

    def _active(self, run_id: int) -> _Run | None:
        if run_id != self._run_id or self._run is None:
            logger.debug("Ignoring stale reveal callback from run %s.", run_id)
            return None
        return self._run

    def _slots(self) -> list[SlotState]:
        return self._run.slots if self._run else []

    def _random_display(self, catalog: Sequence[CatalogItem]) -> CatalogItem | None:
        if not catalog:
            return None
        return catalog[random_index(self._rng, len(catalog))]

    def _cancel_current(self) -> None:
        run = self._run
        if run is None:
            return
        if run.tick_handle is not None:
            run.tick_handle.cancel()
            run.tick_handle = None
        for handle in run.handles:
            handle.cancel()
        run.handles.clear()

    def _resolve_timer(self) -> Timer:
        if self._timer is None:
            self._timer = asyncio.get_running_loop()
        return self._timer

    def _emit(self, event: RevealEvent, slot_index: int | None = None) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot(slot_index)
        for listener in list(self._listeners):
            listener(event, snapshot)
