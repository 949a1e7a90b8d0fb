"""Mirror a reveal run into an editable Telegram message."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from aiogram.types import InlineKeyboardMarkup, Message

from ..domain.items import CatalogItem
from ..domain.reveal import RevealEvent, RevealScheduler, RevealSnapshot
from .api_utils import safe_message_edit_text
from .formatting import format_reveal_message

logger = logging.getLogger(__name__)

# Ticks fire every 80 ms, far above Bot API edit limits; only these are rendered.
_RENDERED_EVENTS = {RevealEvent.LOCKED, RevealEvent.DONE}


class TelegramRevealRenderer:
    """Edit ``message`` as the slots of one reveal run lock in.

    The renderer is bound to a single run id and detaches itself once that run
    is done or superseded by a newer roll in the same chat.
    """

    def __init__(
        self,
        scheduler: RevealScheduler,
        message: Message,
        result: Sequence[CatalogItem],
        *,
        run_id: int,
        final_markup: InlineKeyboardMarkup | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._message = message
        self._result = tuple(result)
        self._run_id = run_id
        self._final_markup = final_markup
        self._tasks: set[asyncio.Task] = set()
        self._edit_lock = asyncio.Lock()
        self._attached = False

    def attach(self) -> None:
        if not self._attached:
            self._scheduler.subscribe(self)
            self._attached = True

    def detach(self) -> None:
        if self._attached:
            self._scheduler.unsubscribe(self)
            self._attached = False

    def __call__(self, event: RevealEvent, snapshot: RevealSnapshot) -> None:
        if snapshot.run_id != self._run_id:
            logger.debug("Renderer for run %s superseded by run %s.", self._run_id, snapshot.run_id)
            self.detach()
            return
        if event not in _RENDERED_EVENTS:
            return
        done = event is RevealEvent.DONE
        text = format_reveal_message(snapshot, self._result)
        markup = self._final_markup if done else None
        task = asyncio.get_running_loop().create_task(self._edit(text, markup))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        if done:
            self.detach()

    async def _edit(self, text: str, markup: InlineKeyboardMarkup | None) -> None:
        # The lock is FIFO, so frames land in the order they were produced.
        async with self._edit_lock:
            await safe_message_edit_text(self._message, text, reply_markup=markup)

    async def drain(self) -> None:
        """Wait for edits already scheduled by this renderer."""
        if self._tasks:
            await asyncio.gather(*self._tasks)
