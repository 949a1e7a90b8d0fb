"""Factory helpers to wire LoadoutForge services into aiogram."""

from __future__ import annotations

import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message

from ..app import LoadoutApp
from ..domain.constraints import CONFIGURED_CATEGORIES
from ..domain.exceptions import LoadoutForgeError, QuotaLimitExceeded
from ..domain.reveal import RevealEvent, RevealListener, RevealScheduler, RevealSnapshot, Timer
from .api_utils import safe_callback_answer, safe_message_answer, safe_message_edit_text
from .formatting import (
    NOTHING_AVAILABLE,
    format_history_message,
    format_settings_message,
    render_help_message,
)
from .keyboards import (
    CALLBACK_PREFIX,
    packs_keyboard,
    pins_keyboard,
    roll_keyboard,
    rules_keyboard,
    welcome_keyboard,
)
from .reveal_renderer import TelegramRevealRenderer

logger = logging.getLogger(__name__)


class ChatSchedulers:
    """One reveal scheduler per chat, so a re-roll supersedes only that chat's reveal.

    A chat's scheduler is dropped once its run is done; the next roll creates a
    fresh one.
    """

    def __init__(self, app: LoadoutApp, *, timer: Timer | None = None) -> None:
        self._app = app
        self._timer = timer
        self._schedulers: dict[int, RevealScheduler] = {}

    def __len__(self) -> int:
        return len(self._schedulers)

    def __contains__(self, chat_id: int) -> bool:
        return chat_id in self._schedulers

    def get(self, chat_id: int) -> RevealScheduler:
        scheduler = self._schedulers.get(chat_id)
        if scheduler is None:
            scheduler = self._app.new_reveal_scheduler(timer=self._timer)
            scheduler.subscribe(self._evict_when_done(chat_id, scheduler))
            self._schedulers[chat_id] = scheduler
        return scheduler

    def shutdown(self) -> None:
        for scheduler in self._schedulers.values():
            scheduler.shutdown()
        self._schedulers.clear()

    def _evict_when_done(self, chat_id: int, scheduler: RevealScheduler) -> RevealListener:
        def listener(event: RevealEvent, snapshot: RevealSnapshot) -> None:
            if event is RevealEvent.DONE and self._schedulers.get(chat_id) is scheduler:
                del self._schedulers[chat_id]
                logger.debug("Released reveal scheduler for chat %s.", chat_id)

        return listener


def build_router(app: LoadoutApp, *, schedulers: ChatSchedulers | None = None) -> Router:
    ensure_catalog_ready(app)

    router = Router()
    profiles = app.profile_service
    loadouts = app.loadout_service
    chats = schedulers or ChatSchedulers(app)

    async def start_roll(message: Message, user_id: int) -> None:
        outcome = await loadouts.roll(user_id)
        if outcome.is_empty:
            await safe_message_answer(message, NOTHING_AVAILABLE, reply_markup=roll_keyboard())
            return
        scheduler = chats.get(message.chat.id)
        placeholder = await safe_message_answer(message, "🎰 Rolling...")
        run_id = scheduler.start_animation(outcome.items, list(app.catalog.iter_items()))
        if placeholder is None:
            logger.debug("Reveal %s in chat %s has no message to render into", run_id, message.chat.id)
            return
        TelegramRevealRenderer(
            scheduler,
            placeholder,
            outcome.items,
            run_id=run_id,
            final_markup=roll_keyboard(),
        ).attach()

    @router.message(Command("start", "help"))
    async def handle_help(message: Message) -> None:
        await safe_message_answer(message, render_help_message(), reply_markup=welcome_keyboard())

    @router.message(Command("roll"))
    async def handle_roll(message: Message) -> None:
        user = message.from_user
        if not user:
            return
        await start_roll(message, user.id)

    @router.callback_query(F.data == f"{CALLBACK_PREFIX}:roll")
    async def handle_roll_callback(callback: CallbackQuery) -> None:
        await safe_callback_answer(callback)
        if callback.message is None:
            return
        await start_roll(callback.message, callback.from_user.id)

    @router.message(Command("settings"))
    async def handle_settings(message: Message) -> None:
        user = message.from_user
        if not user:
            return
        preferences = await profiles.fetch(user.id)
        await safe_message_answer(
            message,
            format_settings_message(preferences, app.catalog),
            reply_markup=welcome_keyboard(),
        )

    @router.callback_query(F.data == f"{CALLBACK_PREFIX}:settings")
    async def handle_settings_callback(callback: CallbackQuery) -> None:
        await safe_callback_answer(callback)
        preferences = await profiles.fetch(callback.from_user.id)
        await safe_message_answer(
            callback.message,
            format_settings_message(preferences, app.catalog),
            reply_markup=welcome_keyboard(),
        )

    @router.message(Command("packs"))
    async def handle_packs(message: Message) -> None:
        user = message.from_user
        if not user:
            return
        preferences = await profiles.fetch(user.id)
        await safe_message_answer(
            message, "🎖 Warbonds:", reply_markup=packs_keyboard(preferences, app.catalog)
        )

    @router.callback_query(F.data == f"{CALLBACK_PREFIX}:packs")
    async def handle_packs_callback(callback: CallbackQuery) -> None:
        await safe_callback_answer(callback)
        preferences = await profiles.fetch(callback.from_user.id)
        await safe_message_answer(
            callback.message, "🎖 Warbonds:", reply_markup=packs_keyboard(preferences, app.catalog)
        )

    @router.callback_query(F.data.startswith(f"{CALLBACK_PREFIX}:packs:"))
    async def handle_packs_bulk(callback: CallbackQuery) -> None:
        enabled = callback.data.rsplit(":", 1)[-1] == "all"
        preferences = await profiles.set_all_packs(callback.from_user.id, enabled)
        await safe_callback_answer(callback)
        await safe_message_edit_text(
            callback.message, "🎖 Warbonds:", reply_markup=packs_keyboard(preferences, app.catalog)
        )

    @router.callback_query(F.data.startswith(f"{CALLBACK_PREFIX}:pack:"))
    async def handle_pack_toggle(callback: CallbackQuery) -> None:
        key = callback.data.split(":", 2)[-1]
        try:
            preferences = await profiles.toggle_pack(callback.from_user.id, key)
        except LoadoutForgeError as exc:
            await safe_callback_answer(callback, str(exc), show_alert=True)
            return
        await safe_callback_answer(callback)
        await safe_message_edit_text(
            callback.message, "🎖 Warbonds:", reply_markup=packs_keyboard(preferences, app.catalog)
        )

    @router.message(Command("pin"))
    async def handle_pin(message: Message, command: CommandObject) -> None:
        user = message.from_user
        if not user:
            return
        try:
            category, count = parse_pin_args(command.args)
        except ValueError as exc:
            await safe_message_answer(message, str(exc))
            return
        try:
            preferences = await profiles.set_quota(user.id, category, count)
        except QuotaLimitExceeded as exc:
            await safe_message_answer(
                message, f"Total exceeds {exc.limit}: unpin another category first."
            )
            return
        except LoadoutForgeError as exc:
            await safe_message_answer(message, str(exc))
            return
        await safe_message_answer(
            message, format_settings_message(preferences, app.catalog), reply_markup=pins_keyboard(preferences)
        )

    @router.callback_query(F.data == f"{CALLBACK_PREFIX}:pins")
    async def handle_pins_callback(callback: CallbackQuery) -> None:
        await safe_callback_answer(callback)
        preferences = await profiles.fetch(callback.from_user.id)
        await safe_message_answer(callback.message, "📌 Pins:", reply_markup=pins_keyboard(preferences))

    @router.callback_query(F.data.startswith(f"{CALLBACK_PREFIX}:pin:"))
    async def handle_pin_callback(callback: CallbackQuery) -> None:
        try:
            category, count = parse_pin_callback(callback.data)
        except ValueError as exc:
            await safe_callback_answer(callback, str(exc), show_alert=True)
            return
        try:
            preferences = await profiles.set_quota(callback.from_user.id, category, count)
        except LoadoutForgeError as exc:
            await safe_callback_answer(callback, str(exc), show_alert=True)
            return
        await safe_callback_answer(callback)
        await safe_message_edit_text(callback.message, "📌 Pins:", reply_markup=pins_keyboard(preferences))

    @router.message(Command("rules"))
    async def handle_rules(message: Message) -> None:
        user = message.from_user
        if not user:
            return
        preferences = await profiles.fetch(user.id)
        await safe_message_answer(message, "📜 Rules:", reply_markup=rules_keyboard(preferences))

    @router.callback_query(F.data == f"{CALLBACK_PREFIX}:rules")
    async def handle_rules_callback(callback: CallbackQuery) -> None:
        await safe_callback_answer(callback)
        preferences = await profiles.fetch(callback.from_user.id)
        await safe_message_answer(callback.message, "📜 Rules:", reply_markup=rules_keyboard(preferences))

    @router.callback_query(F.data.startswith(f"{CALLBACK_PREFIX}:rule:"))
    async def handle_rule_toggle(callback: CallbackQuery) -> None:
        key = callback.data.split(":", 2)[-1]
        try:
            preferences = await profiles.toggle_rule(callback.from_user.id, key)
        except LoadoutForgeError as exc:
            await safe_callback_answer(callback, str(exc), show_alert=True)
            return
        await safe_callback_answer(callback)
        await safe_message_edit_text(callback.message, "📜 Rules:", reply_markup=rules_keyboard(preferences))

    @router.message(Command("level"))
    async def handle_level(message: Message, command: CommandObject) -> None:
        user = message.from_user
        if not user:
            return
        raw = (command.args or "").strip()
        if not raw.isdigit():
            await safe_message_answer(message, "Usage: /level <number>")
            return
        try:
            preferences = await profiles.set_level(user.id, int(raw))
        except LoadoutForgeError as exc:
            await safe_message_answer(message, str(exc))
            return
        await safe_message_answer(message, format_settings_message(preferences, app.catalog))

    @router.message(Command("history"))
    async def handle_history(message: Message) -> None:
        user = message.from_user
        if not user:
            return
        records = await loadouts.recent_rolls(user.id)
        items = {item.item_id: item for item in app.catalog.iter_items()}
        await safe_message_answer(message, format_history_message(records, items))

    @router.message(Command("reset"))
    async def handle_reset(message: Message) -> None:
        user = message.from_user
        if not user:
            return
        preferences = await profiles.reset(user.id)
        await safe_message_answer(message, format_settings_message(preferences, app.catalog))

    return router


def ensure_catalog_ready(app: LoadoutApp) -> None:
    if not len(app.catalog):
        raise RuntimeError(
            "The catalog is empty. Register items with app.items.item(...) or load_catalog_from_json."
        )


def parse_pin_args(args: str | None) -> tuple[str, int | None]:
    """Parse ``"<category> <count|any>"`` from a /pin command."""
    parts = (args or "").split()
    if len(parts) != 2:
        raise ValueError("Usage: /pin <category> <count|any>")
    return _parse_pin(parts[0], parts[1])


def parse_pin_callback(data: str | None) -> tuple[str, int | None]:
    """Parse ``loadout:pin:<category>:<count|any>`` callback data."""
    parts = (data or "").split(":")
    if len(parts) != 4 or parts[:2] != [CALLBACK_PREFIX, "pin"]:
        raise ValueError("Malformed pin button.")
    return _parse_pin(parts[2], parts[3])


def _parse_pin(category: str, raw_count: str) -> tuple[str, int | None]:
    category, raw_count = category.lower(), raw_count.lower()
    if category not in CONFIGURED_CATEGORIES:
        raise ValueError(f"Unknown category '{category}'. Choose from: {', '.join(CONFIGURED_CATEGORIES)}")
    if raw_count == "any":
        return category, None
    if not raw_count.isdigit():
        raise ValueError("Count must be a number or 'any'.")
    return category, int(raw_count)
