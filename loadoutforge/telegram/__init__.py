"""Telegram integration helpers."""

from .aiogram_router import ChatSchedulers, build_router
from .formatting import format_loadout_message, format_reveal_message, format_settings_message
from .keyboards import packs_keyboard, pins_keyboard, roll_keyboard, rules_keyboard
from .reveal_renderer import TelegramRevealRenderer

__all__ = [
    "build_router",
    "ChatSchedulers",
    "TelegramRevealRenderer",
    "format_loadout_message",
    "format_reveal_message",
    "format_settings_message",
    "packs_keyboard",
    "pins_keyboard",
    "roll_keyboard",
    "rules_keyboard",
]
