"""Keyboard helpers for LoadoutForge bots."""

from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from ..domain.constraints import CATEGORY_LABELS, CONFIGURED_CATEGORIES, LOADOUT_SIZE, RULES, Exact
from ..domain.items import BASE_GAME_KEY, ItemCatalog
from ..domain.preferences import LoadoutPreferences

CALLBACK_PREFIX = "loadout"


def _check(enabled: bool) -> str:
    return "✅" if enabled else "⬜"


def roll_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="🎰 Roll again", callback_data=f"{CALLBACK_PREFIX}:roll")],
            [InlineKeyboardButton(text="⚙️ Settings", callback_data=f"{CALLBACK_PREFIX}:settings")],
        ]
    )


def welcome_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="🎰 Roll loadout", callback_data=f"{CALLBACK_PREFIX}:roll")],
            [InlineKeyboardButton(text="🎖 Warbonds", callback_data=f"{CALLBACK_PREFIX}:packs")],
            [InlineKeyboardButton(text="📌 Pins", callback_data=f"{CALLBACK_PREFIX}:pins")],
            [InlineKeyboardButton(text="📜 Rules", callback_data=f"{CALLBACK_PREFIX}:rules")],
        ]
    )


def packs_keyboard(preferences: LoadoutPreferences, catalog: ItemCatalog) -> InlineKeyboardMarkup:
    enabled = preferences.source_packs.enabled
    rows = [
        [
            InlineKeyboardButton(
                text=f"{_check(BASE_GAME_KEY in enabled)} Base game",
                callback_data=f"{CALLBACK_PREFIX}:pack:{BASE_GAME_KEY}",
            )
        ]
    ]
    for pack in catalog.iter_packs():
        rows.append(
            [
                InlineKeyboardButton(
                    text=f"{_check(pack.pack_id in enabled)} {pack.name}",
                    callback_data=f"{CALLBACK_PREFIX}:pack:{pack.pack_id}",
                )
            ]
        )
    rows.append(
        [
            InlineKeyboardButton(text="Select all", callback_data=f"{CALLBACK_PREFIX}:packs:all"),
            InlineKeyboardButton(text="Select none", callback_data=f"{CALLBACK_PREFIX}:packs:none"),
        ]
    )
    return InlineKeyboardMarkup(inline_keyboard=rows)


def pins_keyboard(preferences: LoadoutPreferences) -> InlineKeyboardMarkup:
    """One row per category: "any" plus every count that keeps the total within the loadout."""
    total = preferences.quotas.pinned_total()
    rows = []
    for category in CONFIGURED_CATEGORIES:
        quota = preferences.quotas.get(category)
        current = quota.count if isinstance(quota, Exact) else None
        others = total - (current or 0)
        row = [
            InlineKeyboardButton(
                text=f"{'•' if current is None else ''}{CATEGORY_LABELS[category]}: any",
                callback_data=f"{CALLBACK_PREFIX}:pin:{category}:any",
            )
        ]
        for count in range(1, LOADOUT_SIZE + 1):
            if others + count > LOADOUT_SIZE:
                break
            row.append(
                InlineKeyboardButton(
                    text=f"{'•' if current == count else ''}{count}",
                    callback_data=f"{CALLBACK_PREFIX}:pin:{category}:{count}",
                )
            )
        rows.append(row)
    return InlineKeyboardMarkup(inline_keyboard=rows)


def rules_keyboard(preferences: LoadoutPreferences) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(
                    text=f"{_check(rule.key in preferences.rules)} {rule.label}",
                    callback_data=f"{CALLBACK_PREFIX}:rule:{rule.key}",
                )
            ]
            for rule in RULES
        ]
    )
