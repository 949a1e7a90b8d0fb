"""Plain-text rendering of loadouts, reveals and preferences for chat messages."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from ..domain.constraints import CATEGORY_LABELS, CONFIGURED_CATEGORIES, RULES, Exact
from ..domain.items import BASE_GAME_KEY, MAX_PLAYER_LEVEL, CatalogItem, ItemCatalog
from ..domain.preferences import LoadoutPreferences
from ..domain.reveal import RevealSnapshot
from ..storage.base import RollHistoryRecord

NOTHING_AVAILABLE = "No stratagems available for the selected warbonds."


def format_item_line(item: CatalogItem) -> str:
    label = CATEGORY_LABELS.get(item.category, item.category)
    arrows = item.code_arrows()
    return f"{item.name} [{label}]" + (f"  {arrows}" if arrows else "")


def format_loadout_message(items: Sequence[CatalogItem]) -> str:
    if not items:
        return NOTHING_AVAILABLE
    lines = ["🎖 Your stratagems:"]
    lines.extend(f"{idx}. {format_item_line(item)}" for idx, item in enumerate(items, start=1))
    return "\n".join(lines)


def format_reveal_message(snapshot: RevealSnapshot, result: Sequence[CatalogItem]) -> str:
    """Render one frame of the slot machine."""
    if not result:
        return NOTHING_AVAILABLE
    lines = ["🎰 Rolling..." if snapshot.spinning else "🎖 Your stratagems:"]
    for idx, (locked, just_locked) in enumerate(
        zip(snapshot.slot_locked, snapshot.slot_just_locked), start=1
    ):
        if locked:
            marker = "✨" if just_locked else "🔒"
            lines.append(f"{marker} {idx}. {format_item_line(result[idx - 1])}")
        else:
            shown = snapshot.display_slots[idx - 1]
            lines.append(f"🌀 {idx}. {shown.name if shown else '...'}")
    return "\n".join(lines)


def format_settings_message(preferences: LoadoutPreferences, catalog: ItemCatalog) -> str:
    enabled = preferences.source_packs.enabled
    pack_names = ["Base game"] if BASE_GAME_KEY in enabled else []
    pack_names.extend(pack.name for pack in catalog.iter_packs() if pack.pack_id in enabled)

    lines = ["⚙️ Loadout settings", ""]
    lines.append("🎖 Warbonds: " + (", ".join(pack_names) if pack_names else "none"))

    pins = [
        f"{CATEGORY_LABELS[category]}: {quota.count}"
        for category in CONFIGURED_CATEGORIES
        if isinstance(quota := preferences.quotas.get(category), Exact)
    ]
    lines.append("📌 Pins: " + (", ".join(pins) if pins else "none"))

    active = [rule.label for rule in RULES if rule.key in preferences.rules]
    lines.append("📜 Rules: " + (", ".join(active) if active else "none"))

    level = preferences.player_level
    lines.append(f"⭐ Level: {level}{'+' if level >= MAX_PLAYER_LEVEL else ''}")
    return "\n".join(lines)


def format_history_message(
    records: Iterable[RollHistoryRecord], items: Mapping[str, CatalogItem]
) -> str:
    records = list(records)
    if not records:
        return "No rolls yet. Use /roll to get a loadout."
    lines = ["🗂 Recent rolls:"]
    for record in records:
        names = [items[item_id].name if item_id in items else item_id for item_id in record.item_ids]
        stamp = record.timestamp.strftime("%Y-%m-%d %H:%M")
        lines.append(f"• {stamp}: {', '.join(names) if names else 'nothing'}")
    return "\n".join(lines)


def render_help_message() -> str:
    lines = [
        "Roll a random loadout of four stratagems.",
        "",
        "Commands:",
        "• /roll - roll a loadout",
        "• /settings - show current settings",
        "• /packs - toggle warbonds",
        "• /pin <category> <count|any> - require an exact count",
        "• /rules - toggle exclusivity rules",
        f"• /level <1-{MAX_PLAYER_LEVEL}> - hide stratagems above your level",
        "• /history - recent rolls",
        "• /reset - restore default settings",
        "",
        "Pinnable categories: " + ", ".join(CONFIGURED_CATEGORIES),
    ]
    return "\n".join(lines)
