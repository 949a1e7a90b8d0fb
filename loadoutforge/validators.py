"""Validation utilities for LoadoutForge applications."""

from __future__ import annotations

from .app import LoadoutApp
from .domain.constraints import LOADOUT_SIZE
from .domain.items import MAX_PLAYER_LEVEL, MIN_PLAYER_LEVEL


def validate_app(app: LoadoutApp) -> list[str]:
    """Return list of validation errors discovered in configured app."""
    errors: list[str] = []
    catalog = app.catalog

    items = list(catalog.iter_items())
    if not items:
        errors.append("No items registered in application.")

    pack_ids = {pack.pack_id for pack in catalog.iter_packs()}
    for item in items:
        if item.source_pack is not None and item.source_pack not in pack_ids:
            errors.append(f"Item '{item.item_id}' references unknown source pack '{item.source_pack}'.")
        if item.unlock_level is not None and not MIN_PLAYER_LEVEL <= item.unlock_level <= MAX_PLAYER_LEVEL:
            errors.append(
                f"Item '{item.item_id}' has unlock level '{item.unlock_level}' outside "
                f"{MIN_PLAYER_LEVEL}..{MAX_PLAYER_LEVEL}."
            )
        if not item.category:
            errors.append(f"Item '{item.item_id}' has an empty category.")

    slot_count = app.config.slot_count
    if not 1 <= slot_count <= LOADOUT_SIZE:
        errors.append(f"Configuration 'slot_count' must be within 1..{LOADOUT_SIZE}, got {slot_count}.")

    reveal = app.config.reveal
    offsets = list(reveal.lock_offsets_ms)
    if reveal.tick_interval_ms <= 0:
        errors.append("Reveal configuration 'tick_interval_ms' must be positive.")
    if reveal.flash_ms <= 0:
        errors.append("Reveal configuration 'flash_ms' must be positive.")
    if reveal.grace_ms < 0:
        errors.append("Reveal configuration 'grace_ms' cannot be negative.")
    if any(offset <= 0 for offset in offsets):
        errors.append("Reveal configuration 'lock_offsets_ms' must be positive.")
    if any(b <= a for a, b in zip(offsets, offsets[1:])):
        errors.append("Reveal configuration 'lock_offsets_ms' must be strictly increasing.")
    if len(offsets) < slot_count:
        errors.append(
            f"Reveal configuration defines {len(offsets)} lock offsets for {slot_count} slots."
        )

    return errors


__all__ = ["validate_app"]
