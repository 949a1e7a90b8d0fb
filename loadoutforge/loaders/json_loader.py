"""Load stratagems and warbonds from JSON definitions.

Expected shape::

    {
      "warbonds": [{"id": "helldivers_mobilize", "name": "Helldivers Mobilize"}],
      "stratagems": [
        {"id": "orbital_laser", "name": "Orbital Laser", "code": ["right", "down", "up"],
         "category": "orbital", "warbond": null, "unlock_level": 15}
      ]
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Sequence, TYPE_CHECKING

from ..domain.items import (
    BASE_GAME_KEY,
    MAX_PLAYER_LEVEL,
    MIN_PLAYER_LEVEL,
    CatalogItem,
    Direction,
    ItemCatalog,
    SourcePack,
)

if TYPE_CHECKING:
    from ..app import LoadoutApp

logger = logging.getLogger(__name__)

_DIRECTIONS = {direction.value for direction in Direction}


@dataclass(slots=True)
class CatalogDefinition:
    items: Sequence[CatalogItem]
    packs: Sequence[SourcePack]


def load_catalog_from_json(app: "LoadoutApp", path: str | Path) -> CatalogDefinition:
    """Load stratagems/warbonds from a JSON file and register them on the app."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    definition = parse_catalog_dict(data)
    catalog = app.items.catalog
    conflicts = find_conflicts(catalog, definition)
    if conflicts:
        raise ValueError(_format_errors("Catalog conflicts with registered entries", conflicts))
    for pack in definition.packs:
        catalog.register_pack(pack)
    for item in definition.items:
        catalog.register_item(item)
    logger.info(
        "Loaded %s items and %s source packs from %s.",
        len(definition.items),
        len(definition.packs),
        path,
    )
    return definition


def find_conflicts(catalog: ItemCatalog, definition: CatalogDefinition) -> list[str]:
    """Ids in ``definition`` that are already registered on ``catalog``."""
    errors = [
        f"Warbond id '{pack.pack_id}' is already registered."
        for pack in definition.packs
        if catalog.has_pack(pack.pack_id)
    ]
    errors.extend(
        f"Stratagem id '{item.item_id}' is already registered."
        for item in definition.items
        if catalog.has_item(item.item_id)
    )
    return errors


def parse_catalog_dict(data: dict[str, Any]) -> CatalogDefinition:
    """Parse a JSON dict (already decoded) into domain objects."""
    errors = validate_catalog_dict(data)
    if errors:
        raise ValueError(_format_errors("Catalog validation failed", errors))
    packs = tuple(parse_pack(entry) for entry in data.get("warbonds", []))
    items = tuple(parse_item(entry) for entry in data.get("stratagems", []))
    return CatalogDefinition(items=items, packs=packs)


def parse_pack(entry: dict[str, Any]) -> SourcePack:
    return SourcePack(pack_id=entry["id"], name=entry.get("name", entry["id"]))


def parse_item(entry: dict[str, Any]) -> CatalogItem:
    unlock_level = entry.get("unlock_level")
    return CatalogItem(
        item_id=entry["id"],
        name=entry["name"],
        category=entry["category"],
        code=tuple(Direction(step) for step in entry.get("code", ())),
        source_pack=entry.get("warbond"),
        unlock_level=int(unlock_level) if unlock_level is not None else None,
    )


def validate_catalog_file(path: str | Path) -> list[str]:
    """Validate catalog JSON file and return a list of errors."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        return [f"Catalog is not valid JSON: {exc}"]
    return validate_catalog_dict(data)


def validate_catalog_dict(data: Any) -> list[str]:
    if not isinstance(data, dict):
        return ["Catalog must be a JSON object."]

    errors: list[str] = []

    pack_ids: set[str] = set()
    packs_raw = data.get("warbonds", [])
    if not isinstance(packs_raw, list):
        errors.append("Catalog 'warbonds' must be an array.")
    else:
        for idx, entry in enumerate(packs_raw, start=1):
            if not isinstance(entry, dict):
                errors.append(f"Warbond #{idx} must be an object.")
                continue
            pack_id = entry.get("id")
            if not isinstance(pack_id, str) or not pack_id.strip():
                errors.append(f"Warbond #{idx} must define non-empty 'id'.")
                continue
            if pack_id == BASE_GAME_KEY:
                errors.append(f"Warbond id '{BASE_GAME_KEY}' is reserved.")
            if pack_id in pack_ids:
                errors.append(f"Warbond id '{pack_id}' defined multiple times.")
            pack_ids.add(pack_id)
            name = entry.get("name")
            if name is not None and (not isinstance(name, str) or not name.strip()):
                errors.append(f"Warbond '{pack_id}' has invalid 'name'.")

    items_raw = data.get("stratagems")
    if not isinstance(items_raw, list) or not items_raw:
        errors.append("Catalog must contain non-empty 'stratagems' array.")
        return errors

    item_ids: set[str] = set()
    for idx, entry in enumerate(items_raw, start=1):
        if not isinstance(entry, dict):
            errors.append(f"Stratagem #{idx} must be an object.")
            continue
        item_id = entry.get("id")
        if not isinstance(item_id, str) or not item_id.strip():
            errors.append(f"Stratagem #{idx} must define non-empty 'id'.")
            continue
        if item_id in item_ids:
            errors.append(f"Stratagem id '{item_id}' defined multiple times.")
        item_ids.add(item_id)

        for field_name in ("name", "category"):
            value = entry.get(field_name)
            if not isinstance(value, str) or not value.strip():
                errors.append(f"Stratagem '{item_id}' must define non-empty '{field_name}'.")

        code = entry.get("code", [])
        if not isinstance(code, list):
            errors.append(f"Stratagem '{item_id}' 'code' must be an array.")
        else:
            for step in code:
                if not isinstance(step, str) or step not in _DIRECTIONS:
                    errors.append(f"Stratagem '{item_id}' has invalid code direction '{step}'.")

        warbond = entry.get("warbond")
        if warbond is not None:
            if not isinstance(warbond, str) or not warbond.strip():
                errors.append(f"Stratagem '{item_id}' 'warbond' must be null or a non-empty string.")
            elif warbond not in pack_ids:
                errors.append(f"Stratagem '{item_id}' references unknown warbond '{warbond}'.")

        unlock_level = entry.get("unlock_level")
        if unlock_level is not None and (
            isinstance(unlock_level, bool)
            or not isinstance(unlock_level, int)
            or not MIN_PLAYER_LEVEL <= unlock_level <= MAX_PLAYER_LEVEL
        ):
            errors.append(
                f"Stratagem '{item_id}' has invalid 'unlock_level' value '{unlock_level}' "
                f"(expected {MIN_PLAYER_LEVEL}..{MAX_PLAYER_LEVEL})."
            )

    return errors


def _format_errors(prefix: str, errors: Iterable[str]) -> str:
    formatted = "\n".join(f"- {err}" for err in errors)
    return f"{prefix}:\n{formatted}"
