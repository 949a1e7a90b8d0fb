"""High-level helpers that simplify bootstrapping LoadoutForge bots.

This module provides a straightforward, batteries-included API oriented towards
developers who do not want to wire the config, storage and router by hand.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from aiogram import Bot, Dispatcher
from rich.console import Console

from . import LoadoutApp, LoadoutForgeConfig
from .diagnostics import RollSimulator, run_checklist
from .domain.items import Direction
from .loaders import load_catalog_from_json, validate_catalog_dict
from .telegram import ChatSchedulers, build_router

console = Console()


@dataclass(slots=True)
class SimpleBotConfig:
    """Minimal settings required to run a LoadoutForge bot."""

    bot_token: str
    catalog_path: Path
    storage: str = "memory"  # "memory" or path to SQLite file
    rng_seed: int | None = None


async def run_simple_bot(config: SimpleBotConfig) -> None:
    """Spin up a ready-to-go aiogram bot with sensible defaults."""

    forge_config = LoadoutForgeConfig.from_env()
    forge_config.bot_token = config.bot_token
    forge_config.rng_seed = config.rng_seed
    if config.storage != "memory":
        db_path = Path(config.storage).expanduser().resolve()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        forge_config.storage.backend = "sqlalchemy"
        forge_config.storage.dsn = f"sqlite+aiosqlite:///{db_path.as_posix()}"

    app = LoadoutApp(forge_config)
    await app.init_backend()
    load_catalog_from_json(app, config.catalog_path)

    bot = Bot(app.config.bot_token)
    dp = Dispatcher()
    schedulers = ChatSchedulers(app)
    dp.include_router(build_router(app, schedulers=schedulers))

    summary = RollSimulator(app).simulate(rolls=200)
    console.print(
        f"[bold green]LoadoutForge ready![/bold green]\n"
        f"Stratagems: {len(app.catalog)}, average loadout: {summary.average_size:.2f} slots",
    )
    for issue in run_checklist(app):
        console.print(f"[yellow]{issue.severity}[/yellow]: {issue.message}")

    try:
        await dp.start_polling(bot)
    finally:
        schedulers.shutdown()
        await app.close()
        await bot.session.close()


def run_simple_bot_sync(config: SimpleBotConfig) -> None:
    """Synchronous wrapper for run_simple_bot."""

    asyncio.run(run_simple_bot(config))


@dataclass(slots=True)
class CatalogBuilder:
    """Imperative builder that produces JSON catalogs."""

    stratagems: list[dict] = field(default_factory=list)
    warbonds: list[dict] = field(default_factory=list)

    def add_stratagem(
        self,
        stratagem_id: str,
        name: str,
        category: str,
        *,
        code: Iterable[Direction | str] = (),
        warbond: str | None = None,
        unlock_level: int | None = None,
    ) -> "CatalogBuilder":
        entry: dict = {
            "id": stratagem_id,
            "name": name,
            "category": category,
            "code": [step.value if isinstance(step, Direction) else step for step in code],
        }
        if warbond is not None:
            entry["warbond"] = warbond
        if unlock_level is not None:
            entry["unlock_level"] = unlock_level
        self.stratagems.append(entry)
        return self

    def add_warbond(self, warbond_id: str, name: str) -> "CatalogBuilder":
        self.warbonds.append({"id": warbond_id, "name": name})
        return self

    def build(self) -> dict:
        catalog = {
            "warbonds": self.warbonds,
            "stratagems": self.stratagems,
        }
        errors = validate_catalog_dict(catalog)
        if errors:
            raise ValueError("Catalog validation failed:\n" + "\n".join(f"- {err}" for err in errors))
        return catalog

    def save(self, path: Path) -> None:
        catalog = self.build()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(catalog, ensure_ascii=False, indent=2), encoding="utf-8")


__all__ = [
    "CatalogBuilder",
    "SimpleBotConfig",
    "run_simple_bot",
    "run_simple_bot_sync",
]
