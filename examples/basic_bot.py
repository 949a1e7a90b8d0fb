"""LoadoutForge example: a stratagem roulette bot with a slot machine reveal."""

from __future__ import annotations

import asyncio
from pathlib import Path

from loadoutforge import LoadoutApp, LoadoutForgeConfig
from loadoutforge.diagnostics import RollSimulator
from loadoutforge.domain import CatalogItem, Direction
from loadoutforge.domain.events import ROLL_COMPLETED
from loadoutforge.loaders import load_catalog_from_json


async def log_roll(payload: dict) -> None:
    print(f"User {payload['user_id']} rolled {', '.join(payload['items']) or 'nothing'}")


def register(app: LoadoutApp) -> None:
    """Register stratagems, warbonds and a roll listener."""
    catalog_path = Path(__file__).with_name("catalog") / "stratagems.json"
    load_catalog_from_json(app, catalog_path)

    # Items can also be registered in code, on top of the JSON catalog.
    app.items.item(
        CatalogItem(
            item_id="hmg_emplacement",
            name="HMG Emplacement",
            category="emplacement",
            code=(Direction.DOWN, Direction.UP, Direction.LEFT, Direction.RIGHT, Direction.RIGHT, Direction.LEFT),
            unlock_level=15,
        )
    )

    app.event_bus.subscribe(ROLL_COMPLETED, log_roll)


def simulate() -> None:
    app = LoadoutApp(LoadoutForgeConfig.from_env())
    register(app)
    result = RollSimulator(app).simulate(rolls=500)
    print(f"Average loadout size: {result.average_size:.2f}, short rolls: {result.short_rolls}")


async def run_bot() -> None:
    from aiogram import Bot, Dispatcher
    from loadoutforge.telegram import build_router

    app = LoadoutApp(LoadoutForgeConfig.from_env())
    await app.init_backend()
    register(app)

    bot = Bot(app.config.bot_token)
    dp = Dispatcher()
    dp.include_router(build_router(app))
    try:
        await dp.start_polling(bot)
    finally:
        await app.close()


if __name__ == "__main__":
    asyncio.run(run_bot())
