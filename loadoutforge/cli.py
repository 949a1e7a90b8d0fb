"""Command line helpers for LoadoutForge."""

from __future__ import annotations

import argparse
import asyncio
import importlib
import sys
from dataclasses import replace
from pathlib import Path
from random import Random
from typing import Sequence

from rich.console import Console
from rich.table import Table

from .app import LoadoutApp
from .config import LoadoutForgeConfig
from .diagnostics.checklist import run_checklist as checklist_run
from .diagnostics.simulator import RollSimulator
from .domain.constraints import CATEGORY_LABELS, CONFIGURED_CATEGORIES, DEFAULT_RULES, QuotaConfig
from .domain.items import BASE_GAME_KEY, MAX_PLAYER_LEVEL, MIN_PLAYER_LEVEL, CatalogItem, SourcePackSelection
from .domain.preferences import LoadoutPreferences, default_preferences
from .domain.reveal import RevealEvent
from .loaders import load_catalog_from_json, validate_catalog_file
from .validators import validate_app

console = Console()


def run_roll() -> None:
    parser = argparse.ArgumentParser(description="Roll a LoadoutForge loadout")
    _add_source_arguments(parser)
    _add_preference_arguments(parser)
    parser.add_argument("--seed", type=int, help="Seed for a reproducible roll")
    parser.add_argument("--animate", action="store_true", help="Play the slot machine reveal")
    args = parser.parse_args()

    app = _build_app(args, seed=args.seed)
    preferences = _build_preferences(parser, args, app)
    outcome = app.loadout_service.roll_with(preferences)

    if args.animate and outcome.items:
        asyncio.run(_animate(app, outcome.items))

    if outcome.is_empty:
        console.print("[yellow]No stratagems available for the selected warbonds.[/yellow]")
        return
    table = Table(title=f"Loadout ({len(outcome.items)}/{app.config.slot_count})")
    table.add_column("#", justify="right")
    table.add_column("Stratagem")
    table.add_column("Category")
    table.add_column("Code")
    for idx, item in enumerate(outcome.items, start=1):
        table.add_row(str(idx), item.name, CATEGORY_LABELS.get(item.category, item.category), item.code_arrows())
    console.print(table)
    console.print(f"Eligible pool: {outcome.pool_size} items, empty slots: {outcome.empty_slots}")


def run_simulate() -> None:
    parser = argparse.ArgumentParser(description="LoadoutForge roll simulator")
    _add_source_arguments(parser)
    _add_preference_arguments(parser)
    parser.add_argument("--rolls", type=int, default=1000, help="Number of rolls to simulate")
    parser.add_argument("--seed", type=int, help="Seed for the simulation")
    args = parser.parse_args()

    app = _build_app(args)
    preferences = _build_preferences(parser, args, app)
    simulator = RollSimulator(app, rng=Random(args.seed) if args.seed is not None else None)
    try:
        result = simulator.simulate(preferences, rolls=args.rolls)
    except ValueError as exc:
        parser.error(str(exc))

    console.print(f"Simulated {result.rolls} rolls from a pool of {result.pool_size} items.")
    console.print(
        f"Average size: {result.average_size:.2f}, short rolls: {result.short_rolls}, "
        f"empty rolls: {result.empty_rolls}"
    )
    table = Table(title="Items per category")
    table.add_column("Category")
    table.add_column("Items", justify="right")
    table.add_column("Per roll", justify="right")
    for category, count in result.category_counts.most_common():
        table.add_row(CATEGORY_LABELS.get(category, category), str(count), f"{count / result.rolls:.2f}")
    console.print(table)


def run_checklist() -> None:
    parser = argparse.ArgumentParser(description="LoadoutForge sanity checks")
    _add_source_arguments(parser)
    args = parser.parse_args()

    app = _build_app(args)
    issues = checklist_run(app)
    if not issues:
        console.print("No issues found ✅")
        return
    for issue in issues:
        console.print(f"[{issue.severity.upper()}] {issue.message}", markup=False)
    if any(issue.severity == "error" for issue in issues):
        sys.exit(1)


def run_validate() -> None:
    parser = argparse.ArgumentParser(description="LoadoutForge validator")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--catalog",
        help="Path to catalog JSON file for validation",
    )
    group.add_argument(
        "--module",
        help="Python module with register(app) function to validate",
    )
    args = parser.parse_args()

    if args.catalog:
        errors = validate_catalog_file(Path(args.catalog))
        if errors:
            console.print("Catalog errors:")
            for err in errors:
                console.print(f"- {err}", markup=False)
            sys.exit(1)
        console.print("Catalog is valid ✅")
        return

    app = LoadoutApp(LoadoutForgeConfig.from_env())
    _load_module(args.module, app)
    issues = validate_app(app)
    if issues:
        console.print("Configuration errors:")
        for issue in issues:
            console.print(f"- {issue}", markup=False)
        sys.exit(1)
    console.print("Configuration is valid ✅")


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--catalog", help="Path to catalog JSON file")
    group.add_argument("--module", help="Python module with register(app) function")


def _add_preference_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--level",
        type=int,
        default=MAX_PLAYER_LEVEL,
        help=f"Player level {MIN_PLAYER_LEVEL}..{MAX_PLAYER_LEVEL} ({MAX_PLAYER_LEVEL} unlocks every stratagem)",
    )
    parser.add_argument(
        "--pin",
        action="append",
        default=[],
        metavar="CATEGORY=COUNT",
        help=f"Require an exact count for a category ({', '.join(CONFIGURED_CATEGORIES)})",
    )
    parser.add_argument(
        "--no-rule",
        action="append",
        default=[],
        metavar="RULE",
        help="Disable an exclusivity rule that is active by default",
    )
    parser.add_argument(
        "--packs",
        help="Comma separated warbond ids to enable; use 'base' for the base game",
    )


def _build_app(args: argparse.Namespace, *, seed: int | None = None) -> LoadoutApp:
    config = LoadoutForgeConfig.from_env()
    if seed is not None:
        config = replace(config, rng_seed=seed)
    app = LoadoutApp(config)
    if args.module:
        _load_module(args.module, app)
    elif args.catalog:
        load_catalog_from_json(app, Path(args.catalog))
    else:
        app.load_configured_catalog()
    if not len(app.catalog):
        raise SystemExit("The catalog is empty. Pass --catalog, --module or set LOADOUTFORGE_CATALOG_PATH.")
    return app


def _build_preferences(
    parser: argparse.ArgumentParser, args: argparse.Namespace, app: LoadoutApp
) -> LoadoutPreferences:
    preferences = default_preferences(app.catalog)

    if not MIN_PLAYER_LEVEL <= args.level <= MAX_PLAYER_LEVEL:
        parser.error(f"--level must be between {MIN_PLAYER_LEVEL} and {MAX_PLAYER_LEVEL}")

    counts: dict[str, int] = {}
    for raw in args.pin:
        category, sep, count = raw.partition("=")
        if not sep or category not in CONFIGURED_CATEGORIES or not count.isdigit():
            parser.error(f"Invalid --pin '{raw}'")
        counts[category] = int(count)
    try:
        quotas = QuotaConfig.pinned(**counts) if counts else preferences.quotas
    except ValueError as exc:
        parser.error(str(exc))

    unknown_rules = set(args.no_rule) - DEFAULT_RULES
    if unknown_rules:
        parser.error(f"Unknown rules: {', '.join(sorted(unknown_rules))}")

    source_packs = preferences.source_packs
    if args.packs is not None:
        keys = [key.strip() for key in args.packs.split(",") if key.strip()]
        keys = [BASE_GAME_KEY if key == "base" else key for key in keys]
        unknown = [key for key in keys if key != BASE_GAME_KEY and not app.catalog.has_pack(key)]
        if unknown:
            parser.error(f"Unknown warbonds: {', '.join(unknown)}")
        source_packs = SourcePackSelection.of(keys)

    return replace(
        preferences,
        source_packs=source_packs,
        quotas=quotas,
        rules=DEFAULT_RULES - set(args.no_rule),
        player_level=args.level,
    )


async def _animate(app: LoadoutApp, items: Sequence[CatalogItem]) -> None:
    scheduler = app.new_reveal_scheduler()
    finished = asyncio.Event()

    def listener(event: RevealEvent, snapshot) -> None:
        if event is RevealEvent.LOCKED:
            item = items[snapshot.slot_index]
            console.print(f"🔒 {snapshot.slot_index + 1}. [bold]{item.name}[/bold]")
        elif event is RevealEvent.DONE:
            finished.set()

    scheduler.subscribe(listener)
    console.print("🎰 Rolling...")
    scheduler.start_animation(items, list(app.catalog.iter_items()))
    await finished.wait()


def _load_module(path: str, app: LoadoutApp) -> None:
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    module = importlib.import_module(path)
    if hasattr(module, "register"):
        module.register(app)
    else:
        raise RuntimeError(f"Module {path} has no register(app) function.")
