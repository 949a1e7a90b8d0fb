"""Configuration models for LoadoutForge."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal, Sequence


StorageBackend = Literal["memory", "sqlalchemy"]

_TRUTHY = {"1", "true", "yes"}


@dataclass(slots=True)
class StorageConfig:
    """Configure where preferences and roll history are persisted."""

    backend: StorageBackend = "memory"
    dsn: str | None = None
    echo_sql: bool = False

    def resolve_dsn(self) -> str | None:
        if self.dsn:
            return self.dsn
        if self.backend == "sqlalchemy":
            return "sqlite+aiosqlite:///./loadoutforge.db"
        return None


@dataclass(slots=True)
class RevealConfig:
    """Timings of the slot-machine reveal, in milliseconds."""

    tick_interval_ms: int = 80
    lock_offsets_ms: Sequence[int] = (1000, 1500, 2000, 2500)
    flash_ms: int = 400
    grace_ms: int = 200


@dataclass(slots=True)
class LoadoutForgeConfig:
    """Top-level configuration container."""

    bot_token: str = ""
    storage: StorageConfig = field(default_factory=StorageConfig)
    reveal: RevealConfig = field(default_factory=RevealConfig)
    catalog_path: str | None = None
    slot_count: int = 4
    rng_seed: int | None = None

    @classmethod
    def from_env(cls) -> "LoadoutForgeConfig":
        """Create config from environment variables prefixed with LOADOUTFORGE_."""
        prefix = "LOADOUTFORGE_"
        storage_backend = os.getenv(f"{prefix}STORAGE_BACKEND", "memory")
        if storage_backend not in ("memory", "sqlalchemy"):
            raise ValueError(f"Unsupported {prefix}STORAGE_BACKEND '{storage_backend}'")
        dsn = os.getenv(f"{prefix}STORAGE_DSN")
        echo_sql = os.getenv(f"{prefix}STORAGE_ECHO_SQL", "false").lower() in _TRUTHY

        reveal = RevealConfig(
            tick_interval_ms=int(os.getenv(f"{prefix}REVEAL_TICK_MS", "80")),
            lock_offsets_ms=_parse_offsets(os.getenv(f"{prefix}REVEAL_LOCK_OFFSETS_MS")),
            flash_ms=int(os.getenv(f"{prefix}REVEAL_FLASH_MS", "400")),
            grace_ms=int(os.getenv(f"{prefix}REVEAL_GRACE_MS", "200")),
        )

        return cls(
            bot_token=os.getenv(f"{prefix}BOT_TOKEN", ""),
            storage=StorageConfig(backend=storage_backend, dsn=dsn, echo_sql=echo_sql),
            reveal=reveal,
            catalog_path=os.getenv(f"{prefix}CATALOG_PATH") or None,
            slot_count=int(os.getenv(f"{prefix}SLOT_COUNT", "4")),
            rng_seed=(
                int(os.getenv(f"{prefix}RNG_SEED")) if os.getenv(f"{prefix}RNG_SEED") else None
            ),
        )


def _parse_offsets(raw: str | None) -> tuple[int, ...]:
    if not raw:
        return RevealConfig().lock_offsets_ms
    try:
        offsets = tuple(int(part.strip()) for part in raw.split(",") if part.strip())
    except ValueError as exc:
        raise ValueError("Invalid integer list for LOADOUTFORGE_REVEAL_LOCK_OFFSETS_MS") from exc
    if not offsets or any(b <= a for a, b in zip(offsets, offsets[1:])):
        raise ValueError("LOADOUTFORGE_REVEAL_LOCK_OFFSETS_MS must be strictly increasing")
    return offsets
