"""Pytest fixtures for LoadoutForge."""

from __future__ import annotations

import pytest

from ..app import LoadoutApp
from ..config import LoadoutForgeConfig
from .clock import ManualTimer


@pytest.fixture()
def memory_app() -> LoadoutApp:
    config = LoadoutForgeConfig(bot_token="test", rng_seed=1234)
    return LoadoutApp(config)


@pytest.fixture()
def manual_timer() -> ManualTimer:
    return ManualTimer()


def app_fixture(bot_token: str = "test", **kwargs) -> LoadoutApp:
    """Helper for ad-hoc tests where pytest is not available."""
    config = LoadoutForgeConfig(bot_token=bot_token, **kwargs)
    return LoadoutApp(config)
