"""Testing utilities for LoadoutForge."""

from .clock import ManualHandle, ManualTimer
from .factory import ItemFactory, PackFactory
from .fixtures import app_fixture, manual_timer, memory_app
from .sequences import SequenceRandomSource
from .test_client import TestClient

__all__ = [
    "ItemFactory",
    "ManualHandle",
    "ManualTimer",
    "PackFactory",
    "SequenceRandomSource",
    "TestClient",
    "app_fixture",
    "manual_timer",
    "memory_app",
]
