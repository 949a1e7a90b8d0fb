"""LoadoutForge public API."""

from .app import LoadoutApp
from .config import LoadoutForgeConfig, RevealConfig, StorageConfig
from .registry import CatalogRegistry

__all__ = [
    "CatalogRegistry",
    "LoadoutApp",
    "LoadoutForgeConfig",
    "RevealConfig",
    "StorageConfig",
]
