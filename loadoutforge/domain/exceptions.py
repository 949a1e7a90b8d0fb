"""Exceptions raised by LoadoutForge profile services.

The selection engine itself never raises for data reasons; these errors
guard interactive preference changes only.
"""


class LoadoutForgeError(RuntimeError):
    """Base class for domain exceptions."""


class UnknownSourcePack(LoadoutForgeError):
    """Raised when toggling a source pack the catalog does not know."""


class UnknownCategory(LoadoutForgeError):
    """Raised when pinning a category that cannot be pinned."""


class UnknownRule(LoadoutForgeError):
    """Raised when toggling an exclusivity rule that does not exist."""


class QuotaLimitExceeded(LoadoutForgeError):
    """Raised when a pin would push the pinned total past the loadout size."""

    def __init__(self, requested_total: int, limit: int) -> None:
        super().__init__(f"Pinned total {requested_total} exceeds {limit} slots")
        self.requested_total = requested_total
        self.limit = limit


class InvalidPlayerLevel(LoadoutForgeError):
    """Raised when a player level falls outside the supported range."""
