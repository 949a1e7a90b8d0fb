"""Injectable randomness for selection and reveal churn."""

from __future__ import annotations

from random import Random
from typing import MutableSequence, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def next(self) -> float:
        """Return a float in ``[0, 1)``."""
        ...


class PythonRandomSource:
    """Adapter over :class:`random.Random`."""

    def __init__(self, rng: Random | None = None) -> None:
        self._rng = rng or Random()

    @classmethod
    def seeded(cls, seed: int | None) -> "PythonRandomSource":
        return cls(Random(seed) if seed is not None else Random())

    def next(self) -> float:
        return self._rng.random()


def random_index(source: RandomSource, length: int) -> int:
    # Guard against sources that return exactly 1.0.
    return min(int(source.next() * length), length - 1)


def shuffle(items: Sequence[T], source: RandomSource) -> list[T]:
    """Return a uniformly random permutation of ``items`` (Fisher-Yates)."""
    result: MutableSequence[T] = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = random_index(source, i + 1)
        result[i], result[j] = result[j], result[i]
    return list(result)


def choice(items: Sequence[T], source: RandomSource) -> T:
    if not items:
        raise IndexError("Cannot choose from an empty sequence")
    return items[random_index(source, len(items))]
