"""Seedable random source shared by the board, criteria and game flow."""

from collections.abc import Mapping, Sequence
from typing import TypeVar

import numpy as np

K = TypeVar("K")
T = TypeVar("T")


class RandomSource:
    """Thin wrapper around :class:`numpy.random.Generator`.

    A given seed always produces the same sequence of draws, which is what
    makes category assignment and individual simulations reproducible.

    Args:
        seed: Seed for the underlying generator.
    """

    __slots__ = ("_seed", "_rng")

    def __init__(self, seed: int = 0) -> None:
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    @property
    def seed(self) -> int:
        """Seed of the current sequence."""
        return self._seed

    def reseed(self, seed: int) -> None:
        """Restart the sequence from ``seed``."""
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    def random_float(self, low: float = 0.0, high: float = 1.0) -> float:
        """Draw a uniform float in ``[low, high)``."""
        return float(self._rng.random() * (high - low) + low)

    def random_int(self, low: int, high: int) -> int:
        """Draw a uniform integer in ``[low, high)``."""
        if high <= low:
            raise ValueError(f"empty integer range [{low}, {high})")
        return int(self._rng.integers(low, high))

    def weighted_choice(self, weights: Mapping[K, float]) -> K:
        """Pick a key from ``weights`` with probability proportional to its value.

        Keys are scanned in mapping order against a single uniform draw
        scaled by the total weight.

        Raises:
            ValueError: If ``weights`` is empty or its total is not positive.
        """
        total = float(sum(weights.values()))
        if not weights or total <= 0:
            raise ValueError("weights must contain at least one positive value")

        roll = self.random_float() * total
        cumulative = 0.0
        for key, weight in weights.items():
            cumulative += weight
            if roll < cumulative:
                return key

        # Floating point accumulation can leave roll == total
        return next(key for key, weight in reversed(list(weights.items())) if weight > 0)

    def choice(self, items: Sequence[T]) -> T:
        """Pick a uniformly random item from a non-empty sequence."""
        if len(items) == 0:
            raise ValueError("cannot choose from an empty sequence")
        return items[self.random_int(0, len(items))]

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Return a shuffled copy of ``items``."""
        order = self._rng.permutation(len(items))
        return [items[i] for i in order]
