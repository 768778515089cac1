"""Unbiased shuffle and weighted pick primitives."""

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class Randomizer:
    """Randomness source for role assignment.

    Wraps a random.Random so tests and replays can pass a seed and get the
    same deal every time.

    Usage:
        rng = Randomizer(seed=42)
        deck = rng.shuffle(["killer", "healer", "townsperson"])
    """

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        """Initialize the Randomizer.

        Args:
            rng: Random instance to draw from. Takes precedence over seed.
            seed: Seed for a fresh Random instance.
        """
        self._rng = rng if rng is not None else random.Random(seed)

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Return a uniformly shuffled copy of items (Fisher-Yates)."""
        result = list(items)
        self.shuffle_in_place(result)
        return result

    def shuffle_in_place(self, items: list[T]) -> None:
        """Fisher-Yates shuffle, walking down from the last index."""
        for i in range(len(items) - 1, 0, -1):
            j = self._rng.randint(0, i)
            items[i], items[j] = items[j], items[i]

    def pick(self, items: Sequence[T]) -> T:
        """Pick one item uniformly.

        Raises:
            ValueError: If items is empty.
        """
        if not items:
            raise ValueError("Cannot pick from an empty sequence")
        return items[self._rng.randrange(len(items))]

    def sample(self, items: Sequence[T], k: int) -> list[T]:
        """Pick k distinct items (by position), in random order."""
        if k < 0 or k > len(items):
            raise ValueError(f"Sample size {k} out of range for {len(items)} items")
        return self.shuffle(items)[:k]

    def weighted_pick(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """Pick one item with probability proportional to its weight.

        Raises:
            ValueError: If lengths differ, a weight is negative, or the
                total weight is not positive.
        """
        if len(items) != len(weights):
            raise ValueError("items and weights must have the same length")
        if any(w < 0 for w in weights):
            raise ValueError("weights cannot be negative")
        total = sum(weights)
        if total <= 0:
            raise ValueError("total weight must be positive")

        point = self._rng.random() * total
        for item, weight in zip(items, weights):
            if point < weight:
                return item
            point -= weight
        # Float rounding can leave point just past the last bucket
        for item, weight in zip(reversed(items), reversed(weights)):
            if weight > 0:
                return item
        raise ValueError("total weight must be positive")
