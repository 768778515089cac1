"""Tests for the Randomizer primitives."""

import itertools
import random
from collections import Counter

import pytest

from lanmafia.engine import Randomizer


class TestShuffle:
    """Fisher-Yates shuffle."""

    def test_returns_permutation_copy(self) -> None:
        items = [1, 2, 3, 4, 5]
        result = Randomizer(seed=1).shuffle(items)
        assert sorted(result) == items
        assert items == [1, 2, 3, 4, 5]

    def test_seed_is_reproducible(self) -> None:
        items = list(range(10))
        assert Randomizer(seed=7).shuffle(items) == Randomizer(seed=7).shuffle(items)

    def test_accepts_random_instance(self) -> None:
        items = list(range(10))
        a = Randomizer(rng=random.Random(3)).shuffle(items)
        b = Randomizer(rng=random.Random(3)).shuffle(items)
        assert a == b

    def test_empty_and_single(self) -> None:
        rng = Randomizer(seed=0)
        assert rng.shuffle([]) == []
        assert rng.shuffle(["x"]) == ["x"]

    def test_uniform_over_permutations(self) -> None:
        """Each of the 24 permutations of 4 items shows up about equally often."""
        rng = Randomizer(seed=12345)
        trials = 48_000
        counts = Counter(tuple(rng.shuffle("abcd")) for _ in range(trials))

        permutations = list(itertools.permutations("abcd"))
        assert set(counts) == set(permutations)

        expected = trials / len(permutations)
        chi_square = sum((counts[p] - expected) ** 2 / expected for p in permutations)
        # 23 degrees of freedom; 49.7 is the 0.001 critical value
        assert chi_square < 49.7

    def test_every_position_uniform(self) -> None:
        rng = Randomizer(seed=99)
        trials = 20_000
        first = Counter(rng.shuffle(range(5))[0] for _ in range(trials))
        for value in range(5):
            assert abs(first[value] / trials - 0.2) < 0.02


class TestPick:
    """pick, sample and weighted_pick."""

    def test_pick_from_empty_raises(self) -> None:
        with pytest.raises(ValueError):
            Randomizer().pick([])

    def test_sample_distinct(self) -> None:
        result = Randomizer(seed=5).sample(list(range(10)), 4)
        assert len(result) == 4
        assert len(set(result)) == 4

    def test_sample_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            Randomizer().sample([1, 2], 3)

    def test_weighted_pick_respects_weights(self) -> None:
        rng = Randomizer(seed=8)
        trials = 20_000
        counts = Counter(rng.weighted_pick(["a", "b"], [3, 1]) for _ in range(trials))
        assert abs(counts["a"] / trials - 0.75) < 0.02

    def test_weighted_pick_zero_weight_never_chosen(self) -> None:
        rng = Randomizer(seed=8)
        picks = {rng.weighted_pick(["a", "b", "c"], [0, 1, 0]) for _ in range(200)}
        assert picks == {"b"}

    @pytest.mark.parametrize(
        "items, weights",
        [
            (["a", "b"], [1]),
            (["a"], [0]),
            (["a", "b"], [1, -1]),
        ],
    )
    def test_weighted_pick_invalid(self, items, weights) -> None:
        with pytest.raises(ValueError):
            Randomizer().weighted_pick(items, weights)
