"""Tests for the seedable random source."""

from collections import Counter

import pytest

from reelbook.sim.rng import RandomSource


class TestRandomSource:
    """Tests for RandomSource."""

    def test_same_seed_same_sequence(self) -> None:
        """Test that identical seeds give identical draws."""
        first, second = RandomSource(42), RandomSource(42)
        assert [first.random_int(0, 100) for _ in range(20)] == [
            second.random_int(0, 100) for _ in range(20)
        ]

    def test_reseed_restarts_sequence(self) -> None:
        """Test that reseeding replays the draws."""
        rng = RandomSource(3)
        draws = [rng.random_float() for _ in range(5)]
        rng.reseed(3)
        assert [rng.random_float() for _ in range(5)] == draws
        assert rng.seed == 3

    def test_random_float_range(self) -> None:
        """Test floats stay inside the requested range."""
        rng = RandomSource(1)
        values = [rng.random_float(2.0, 3.0) for _ in range(200)]
        assert all(2.0 <= v < 3.0 for v in values)

    def test_random_int_is_half_open(self) -> None:
        """Test that the upper bound is never drawn."""
        rng = RandomSource(5)
        assert {rng.random_int(0, 3) for _ in range(200)} == {0, 1, 2}

    def test_empty_int_range_raises(self) -> None:
        """Test an empty integer range."""
        with pytest.raises(ValueError, match="empty integer range"):
            RandomSource().random_int(3, 3)

    def test_weighted_choice_follows_weights(self) -> None:
        """Test that heavier keys are drawn more often."""
        rng = RandomSource(8)
        counts = Counter(rng.weighted_choice({"a": 1, "b": 9}) for _ in range(2000))
        assert counts["b"] > counts["a"] * 5

    def test_weighted_choice_skips_zero_weights(self) -> None:
        """Test that zero-weight keys are never chosen."""
        rng = RandomSource(2)
        assert {rng.weighted_choice({"a": 0, "b": 1}) for _ in range(100)} == {"b"}

    def test_weighted_choice_requires_positive_total(self) -> None:
        """Test empty and all-zero weights."""
        with pytest.raises(ValueError, match="positive"):
            RandomSource().weighted_choice({})
        with pytest.raises(ValueError, match="positive"):
            RandomSource().weighted_choice({"a": 0})

    def test_shuffle_returns_permutation(self) -> None:
        """Test that shuffling keeps every item and leaves the input alone."""
        items = list(range(20))
        shuffled = RandomSource(4).shuffle(items)
        assert sorted(shuffled) == items
        assert items == list(range(20))

    def test_choice_on_empty_sequence(self) -> None:
        """Test choosing from nothing."""
        with pytest.raises(ValueError, match="empty"):
            RandomSource().choice([])
