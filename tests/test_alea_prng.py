"""Tests for the seedable Alea PRNG."""

import pytest

from py_mapcolor.core.alea_prng import AleaPRNG


class TestSequence:
    """Determinism and range of the raw stream."""

    def test_same_seed_same_sequence(self):
        a = AleaPRNG("puzzle-seed")
        b = AleaPRNG("puzzle-seed")
        assert [a.random() for _ in range(50)] == [b.random() for _ in range(50)]

    def test_different_seeds_differ(self):
        a = AleaPRNG("seed1")
        b = AleaPRNG("seed2")
        assert [a.random() for _ in range(10)] != [b.random() for _ in range(10)]

    def test_values_in_unit_interval(self):
        prng = AleaPRNG(12345)
        for _ in range(1000):
            value = prng.random()
            assert 0.0 <= value < 1.0

    def test_sequence_seed(self):
        """A list seed is mashed element by element."""
        a = AleaPRNG(["a", "b"])
        b = AleaPRNG(["a", "b"])
        assert a.random() == b.random()

    def test_call_count(self):
        prng = AleaPRNG("count")
        for _ in range(7):
            prng.random()
        prng.uniform(0, 1)
        assert prng.call_count == 8


class TestHelpers:
    """Derived helpers built on random()."""

    def test_randint_inclusive(self):
        prng = AleaPRNG("randint")
        values = {prng.randint(1, 3) for _ in range(300)}
        assert values == {1, 2, 3}

    def test_randint_single_value(self):
        prng = AleaPRNG("single")
        assert all(prng.randint(5, 5) == 5 for _ in range(20))

    def test_randint_empty_range(self):
        with pytest.raises(ValueError):
            AleaPRNG("x").randint(3, 2)

    def test_uniform_bounds(self):
        prng = AleaPRNG("uniform")
        for _ in range(200):
            value = prng.uniform(0.3, 0.7)
            assert 0.3 <= value < 0.7

    def test_chance_extremes(self):
        prng = AleaPRNG("chance")
        assert prng.chance(1.0)
        assert not prng.chance(0.0)
        assert prng.call_count == 0

    def test_choice(self):
        prng = AleaPRNG("choice")
        items = ["red", "green", "blue"]
        assert all(prng.choice(items) in items for _ in range(50))

    def test_choice_empty(self):
        with pytest.raises(IndexError):
            AleaPRNG("x").choice([])
