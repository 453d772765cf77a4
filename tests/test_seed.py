"""Tests for the splittable seed."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from gencheck.errors import PreconditionError
from gencheck.seed import SEED_BITS, Seed, new_seed, range_, split

from .strategies import PROPERTY_SETTINGS, seeds


class TestSeedOf:
    def test_small_values_are_kept(self):
        assert Seed.of(42).state == 42

    def test_negative_values_fold_into_range(self):
        assert Seed.of(-1).state == 2**SEED_BITS - 1

    def test_large_values_fold_into_range(self):
        assert Seed.of(2**SEED_BITS + 5).state == 5

    def test_seeds_compare_by_state(self):
        assert Seed.of(7) == Seed(7)
        assert hash(Seed.of(7)) == hash(Seed(7))

    def test_direct_construction_rejects_negative_state(self):
        with pytest.raises(PreconditionError, match="must fit in 64 bits"):
            Seed(-1)

    def test_direct_construction_rejects_oversized_state(self):
        with pytest.raises(PreconditionError):
            Seed(2**SEED_BITS)


class TestSplit:
    @PROPERTY_SETTINGS
    @given(seed=seeds)
    def test_split_is_deterministic(self, seed):
        assert split(seed) == split(seed)

    @PROPERTY_SETTINGS
    @given(seed=seeds)
    def test_halves_differ(self, seed):
        left, right = split(seed)
        assert left != right

    def test_neighbouring_seeds_split_apart(self):
        lefts = {split(Seed.of(i))[0] for i in range(500)}
        assert len(lefts) == 500


class TestRange:
    @PROPERTY_SETTINGS
    @given(seed=seeds, lo=st.integers(-1000, 1000), width=st.integers(0, 1000))
    def test_value_within_bounds(self, seed, lo, width):
        value, _ = range_(lo, lo + width, seed)
        assert lo <= value <= lo + width

    @PROPERTY_SETTINGS
    @given(seed=seeds)
    def test_degenerate_range(self, seed):
        value, _ = range_(3, 3, seed)
        assert value == 3

    @PROPERTY_SETTINGS
    @given(seed=seeds)
    def test_deterministic_with_successor(self, seed):
        first = range_(0, 10**9, seed)
        second = range_(0, 10**9, seed)
        assert first == second
        assert first[1] != seed

    def test_covers_whole_range(self):
        values = {range_(0, 9, Seed.of(i))[0] for i in range(400)}
        assert values == set(range(10))


class TestNewSeed:
    def test_fresh_seeds_fit_in_state(self):
        seed = new_seed()
        assert 0 <= seed.state < 2**SEED_BITS

    def test_fresh_seeds_vary(self):
        assert len({new_seed() for _ in range(20)}) > 1
