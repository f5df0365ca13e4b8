from random import Random

import pytest
from lazy import ensure_sequence, DEFAULT_POOL_SIZE
from generators import positives


class TestCycle:
    """Test indefinite replay"""

    def test_repeats_indefinitely(self):
        """Test that cycle replays the source forever"""
        assert ensure_sequence(range(1, 4)).cycle().grab(9) == [1, 2, 3, 1, 2, 3, 1, 2, 3]

    def test_empty_source(self):
        """Test that cycling nothing yields nothing instead of looping forever"""
        assert ensure_sequence([]).cycle().grab(3) == []

    def test_first_pass_is_lazy(self, recording):
        """Test that the first pass streams instead of materializing up front"""
        source = recording([1, 2, 3])
        seq = ensure_sequence(source).cycle()
        assert seq.next() == 1
        assert source.log == [1]

    def test_infinite_source_passes_through(self):
        assert positives().cycle().grab(5) == [1, 2, 3, 4, 5]


class TestRepeat:
    """Test finite replay"""

    def test_repeats_exactly_k_times(self):
        assert ensure_sequence(range(1, 4)).repeat(3).to_list() == [1, 2, 3, 1, 2, 3, 1, 2, 3]

    def test_once(self):
        assert ensure_sequence([1, 2, 3]).repeat(1).to_list() == [1, 2, 3]

    def test_less_than_one_yields_nothing(self):
        """Test that k below 1 yields nothing"""
        assert ensure_sequence(range(1, 4)).repeat(0).to_list() == []
        assert ensure_sequence(range(1, 4)).repeat(-2).to_list() == []
        assert ensure_sequence(range(1, 4)).repeat(0.9).to_list() == []

    def test_fractional_k_is_floored(self):
        """Test that repeat(2.2) behaves like repeat(2)"""
        assert ensure_sequence(range(1, 4)).repeat(2.2).to_list() == [1, 2, 3, 1, 2, 3]

    def test_zero_does_not_touch_source(self):
        source = ensure_sequence([1, 2, 3])
        source.repeat(0).to_list()
        assert source.next() == 1

    def test_empty_source(self):
        assert ensure_sequence([]).repeat(5).to_list() == []


class TestRandomly:
    """Test the bounded reservoir shuffle"""

    def test_yields_each_element_once(self, numbers):
        """Test that randomly is a permutation of its source"""
        result = ensure_sequence(numbers).randomly().to_list()
        for x in numbers:
            assert result.count(x) == 1
        assert len(result) == len(numbers)

    def test_changes_order(self):
        """Test that a seeded shuffle of 1..100 is not the identity"""
        result = ensure_sequence(range(1, 101)).randomly(rng=Random(12345)).to_list()
        assert sorted(result) == list(range(1, 101))
        assert result != list(range(1, 101))

    def test_seeded_rng_is_deterministic(self):
        """Test that the same seed reproduces the same order"""
        first = ensure_sequence(range(50)).randomly(rng=Random(3)).to_list()
        second = ensure_sequence(range(50)).randomly(rng=Random(3)).to_list()
        assert first == second

    def test_source_smaller_than_pool(self):
        result = ensure_sequence([1, 2, 3]).randomly(rng=Random(0)).to_list()
        assert sorted(result) == [1, 2, 3]

    def test_empty_source(self):
        assert ensure_sequence([]).randomly().is_empty()

    def test_lookahead_is_bounded_by_pool(self):
        """Test that randomly only reads a pool's worth ahead of its output"""
        result = positives().randomly(rng=Random(1)).grab(20)
        assert len(set(result)) == 20
        assert max(result) <= 20 + DEFAULT_POOL_SIZE

    def test_pool_size_is_configurable(self):
        result = positives().randomly(2, rng=Random(5)).grab(10)
        assert max(result) <= 12

    def test_pool_size_is_clamped(self):
        """Test that a non-positive pool size still works"""
        assert ensure_sequence([1, 2, 3]).randomly(0).to_list() == [1, 2, 3]

    def test_default_pool_size(self):
        assert DEFAULT_POOL_SIZE == 8
