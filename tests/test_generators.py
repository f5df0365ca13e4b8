import pytest
from generators import positives, non_negatives, negatives, non_positives, all_integers


class TestIntegerGenerators:
    """Test the infinite integer sequences"""

    def test_positives(self):
        """Test that positives starts at 1 and ascends"""
        assert positives().next() == 1
        assert positives().grab(10) == [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]

    def test_non_negatives(self):
        assert non_negatives().next() == 0
        assert non_negatives().grab(10) == [0, 1, 2, 3, 4, 5, 6, 7, 8, 9]

    def test_negatives(self):
        """Test that negatives starts at -1 and descends"""
        assert negatives().next() == -1
        assert negatives().grab(10) == [-1, -2, -3, -4, -5, -6, -7, -8, -9, -10]

    def test_non_positives(self):
        assert non_positives().next() == 0
        assert non_positives().grab(10) == [0, -1, -2, -3, -4, -5, -6, -7, -8, -9]

    def test_all_integers(self):
        """Test that all_integers starts at 0 and alternates signs"""
        assert all_integers().next() == 0
        assert all_integers().grab(10) == [0, 1, -1, 2, -2, 3, -3, 4, -4, 5]

    def test_fresh_sequence_per_call(self):
        """Test that generators never share a cursor"""
        first = positives()
        first.grab(5)
        assert positives().next() == 1
        assert first.next() == 6

    def test_all_integers_reaches_any_integer(self):
        seen = set(all_integers().grab(201))
        assert set(range(-100, 101)) <= seen
