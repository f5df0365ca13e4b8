"""
Infinite integer sequences built from the lazy core.

Every function returns a fresh sequence, so callers never share a cursor.
"""

import itertools

from lazy import ensure_sequence


def positives():
    """1, 2, 3, ..."""
    return ensure_sequence(itertools.count(1))


def non_negatives():
    """0, 1, 2, ..."""
    return ensure_sequence(itertools.count(0))


def negatives():
    return positives().map(lambda x: -x)


def non_positives():
    return non_negatives().map(lambda x: -x)


def all_integers():
    """0, 1, -1, 2, -2, ... Every integer shows up after finitely many pulls."""
    return ensure_sequence([[0], positives().map(lambda x: [x, -x]).cons()]).cons()
