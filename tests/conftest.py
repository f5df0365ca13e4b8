"""
Pytest configuration file for the lazy sequence tests.

This file ensures that the project root is in the Python path
so that test files can import lazy, generators, utils, models and app.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest

from utils import clear_performance_metrics


class RecordingIterator:
    """Iterator that remembers every element handed out."""

    def __init__(self, iterable):
        self.iterator = iter(iterable)
        self.log = []

    def __iter__(self):
        return self

    def __next__(self):
        value = next(self.iterator)
        self.log.append(value)
        return value


@pytest.fixture
def recording():
    """Factory for RecordingIterator instances"""
    return RecordingIterator


@pytest.fixture
def numbers():
    """The list 1..10 used by most combinator tests"""
    return list(range(1, 11))


@pytest.fixture(autouse=True)
def reset_metrics():
    """Each test starts with an empty performance ledger"""
    clear_performance_metrics()
    yield
    clear_performance_metrics()
