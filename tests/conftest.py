"""
Pytest configuration file for the lazy sequence tests.

This file ensures that the parent directory is in the Python path
so that test files can import lazy, utils, and models modules.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest


class Recorder:
    """Visitor that records (element, index) calls and stops on request"""

    def __init__(self, stop_when=None):
        self.calls = []
        self.stop_when = stop_when

    def __call__(self, element, index):
        self.calls.append((element, index))
        if self.stop_when is not None and self.stop_when(element, index):
            return False
        return None

    @property
    def elements(self):
        return [e for e, _ in self.calls]

    @property
    def indices(self):
        return [i for _, i in self.calls]


@pytest.fixture
def recorder():
    """Factory for recording visitors"""
    return Recorder


@pytest.fixture
def counting_source():
    """A list-like source that counts how many elements were read"""

    class CountingList(list):
        reads = 0

        def __iter__(self):
            for item in super().__iter__():
                type(self).reads += 1
                yield item

    CountingList.reads = 0
    return CountingList
