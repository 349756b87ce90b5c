"""
Sitebuilder kernel test configuration.

Kernel tests are synchronous except the storage tests, which use
function-scoped event loops and MemoryStorage.
"""

import itertools

import pytest


@pytest.fixture
def id_factory():
    """Deterministic ids: n1, n2, n3, ..."""
    counter = itertools.count(1)
    return lambda: f"n{next(counter)}"
