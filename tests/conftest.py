"""Pytest configuration and shared fixtures."""

import random
import sys
from pathlib import Path

import pytest

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from engilab.progress import MemoryProgressStore  # noqa: E402


@pytest.fixture
def store():
    """Provide an empty in-memory progress store."""
    return MemoryProgressStore()


@pytest.fixture
def rng():
    """Provide a seeded random generator."""
    return random.Random(1234)


@pytest.fixture
def sample_arrays():
    """Arrays covering the awkward cases for the sorting generators."""
    return [
        [],
        [7],
        [2, 1],
        [5, 4, 3, 2, 1],
        [1, 2, 3, 4, 5],
        [3, 3, 1, 3, 2, 2],
        [38, 27, 43, 3, 9, 82, 10],
        [0.5, -1.25, 3.0, 0.5, -7.0],
    ]
