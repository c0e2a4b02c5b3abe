"""Pytest fixtures for polysplit tests."""

import pytest
import sys
from pathlib import Path

import numpy as np

# Add repository root to path for imports
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from geometry import Polygon, Ring
from regular_polygon import build_regular_polygon


@pytest.fixture
def unit_square() -> Ring:
    """Axis-aligned square [0, 4] x [0, 4], counter-clockwise."""
    return Ring(((0, 0), (4, 0), (4, 4), (0, 4)))


@pytest.fixture
def diamond() -> Ring:
    """Square with vertices (0,1), (-1,0), (0,-1), (1,0) - area 2."""
    return build_regular_polygon(4, 0, (0, 0), 1)


@pytest.fixture
def hexagon() -> Ring:
    """Regular hexagon of radius 2 centred at (1, -1)."""
    return build_regular_polygon(6, 0, (1, -1), 2)


@pytest.fixture
def square_with_hole() -> Polygon:
    """10 x 10 square with a 6 x 6 hole in the middle (area 64)."""
    outer = [(0, 0), (10, 0), (10, 10), (0, 10)]
    hole = [(2, 2), (2, 8), (8, 8), (8, 2)]
    return Polygon(outer, (hole,))


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random source."""
    return np.random.default_rng(12345)
