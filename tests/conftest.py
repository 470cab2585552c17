import numpy as np
import pytest


RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
YELLOW = (255, 255, 0)


def solid_quadrants(size=4):
    """Four flat quadrants: red, green on top, blue, yellow below."""
    half = size // 2
    raster = np.zeros((size, size, 3), dtype=np.uint8)
    raster[:half, :half] = RED
    raster[:half, half:] = GREEN
    raster[half:, :half] = BLUE
    raster[half:, half:] = YELLOW
    return raster


@pytest.fixture
def quadrant_raster():
    return solid_quadrants()


@pytest.fixture
def uniform_raster():
    return np.full((6, 9, 3), (40, 120, 200), dtype=np.uint8)


@pytest.fixture
def noisy_raster():
    rng = np.random.default_rng(0)
    return rng.integers(0, 256, size=(16, 16, 3), dtype=np.uint8)


@pytest.fixture
def odd_raster():
    rng = np.random.default_rng(1)
    return rng.integers(0, 256, size=(5, 7, 3), dtype=np.uint8)
