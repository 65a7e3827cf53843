import numpy as np
import pytest


def grey_image(values, alpha=255):
    """Build an RGBA image whose r, g, b all equal the given 2D grid of values."""
    values = np.asarray(values, dtype=np.uint8)
    img = np.empty(values.shape + (4,), dtype=np.uint8)
    img[:, :, :3] = values[:, :, None]
    img[:, :, 3] = alpha
    return img


@pytest.fixture
def make_grey():
    return grey_image


@pytest.fixture
def random_image():
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(13, 17, 4), dtype=np.uint8)
