import pytest
import numpy as np
from PIL import Image

from image_transform.core.fractal_types import FractalParameters


@pytest.fixture
def small_params():
    """A reduced raster that keeps every other constant at its default."""
    return FractalParameters(width=96, height=72)


@pytest.fixture
def rgb_image():
    """4x3 RGB image with distinct pixel values."""
    pixels = np.arange(4 * 3 * 3, dtype=np.uint8).reshape(3, 4, 3) * 7
    return Image.fromarray(pixels)


@pytest.fixture
def image_file(tmp_path, rgb_image):
    path = tmp_path / "input.png"
    rgb_image.save(path)
    return path
