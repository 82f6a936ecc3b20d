import pytest
import numpy as np

pytest.importorskip("numba")

from image_transform.acceleration.numba_backend import NumbaAccelerator
from image_transform.api import render_fractal
from image_transform.core.fractal_types import FractalParameters


def test_numba_matches_numpy():
    params = FractalParameters(width=80, height=80)
    expected = render_fractal(params, backend='numpy')
    image = NumbaAccelerator().render(params)

    assert image.shape == expected.shape
    assert np.array_equal(image[:, :, 0], expected[:, :, 0])
    assert np.array_equal(image[:, :, 2], expected[:, :, 2])
    mismatched = np.count_nonzero(image[:, :, 1] != expected[:, :, 1])
    assert mismatched / (80 * 80) < 0.01


def test_numba_backend_through_api():
    image = render_fractal(FractalParameters(width=10, height=10), backend='numba')
    assert tuple(image[0, 0]) == (0, 0, 0)
