"""
Numba JIT compilation backend for fractal computation.

This module provides a JIT-compiled version of the per-pixel fractal loop.
It imports Numba directly; callers check
image_transform.acceleration.is_numba_available() before importing it.
"""

import logging
import time

import numpy as np
import numba
from numba import njit

from ..core.fractal_types import FractalParameters

logger = logging.getLogger(__name__)


@njit(cache=True)
def gradient_julia_kernel(width, height, xmin, ymin, x_scale, y_scale,
                          c_real, c_imag, max_iter, escape_radius,
                          gradient_factor, swap_axes):
    """
    JIT-compiled gradient Julia kernel.

    All float arguments must be float32 so the loop stays in single
    precision.

    Returns:
        RGB raster (height, width, 3) of uint8
    """
    image = np.zeros((height, width, 3), dtype=np.uint8)

    for y in range(height):
        yf = np.float32(y)
        blue = np.uint8(np.int64(gradient_factor * yf) % 256)

        for x in range(width):
            xf = np.float32(x)
            red = np.uint8(np.int64(gradient_factor * xf) % 256)

            if swap_axes:
                zr = yf * x_scale + xmin
                zi = xf * y_scale + ymin
            else:
                zr = xf * x_scale + xmin
                zi = yf * y_scale + ymin

            count = 0
            while count < max_iter and np.float32(np.hypot(zr, zi)) <= escape_radius:
                # z = z*z + c, component-wise
                new_zr = zr * zr - zi * zi + c_real
                zi = zr * zi + zi * zr + c_imag
                zr = new_zr
                count += 1

            image[y, x, 0] = red
            image[y, x, 1] = np.uint8(count % 256)
            image[y, x, 2] = blue

    return image


class NumbaAccelerator:
    """Numba-based fractal computation."""

    def __init__(self):
        logger.debug(f"Numba accelerator initialized (numba {numba.__version__})")

    def render(self, parameters: FractalParameters) -> np.ndarray:
        """Render the fractal with the JIT-compiled kernel."""
        parameters.validate()
        start_time = time.time()

        xmin, xmax, ymin, ymax = (np.float32(b) for b in parameters.bounds)
        x_scale = (xmax - xmin) / np.float32(parameters.width)
        y_scale = (ymax - ymin) / np.float32(parameters.height)

        image = gradient_julia_kernel(
            parameters.width, parameters.height,
            xmin, ymin, x_scale, y_scale,
            np.float32(parameters.c_real), np.float32(parameters.c_imag),
            parameters.max_iter, np.float32(parameters.escape_radius),
            np.float32(parameters.gradient_factor), parameters.swap_axes,
        )

        logger.info(f"Numba render complete: {time.time() - start_time:.2f}s")
        return image


_numba_accelerator = None


def get_numba_accelerator() -> NumbaAccelerator:
    """Get the global Numba accelerator instance."""
    global _numba_accelerator
    if _numba_accelerator is None:
        _numba_accelerator = NumbaAccelerator()
    return _numba_accelerator
