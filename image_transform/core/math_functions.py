"""
Core mathematical functions for escape-time iteration.

This module provides the complex-plane sampling and the escape-time
iteration used by the fractal renderer. All arithmetic is carried out in
single precision (float32 / complex64) so that rendered rasters are
reproducible bit for bit across backends and tile layouts.
"""

import numpy as np
from typing import Tuple, Optional
import logging

logger = logging.getLogger(__name__)


class ComplexPlane:
    """Represents a complex plane region with coordinate mapping utilities."""

    def __init__(self, xmin: float, xmax: float, ymin: float, ymax: float,
                 width: int, height: int, swap_axes: bool = True):
        """
        Initialize complex plane bounds and resolution.

        Args:
            xmin, xmax: Real axis bounds
            ymin, ymax: Imaginary axis bounds
            width, height: Image resolution in pixels
            swap_axes: Derive the real part from the pixel row and the
                imaginary part from the pixel column
        """
        if xmin >= xmax or ymin >= ymax:
            raise ValueError("Invalid bounds: min values must be less than max values")
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive")

        self.xmin = np.float32(xmin)
        self.xmax = np.float32(xmax)
        self.ymin = np.float32(ymin)
        self.ymax = np.float32(ymax)
        self.width = width
        self.height = height
        self.swap_axes = swap_axes

        # Scaling factors, computed in float32 like the per-pixel math
        self.x_scale = (self.xmax - self.xmin) / np.float32(width)
        self.y_scale = (self.ymax - self.ymin) / np.float32(height)

    def create_coordinate_arrays(self, x_start: int = 0, x_end: Optional[int] = None,
                                 y_start: int = 0, y_end: Optional[int] = None
                                 ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Create pixel coordinate arrays for a rectangular region.

        Returns:
            Tuple of (xs, ys) float32 arrays shaped (1, w) and (h, 1)
        """
        x_end = self.width if x_end is None else x_end
        y_end = self.height if y_end is None else y_end

        xs = np.arange(x_start, x_end, dtype=np.float32)[np.newaxis, :]
        ys = np.arange(y_start, y_end, dtype=np.float32)[:, np.newaxis]
        return xs, ys

    def create_complex_array(self, x_start: int = 0, x_end: Optional[int] = None,
                             y_start: int = 0, y_end: Optional[int] = None) -> np.ndarray:
        """
        Create a complex64 sample array for a rectangular pixel region.

        The array is indexed [row, column], i.e. [y - y_start, x - x_start].
        """
        xs, ys = self.create_coordinate_arrays(x_start, x_end, y_start, y_end)

        if self.swap_axes:
            real = ys * self.x_scale + self.xmin
            imag = xs * self.y_scale + self.ymin
        else:
            real = xs * self.x_scale + self.xmin
            imag = ys * self.y_scale + self.ymin

        shape = (ys.shape[0], xs.shape[1])
        z = np.empty(shape, dtype=np.complex64)
        z.real = np.broadcast_to(real, shape)
        z.imag = np.broadcast_to(imag, shape)
        return z

    def pixel_to_complex(self, px: int, py: int) -> complex:
        """Convert pixel coordinates to the sampled complex number."""
        return complex(self.create_complex_array(px, px + 1, py, py + 1)[0, 0])


class IterationResult:
    """Container for escape-time iteration results."""

    def __init__(self, iterations: np.ndarray, escaped: np.ndarray,
                 final_values: Optional[np.ndarray] = None):
        """
        Initialize iteration result.

        Args:
            iterations: Array of iteration counts
            escaped: Boolean array indicating which points left the escape radius
            final_values: Final complex values
        """
        self.iterations = iterations
        self.escaped = escaped
        self.final_values = final_values
        self.shape = iterations.shape


class FractalIterator:
    """Escape-time iteration of z -> z*z + c."""

    def __init__(self, max_iter: int = 255, escape_radius: float = 2.0):
        """
        Initialize fractal iterator.

        Args:
            max_iter: Iteration cap
            escape_radius: Magnitude above which a point stops iterating
        """
        if max_iter <= 0:
            raise ValueError("max_iter must be positive")
        if escape_radius <= 0:
            raise ValueError("escape_radius must be positive")

        self.max_iter = max_iter
        self.escape_radius = np.float32(escape_radius)

    def julia_iteration(self, z: np.ndarray, c: complex) -> IterationResult:
        """
        Compute Julia set iterations.

        A point keeps iterating while its count is below max_iter and
        |z| <= escape_radius; the count is the number of updates applied.

        Args:
            z: Initial complex values array
            c: Julia set constant

        Returns:
            IterationResult with iteration counts and escape information
        """
        # Component-wise float32 arithmetic; every operation is rounded
        # separately, so results do not depend on array size or layout
        zr = np.ascontiguousarray(z.real, dtype=np.float32)
        zi = np.ascontiguousarray(z.imag, dtype=np.float32)
        cr = np.float32(c.real)
        ci = np.float32(c.imag)

        iterations = np.zeros(z.shape, dtype=np.int32)
        active = np.ones(z.shape, dtype=bool)

        for _ in range(self.max_iter):
            # Once a point fails the magnitude test it never resumes
            active &= np.hypot(zr, zi) <= self.escape_radius

            if not np.any(active):
                break

            ar = zr[active]
            ai = zi[active]
            zr[active] = ar * ar - ai * ai + cr
            zi[active] = ar * ai + ai * ar + ci
            iterations[active] += 1

        escaped = np.hypot(zr, zi) > self.escape_radius

        final_values = np.empty(z.shape, dtype=np.complex64)
        final_values.real = zr
        final_values.imag = zi

        return IterationResult(iterations, escaped, final_values)
