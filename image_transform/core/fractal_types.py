"""
Fractal type definitions and parameter management.

This module defines the renderable fractal as a configurable class. The
parameters object carries every constant the per-pixel computation depends
on, so renders at other sizes (for tests or previews) use the same code path
as the default 800x800 image.
"""

import numpy as np
from typing import Dict, Any, Tuple
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
import logging

from .math_functions import FractalIterator, IterationResult, ComplexPlane
from ..rendering.coloring import GradientEscapeColoring

logger = logging.getLogger(__name__)


@dataclass
class FractalParameters:
    """Parameters for the gradient Julia fractal with validation."""

    width: int = 800
    height: int = 800
    c_real: float = -0.4
    c_imag: float = 0.6
    max_iter: int = 255
    escape_radius: float = 2.0
    bounds: Tuple[float, float, float, float] = (-1.5, 1.5, -1.5, 1.5)  # xmin, xmax, ymin, ymax
    gradient_factor: float = 0.3
    # The original image samples the real axis from the pixel row
    swap_axes: bool = True

    def validate(self) -> None:
        """Validate parameter values."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Width and height must be positive")

        if self.max_iter <= 0:
            raise ValueError("max_iter must be positive")

        if self.escape_radius <= 0:
            raise ValueError("escape_radius must be positive")

        if len(self.bounds) != 4:
            raise ValueError("bounds must be (xmin, xmax, ymin, ymax)")

        xmin, xmax, ymin, ymax = self.bounds
        if xmin >= xmax or ymin >= ymax:
            raise ValueError("Invalid bounds: min values must be less than max")

        if self.gradient_factor < 0:
            raise ValueError("gradient_factor must be non-negative")

    @property
    def c(self) -> complex:
        """Get the Julia constant as a complex number."""
        return complex(self.c_real, self.c_imag)

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data['bounds'] = list(self.bounds)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FractalParameters':
        """Create parameters from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown fractal parameters: {', '.join(sorted(unknown))}")

        kwargs = {k: v for k, v in data.items() if k in known}
        if 'bounds' in kwargs:
            kwargs['bounds'] = tuple(kwargs['bounds'])
        return cls(**kwargs)


class FractalType(ABC):
    """Abstract base class for fractal types."""

    def __init__(self, name: str, parameters: FractalParameters):
        """
        Initialize fractal type.

        Args:
            name: Human-readable name for the fractal
            parameters: Fractal-specific parameters
        """
        self.name = name
        self.parameters = parameters
        self.parameters.validate()

    @abstractmethod
    def compute(self, x_start: int, x_end: int, y_start: int, y_end: int) -> IterationResult:
        """Compute iterations for a rectangular pixel region."""
        pass

    @abstractmethod
    def render_tile(self, x_start: int, x_end: int, y_start: int, y_end: int) -> np.ndarray:
        """Render a rectangular pixel region to an RGB uint8 block."""
        pass

    def render(self) -> np.ndarray:
        """Render the full raster."""
        return self.render_tile(0, self.parameters.width, 0, self.parameters.height)

    def get_description(self) -> str:
        """Get a description of this fractal type."""
        return f"{self.name} fractal"


class GradientJulia(FractalType):
    """
    Julia set z -> z*z + c drawn over a red/blue coordinate gradient.

    Each pixel's green channel is the escape-time iteration count of its
    sample point; red and blue are trunc(factor * x) and trunc(factor * y).
    """

    def __init__(self, parameters: FractalParameters = None):
        if parameters is None:
            parameters = FractalParameters()
        super().__init__("Gradient Julia", parameters)

        p = self.parameters
        self.plane = ComplexPlane(*p.bounds, p.width, p.height, swap_axes=p.swap_axes)
        self.iterator = FractalIterator(p.max_iter, p.escape_radius)
        self.coloring = GradientEscapeColoring(p.gradient_factor)

    def _check_region(self, x_start, x_end, y_start, y_end):
        p = self.parameters
        if not (0 <= x_start < x_end <= p.width and 0 <= y_start < y_end <= p.height):
            raise ValueError(
                f"Region x[{x_start}:{x_end}] y[{y_start}:{y_end}] "
                f"outside {p.width}x{p.height} raster"
            )

    def compute(self, x_start: int, x_end: int, y_start: int, y_end: int) -> IterationResult:
        self._check_region(x_start, x_end, y_start, y_end)
        z = self.plane.create_complex_array(x_start, x_end, y_start, y_end)
        return self.iterator.julia_iteration(z, self.parameters.c)

    def render_tile(self, x_start: int, x_end: int, y_start: int, y_end: int) -> np.ndarray:
        result = self.compute(x_start, x_end, y_start, y_end)
        xs, ys = self.plane.create_coordinate_arrays(x_start, x_end, y_start, y_end)
        return self.coloring.apply(result, xs, ys)

    def get_description(self) -> str:
        return (f"Julia set: z_{{n+1}} = z_n^2 + c, where c = {self.parameters.c}; "
                f"green = escape time, red/blue = coordinate gradient")
