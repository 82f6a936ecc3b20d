"""
Channel mapping for rendered fractals.

Converts escape-time iteration counts and pixel positions into 8-bit RGB
rasters. Background channels are a linear gradient of the pixel coordinates;
the foreground channel carries the iteration count.
"""

import numpy as np
from typing import Tuple
from dataclasses import dataclass
from abc import ABC, abstractmethod
import logging

from ..core.math_functions import IterationResult

logger = logging.getLogger(__name__)


@dataclass
class ColorRGB:
    """8-bit RGB color representation."""
    r: int
    g: int
    b: int

    def __post_init__(self):
        """Validate RGB values."""
        for component in [self.r, self.g, self.b]:
            if not 0 <= component <= 255:
                raise ValueError("RGB components must be between 0 and 255")

    def to_tuple(self) -> Tuple[int, int, int]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    @classmethod
    def from_string(cls, text: str) -> 'ColorRGB':
        """Parse a color written as "r,g,b"."""
        try:
            parts = [int(x.strip()) for x in text.split(',')]
        except ValueError:
            raise ValueError(f"Invalid color '{text}'. Use 'r,g,b' with integers 0-255")
        if len(parts) != 3:
            raise ValueError(f"Invalid color '{text}'. Use 'r,g,b' with integers 0-255")
        return cls(*parts)


def truncate_to_uint8(values: np.ndarray) -> np.ndarray:
    """
    Cast non-negative values to uint8 by truncation, wrapping modulo 256.

    Float inputs are truncated toward zero before wrapping, never rounded.
    """
    return (np.trunc(values).astype(np.int64) % 256).astype(np.uint8)


def gradient_channel(coords: np.ndarray, factor: float) -> np.ndarray:
    """Compute trunc(factor * coord) in float32 as a uint8 channel."""
    scaled = np.float32(factor) * coords.astype(np.float32)
    return truncate_to_uint8(scaled)


class ColoringAlgorithm(ABC):
    """Abstract base class for coloring algorithms."""

    @abstractmethod
    def apply(self, result: IterationResult, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """
        Apply coloring algorithm to iteration results.

        Args:
            result: Iteration result, indexed [row, column]
            xs: Pixel column coordinates, shape (1, w)
            ys: Pixel row coordinates, shape (h, 1)

        Returns:
            RGB image array (h, w, 3) of uint8
        """
        pass


class GradientEscapeColoring(ColoringAlgorithm):
    """Red/blue coordinate gradient with the iteration count as green."""

    def __init__(self, gradient_factor: float = 0.3):
        self.gradient_factor = gradient_factor

    def apply(self, result: IterationResult, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        height, width = result.shape
        rgb_image = np.empty((height, width, 3), dtype=np.uint8)

        rgb_image[:, :, 0] = gradient_channel(xs, self.gradient_factor)
        rgb_image[:, :, 1] = truncate_to_uint8(result.iterations)
        rgb_image[:, :, 2] = gradient_channel(ys, self.gradient_factor)

        return rgb_image
