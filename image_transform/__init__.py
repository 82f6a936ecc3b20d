"""
Command-line image transformations and fractal rendering.

This library applies single named transformations to image files (blur,
brighten, crop, rotate, invert, grayscale, solid-color generation) and
renders an escape-time Julia fractal over a coordinate gradient.

Example usage:
    >>> from image_transform import FractalRenderer, FractalParameters
    >>> renderer = FractalRenderer(parameters=FractalParameters(width=200, height=200))
    >>> image = renderer.render("fractal.png")
"""

__version__ = "1.0.0"
__author__ = "Image Transform Team"

from image_transform.core.fractal_types import FractalParameters, GradientJulia
from image_transform.core.math_functions import ComplexPlane, FractalIterator
from image_transform.rendering.coloring import ColorRGB
from image_transform.rendering.image_output import ImageExporter, RenderMetadata, open_image
from image_transform.io.config import ConfigManager

# Main API classes
from image_transform.api import FractalRenderer, RenderConfig, render_fractal, fractal_pixel

__all__ = [
    "FractalRenderer",
    "RenderConfig",
    "render_fractal",
    "fractal_pixel",
    "FractalParameters",
    "GradientJulia",
    "ComplexPlane",
    "FractalIterator",
    "ColorRGB",
    "ImageExporter",
    "RenderMetadata",
    "open_image",
    "ConfigManager",
]
