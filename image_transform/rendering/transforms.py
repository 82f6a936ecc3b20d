"""
Single-image transformations.

Each function takes a PIL image and returns a new one; none of them
modify their input.
"""

import numpy as np
from typing import Tuple
import logging

from PIL import Image, ImageFilter, ImageOps

from .coloring import ColorRGB

logger = logging.getLogger(__name__)

# Clockwise rotation in degrees -> Pillow transpose (Pillow rotates counter-clockwise)
ROTATIONS = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def _split_alpha(img: Image.Image) -> Tuple[Image.Image, Image.Image]:
    """Return (color image, alpha band or None), normalising exotic modes."""
    if img.mode in ('RGBA', 'LA'):
        return img.convert(img.mode[:-1]), img.getchannel('A')
    if img.mode == 'P' and 'transparency' in img.info:
        img = img.convert('RGBA')
        return img.convert('RGB'), img.getchannel('A')
    if img.mode not in ('RGB', 'L'):
        return img.convert('RGB'), None
    return img, None


def _restore_alpha(img: Image.Image, alpha: Image.Image) -> Image.Image:
    if alpha is not None:
        img.putalpha(alpha)
    return img


def blur(img: Image.Image, sigma: float) -> Image.Image:
    """Gaussian blur with standard deviation sigma."""
    if sigma <= 0:
        raise ValueError("Blur amount must be positive")
    logger.debug(f"Blurring {img.size[0]}x{img.size[1]} image, sigma={sigma}")
    return img.filter(ImageFilter.GaussianBlur(radius=sigma))


def brighten(img: Image.Image, amount: int) -> Image.Image:
    """
    Add amount to every color channel, saturating at 0 and 255.

    Negative amounts darken. Alpha is left untouched.
    """
    color, alpha = _split_alpha(img)
    pixels = np.asarray(color, dtype=np.int16)
    brightened = np.clip(pixels + int(amount), 0, 255).astype(np.uint8)
    return _restore_alpha(Image.fromarray(brightened), alpha)


def crop(img: Image.Image, x: int, y: int, width: int, height: int) -> Image.Image:
    """
    Crop a width x height region whose top-left corner is (x, y).

    The region is clamped to the image bounds.
    """
    if min(x, y, width, height) < 0:
        raise ValueError("Crop coordinates and size must be non-negative")

    img_width, img_height = img.size
    x = min(x, img_width)
    y = min(y, img_height)
    width = min(width, img_width - x)
    height = min(height, img_height - y)

    if width == 0 or height == 0:
        raise ValueError(
            f"Crop region is empty for a {img_width}x{img_height} image"
        )

    return img.crop((x, y, x + width, y + height))


def rotate(img: Image.Image, degrees: int = 90) -> Image.Image:
    """Rotate clockwise by 90, 180 or 270 degrees."""
    if degrees not in ROTATIONS:
        raise ValueError(f"Rotation must be one of {sorted(ROTATIONS)}, got {degrees}")
    return img.transpose(ROTATIONS[degrees])


def invert(img: Image.Image) -> Image.Image:
    """Invert the color channels, keeping alpha."""
    color, alpha = _split_alpha(img)
    return _restore_alpha(ImageOps.invert(color), alpha)


def grayscale(img: Image.Image) -> Image.Image:
    """Convert to luminance, keeping alpha."""
    if img.mode in ('RGBA', 'LA', 'PA') or 'transparency' in img.info:
        return img.convert('LA')
    return img.convert('L')


def generate(width: int, height: int, color: ColorRGB) -> Image.Image:
    """Create a solid-color RGB image."""
    if width <= 0 or height <= 0:
        raise ValueError("Width and height must be positive")
    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[:, :] = color.to_tuple()
    return Image.fromarray(pixels)
