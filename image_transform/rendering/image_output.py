"""
Image loading, export and format handling.

This module wraps Pillow for decoding input images and encoding results.
The output format is inferred from the file extension. Fractal renders can
carry their render metadata: as PNG text chunks, as the TIFF image
description, or in a companion JSON file for JPEG.
"""

import numpy as np
from typing import Dict, Any, Optional, Union, Tuple
from pathlib import Path
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, PngImagePlugin, UnidentifiedImageError

from .. import __version__

logger = logging.getLogger(__name__)

ImageLike = Union[Image.Image, np.ndarray]

# Modes Pillow can encode for formats saved without metadata
PLAIN_FORMAT_MODES = {
    '.bmp': ('1', 'L', 'P', 'RGB', 'RGBA'),
    '.gif': ('1', 'L', 'P', 'RGB', 'RGBA'),
}


@dataclass
class RenderMetadata:
    """Metadata for fractal renders."""

    fractal_type: str
    resolution: Tuple[int, int]  # width, height
    max_iterations: int
    escape_radius: float
    julia_constant: Tuple[float, float]  # real, imag

    backend: str
    render_time_seconds: float

    timestamp: str = ""
    software_version: str = __version__

    fractal_parameters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        """Create metadata from dictionary."""
        data = dict(data)
        data['resolution'] = tuple(data['resolution'])
        data['julia_constant'] = tuple(data['julia_constant'])
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        """Create metadata from JSON string."""
        return cls.from_dict(json.loads(json_str))


def open_image(filepath: Union[str, Path]) -> Image.Image:
    """
    Open and fully decode an image file.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if the file is not a decodable image
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Image file not found: {filepath}")

    try:
        with Image.open(filepath) as img:
            img.load()
            logger.debug(f"Opened {filepath}: {img.format} {img.size[0]}x{img.size[1]} {img.mode}")
            return img.copy()
    except UnidentifiedImageError as e:
        raise ValueError(f"Cannot decode image {filepath}: {e}") from e


def to_pil_image(image: ImageLike) -> Image.Image:
    """Convert a uint8 raster (H, W[, 3|4]) or PIL image to a PIL image."""
    if isinstance(image, Image.Image):
        return image

    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    if not (image.ndim == 2 or (image.ndim == 3 and image.shape[2] in (3, 4))):
        raise ValueError(f"Expected image array (H, W), (H, W, 3) or (H, W, 4), got {image.shape}")

    # Pillow infers L, RGB or RGBA from the uint8 array shape
    return Image.fromarray(np.ascontiguousarray(image))


class ImageExporter:
    """Image export with metadata support."""

    def __init__(self):
        self.supported_formats = {
            '.png': self._save_png,
            '.tiff': self._save_tiff,
            '.tif': self._save_tiff,
            '.jpg': self._save_jpeg,
            '.jpeg': self._save_jpeg,
            '.bmp': self._save_plain,
            '.gif': self._save_plain,
        }

    def save_image(self, image: ImageLike, filepath: Union[str, Path],
                   metadata: Optional[RenderMetadata] = None, quality: int = 95) -> Path:
        """
        Save an image, choosing the format from the file extension.

        Args:
            image: PIL image or uint8 raster
            filepath: Output file path
            metadata: Render metadata to embed
            quality: JPEG quality (1-100)

        Returns:
            The path written
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.supported_formats:
            supported = ', '.join(self.supported_formats.keys())
            raise ValueError(f"Unsupported format '{suffix}'. Supported: {supported}")

        pil_image = to_pil_image(image)

        if filepath.parent and not filepath.parent.exists():
            filepath.parent.mkdir(parents=True, exist_ok=True)

        save_method = self.supported_formats[suffix]
        save_method(pil_image, filepath, metadata, quality)

        logger.info(f"Saved image: {filepath} ({pil_image.size[0]}x{pil_image.size[1]})")
        return filepath

    def _save_png(self, pil_image: Image.Image, filepath: Path,
                  metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as PNG with metadata."""
        pnginfo = PngImagePlugin.PngInfo()

        if metadata:
            pnginfo.add_text("Title", f"Fractal: {metadata.fractal_type}")
            pnginfo.add_text("Software", f"image-transform v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text("FractalMetadata", metadata.to_json())

        pil_image.save(filepath, "PNG", pnginfo=pnginfo)

    def _save_tiff(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as TIFF, storing metadata in the image description tag."""
        save_kwargs = {'format': 'TIFF', 'compression': 'tiff_lzw'}
        if metadata:
            save_kwargs['description'] = metadata.to_json()

        pil_image.save(filepath, **save_kwargs)

    def _save_jpeg(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as JPEG with a companion JSON metadata file."""
        if pil_image.mode not in ('RGB', 'L'):
            pil_image = pil_image.convert('RGB')

        pil_image.save(filepath, "JPEG", quality=quality, optimize=True)

        if metadata:
            json_path = filepath.with_suffix('.json')
            json_path.write_text(metadata.to_json())
            logger.info(f"Saved metadata: {json_path}")

    def _save_plain(self, pil_image: Image.Image, filepath: Path,
                    metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save in a format without metadata support."""
        if metadata:
            logger.debug(f"{filepath.suffix} does not carry metadata; skipping it")

        writable = PLAIN_FORMAT_MODES[filepath.suffix.lower()]
        if pil_image.mode not in writable:
            target = 'RGBA' if 'A' in pil_image.getbands() else 'RGB'
            logger.debug(f"Converting {pil_image.mode} to {target} for {filepath.suffix}")
            pil_image = pil_image.convert(target)

        pil_image.save(filepath)

    def extract_metadata_from_image(self, filepath: Union[str, Path]) -> Optional[RenderMetadata]:
        """
        Extract fractal metadata from a saved image.

        Args:
            filepath: Path to image file

        Returns:
            Extracted metadata or None
        """
        filepath = Path(filepath)

        with Image.open(filepath) as img:
            # PNG text chunks
            text = getattr(img, 'text', None) or {}
            if 'FractalMetadata' in text:
                return self._parse_metadata(text['FractalMetadata'], filepath)

            # TIFF ImageDescription
            if hasattr(img, 'tag_v2') and 270 in img.tag_v2:
                return self._parse_metadata(img.tag_v2[270], filepath)

        if filepath.suffix.lower() in ['.jpg', '.jpeg']:
            json_path = filepath.with_suffix('.json')
            if json_path.exists():
                return self._parse_metadata(json_path.read_text(), json_path)

        return None

    def _parse_metadata(self, raw: str, source: Path) -> Optional[RenderMetadata]:
        """Parse stored metadata; text written by other tools yields None."""
        try:
            return RenderMetadata.from_json(raw)
        except (json.JSONDecodeError, TypeError, KeyError) as e:
            logger.debug(f"No render metadata in {source}: {e}")
            return None
