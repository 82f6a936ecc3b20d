"""
Main API classes for fractal generation.

This module provides the high-level interface for fractal rendering,
combining the fractal definition, the acceleration backends and image
export into easy-to-use classes.
"""

import numpy as np
from typing import Optional, Union, Dict, Any, Tuple
from dataclasses import dataclass
from pathlib import Path
import logging
import time

from .core.fractal_types import FractalParameters, GradientJulia
from .rendering.image_output import ImageExporter, RenderMetadata
from .acceleration import is_numba_available
from .acceleration.multiprocessing import MultiprocessingAccelerator, get_optimal_process_count

logger = logging.getLogger(__name__)

BACKENDS = ('auto', 'numpy', 'multiprocessing', 'numba')


@dataclass
class RenderConfig:
    """Configuration for fractal rendering."""

    # Performance
    backend: str = 'auto'
    num_processes: Optional[int] = None
    tile_size: int = 256
    # 'auto' switches to multiprocessing at this many pixels
    parallel_threshold: int = 250_000

    # Output
    jpeg_quality: int = 95
    save_metadata: bool = True

    def validate(self):
        """Validate configuration parameters."""
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{self.backend}'. Available: {', '.join(BACKENDS)}")

        if self.num_processes is not None and self.num_processes < 1:
            raise ValueError("num_processes must be >= 1")

        if self.tile_size < 1:
            raise ValueError("tile_size must be >= 1")

        if self.parallel_threshold < 0:
            raise ValueError("parallel_threshold must be non-negative")

        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError("jpeg_quality must be between 1 and 100")


class FractalRenderer:
    """Main fractal rendering engine."""

    def __init__(self, config: Optional[RenderConfig] = None,
                 parameters: Optional[FractalParameters] = None):
        """
        Initialize fractal renderer.

        Args:
            config: Rendering configuration (uses defaults if None)
            parameters: Fractal parameters (uses the 800x800 defaults if None)
        """
        self.config = config or RenderConfig()
        self.config.validate()

        self.fractal = GradientJulia(parameters or FractalParameters())
        self.image_exporter = ImageExporter()

        logger.debug(f"FractalRenderer initialized: {self.parameters.width}x{self.parameters.height}, "
                     f"backend={self.config.backend}")

    @property
    def parameters(self) -> FractalParameters:
        return self.fractal.parameters

    def choose_backend(self) -> str:
        """Resolve the configured backend to a concrete one."""
        backend = self.config.backend

        if backend == 'numba' and not is_numba_available():
            raise RuntimeError("Numba backend requested but numba is not installed")

        if backend != 'auto':
            return backend

        total_pixels = self.parameters.width * self.parameters.height
        processes = self.config.num_processes or get_optimal_process_count()

        if total_pixels >= self.config.parallel_threshold and processes > 1:
            return 'multiprocessing'
        return 'numpy'

    def render(self, output_path: Optional[Union[str, Path]] = None) -> np.ndarray:
        """
        Render the fractal raster.

        Args:
            output_path: Optional output file path

        Returns:
            RGB raster (height, width, 3) of uint8
        """
        start_time = time.time()

        backend = self.choose_backend()
        logger.info(f"Starting render: {self.fractal.name} "
                    f"{self.parameters.width}x{self.parameters.height} using {backend}")
        logger.debug(self.fractal.get_description())

        image = self._render_with(backend)

        render_time = time.time() - start_time
        logger.info(f"Render complete: {render_time:.2f}s")

        if output_path:
            self._save_image(image, output_path, render_time, backend)

        return image

    def _render_with(self, backend: str) -> np.ndarray:
        if backend == 'numpy':
            return self.fractal.render()

        if backend == 'multiprocessing':
            num_proc = self.config.num_processes or get_optimal_process_count()
            accelerator = MultiprocessingAccelerator(num_proc, self.config.tile_size)
            return accelerator.render(self.parameters)

        if backend == 'numba':
            from .acceleration.numba_backend import get_numba_accelerator
            return get_numba_accelerator().render(self.parameters)

        raise ValueError(f"Unknown backend '{backend}'")

    def _save_image(self, image: np.ndarray, output_path: Union[str, Path],
                    render_time: float, backend: str) -> Path:
        """Save rendered image with metadata."""
        metadata = None
        if self.config.save_metadata:
            p = self.parameters
            metadata = RenderMetadata(
                fractal_type=self.fractal.name,
                resolution=(p.width, p.height),
                max_iterations=p.max_iter,
                escape_radius=p.escape_radius,
                julia_constant=(p.c_real, p.c_imag),
                backend=backend,
                render_time_seconds=render_time,
                fractal_parameters=p.to_dict(),
            )

        return self.image_exporter.save_image(image, output_path, metadata, self.config.jpeg_quality)

    def benchmark_performance(self) -> Dict[str, Any]:
        """
        Benchmark every available backend with the current parameters.

        Returns:
            Performance benchmark results
        """
        logger.info("Starting performance benchmark")

        total_pixels = self.parameters.width * self.parameters.height
        backends = ['numpy', 'multiprocessing']
        if is_numba_available():
            backends.append('numba')

        results = {
            'config': {
                'resolution': f"{self.parameters.width}x{self.parameters.height}",
                'max_iterations': self.parameters.max_iter,
                'num_processes': self.config.num_processes or get_optimal_process_count(),
                'tile_size': self.config.tile_size,
            },
            'benchmarks': {},
        }

        baseline = None
        for backend in backends:
            start_time = time.time()
            image = self._render_with(backend)
            elapsed = max(time.time() - start_time, 1e-9)

            entry = {'time': elapsed, 'pixels_per_second': total_pixels / elapsed}
            if baseline is None:
                baseline = (elapsed, image)
            else:
                entry['speedup'] = baseline[0] / elapsed
                entry['matches_numpy'] = bool(np.array_equal(image, baseline[1]))
            results['benchmarks'][backend] = entry

        return results


def render_fractal(parameters: Optional[FractalParameters] = None, backend: str = 'auto',
                   workers: Optional[int] = None, tile_size: int = 256) -> np.ndarray:
    """
    Render the gradient Julia fractal.

    Args:
        parameters: Fractal parameters (defaults to the 800x800 image)
        backend: One of 'auto', 'numpy', 'multiprocessing', 'numba'
        workers: Worker processes for the multiprocessing backend
        tile_size: Tile edge length for the multiprocessing backend

    Returns:
        RGB raster (height, width, 3) of uint8
    """
    config = RenderConfig(backend=backend, num_processes=workers, tile_size=tile_size)
    return FractalRenderer(config, parameters).render()


def fractal_pixel(x: int, y: int, parameters: Optional[FractalParameters] = None) -> Tuple[int, int, int]:
    """Compute the (red, green, blue) value of one pixel."""
    fractal = GradientJulia(parameters or FractalParameters())
    r, g, b = fractal.render_tile(x, x + 1, y, y + 1)[0, 0]
    return int(r), int(g), int(b)
