"""
Multiprocessing backend for parallel fractal computation.

This module provides tile-based parallel rendering using Python's
multiprocessing library for CPU-based acceleration across multiple cores.
Every pixel depends only on its own coordinates, so tiles are rendered
independently and copied into disjoint regions of the output raster.
"""

import numpy as np
from typing import List, Tuple, Optional, Dict, Any
import multiprocessing as mp
import logging
import time
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor, as_completed

from ..core.fractal_types import FractalParameters, GradientJulia

logger = logging.getLogger(__name__)


@dataclass
class TileSpec:
    """Specification for a single tile in parallel rendering."""
    tile_id: int
    x_start: int
    x_end: int
    y_start: int
    y_end: int

    @property
    def width(self) -> int:
        return self.x_end - self.x_start

    @property
    def height(self) -> int:
        return self.y_end - self.y_start


@dataclass
class TileResult:
    """Result from processing a single tile."""
    tile_id: int
    pixels: np.ndarray
    x_start: int
    y_start: int
    processing_time: float


def create_tile_grid(width: int, height: int, tile_size: int = 256) -> List[TileSpec]:
    """
    Create a grid of tiles for parallel processing.

    Args:
        width: Total image width
        height: Total image height
        tile_size: Target tile size (pixels)

    Returns:
        List of TileSpec objects covering the image exactly once
    """
    if tile_size <= 0:
        raise ValueError("tile_size must be positive")

    tiles = []
    tile_id = 0

    for y in range(0, height, tile_size):
        for x in range(0, width, tile_size):
            tiles.append(TileSpec(
                tile_id=tile_id,
                x_start=x,
                x_end=min(x + tile_size, width),
                y_start=y,
                y_end=min(y + tile_size, height),
            ))
            tile_id += 1

    logger.debug(f"Created {len(tiles)} tiles of target size {tile_size}x{tile_size}")
    return tiles


def process_fractal_tile(args: Tuple[Dict[str, Any], TileSpec]) -> TileResult:
    """
    Render a single fractal tile in a worker process.

    Args:
        args: Tuple of (fractal_params, tile_spec)

    Returns:
        TileResult object
    """
    fractal_params, tile_spec = args

    start_time = time.time()

    # Reconstruct the fractal in the worker process
    fractal = GradientJulia(FractalParameters.from_dict(fractal_params))
    pixels = fractal.render_tile(tile_spec.x_start, tile_spec.x_end,
                                 tile_spec.y_start, tile_spec.y_end)

    return TileResult(
        tile_id=tile_spec.tile_id,
        pixels=pixels,
        x_start=tile_spec.x_start,
        y_start=tile_spec.y_start,
        processing_time=time.time() - start_time,
    )


def assemble_tiles(tile_results: List[TileResult], total_width: int, total_height: int) -> np.ndarray:
    """
    Assemble tile results into a complete RGB raster.

    Raises:
        RuntimeError: if tiles overlap or leave pixels unpopulated
    """
    image = np.zeros((total_height, total_width, 3), dtype=np.uint8)
    written = np.zeros((total_height, total_width), dtype=bool)

    for tile_result in tile_results:
        x_start = tile_result.x_start
        y_start = tile_result.y_start
        tile_height, tile_width = tile_result.pixels.shape[:2]

        region = (slice(y_start, y_start + tile_height), slice(x_start, x_start + tile_width))
        if written[region].any():
            raise RuntimeError(f"Tile {tile_result.tile_id} overlaps an assembled region")

        image[region] = tile_result.pixels
        written[region] = True

    if not written.all():
        missing = int((~written).sum())
        raise RuntimeError(f"{missing} pixels were not produced by any tile")

    return image


class MultiprocessingAccelerator:
    """Multiprocessing-based parallel fractal computation."""

    def __init__(self, num_processes: Optional[int] = None, tile_size: int = 256):
        """
        Initialize multiprocessing accelerator.

        Args:
            num_processes: Number of worker processes (None for CPU count)
            tile_size: Size of tiles for parallel processing
        """
        if num_processes is None:
            self.num_processes = mp.cpu_count()
        else:
            self.num_processes = max(1, num_processes)

        self.tile_size = tile_size
        logger.debug(f"Multiprocessing accelerator: {self.num_processes} processes, "
                     f"{tile_size}x{tile_size} tiles")

    def render(self, parameters: FractalParameters) -> np.ndarray:
        """
        Render the fractal using parallel tile-based processing.

        Args:
            parameters: Fractal parameters

        Returns:
            RGB raster (height, width, 3) of uint8
        """
        parameters.validate()
        start_time = time.time()

        tiles = create_tile_grid(parameters.width, parameters.height, self.tile_size)
        fractal_params = parameters.to_dict()

        logger.info(f"Processing {len(tiles)} tiles with {self.num_processes} processes")

        tile_results = []
        with ProcessPoolExecutor(max_workers=self.num_processes) as executor:
            future_to_tile = {executor.submit(process_fractal_tile, (fractal_params, tile)): tile
                              for tile in tiles}

            for future in as_completed(future_to_tile):
                tile = future_to_tile[future]
                try:
                    tile_results.append(future.result())
                except Exception as e:
                    raise RuntimeError(f"Tile {tile.tile_id} failed: {e}") from e

                completed = len(tile_results)
                if completed % max(1, len(tiles) // 10) == 0:
                    progress = (completed / len(tiles)) * 100
                    logger.debug(f"Completed {completed}/{len(tiles)} tiles ({progress:.1f}%)")

        logger.debug("Assembling tile results")
        image = assemble_tiles(tile_results, parameters.width, parameters.height)

        total_time = time.time() - start_time
        total_processing_time = sum(tr.processing_time for tr in tile_results)

        logger.info(f"Parallel rendering complete: {total_time:.2f}s total, "
                    f"{total_processing_time:.2f}s processing time")

        return image


def get_optimal_process_count() -> int:
    """Get optimal number of processes for fractal computation."""
    # Leave one core for system
    return max(1, mp.cpu_count() - 1)
