import pytest
import numpy as np

from image_transform.acceleration.multiprocessing import (
    TileResult,
    TileSpec,
    MultiprocessingAccelerator,
    assemble_tiles,
    create_tile_grid,
    process_fractal_tile,
)
from image_transform.api import render_fractal


def test_tile_grid_covers_every_pixel_once():
    tiles = create_tile_grid(100, 70, tile_size=32)
    coverage = np.zeros((70, 100), dtype=np.int32)
    for tile in tiles:
        coverage[tile.y_start:tile.y_end, tile.x_start:tile.x_end] += 1

    assert np.all(coverage == 1)
    assert len(tiles) == 4 * 3
    assert [t.tile_id for t in tiles] == list(range(len(tiles)))


def test_tile_grid_edge_tiles_are_clipped():
    tiles = create_tile_grid(100, 70, tile_size=32)
    last = tiles[-1]
    assert (last.width, last.height) == (4, 6)


def test_tile_grid_rejects_bad_size():
    with pytest.raises(ValueError):
        create_tile_grid(10, 10, tile_size=0)


def test_process_tile_in_process(small_params):
    tile = TileSpec(tile_id=3, x_start=8, x_end=24, y_start=4, y_end=12)
    result = process_fractal_tile((small_params.to_dict(), tile))

    full = render_fractal(small_params, backend='numpy')
    assert result.tile_id == 3
    assert np.array_equal(result.pixels, full[4:12, 8:24])


def _tile(tile_id, x, y, w, h, value):
    return TileResult(tile_id, np.full((h, w, 3), value, dtype=np.uint8), x, y, 0.0)


def test_assemble_tiles_places_blocks():
    image = assemble_tiles([_tile(0, 0, 0, 2, 2, 1), _tile(1, 2, 0, 1, 2, 2)], 3, 2)
    assert image[:, :2].min() == 1
    assert image[:, 2].max() == 2


def test_assemble_tiles_detects_gaps():
    with pytest.raises(RuntimeError):
        assemble_tiles([_tile(0, 0, 0, 2, 2, 1)], 3, 2)


def test_assemble_tiles_detects_overlap():
    with pytest.raises(RuntimeError):
        assemble_tiles([_tile(0, 0, 0, 2, 2, 1), _tile(1, 1, 0, 2, 2, 2)], 3, 2)


def test_accelerator_single_tile(small_params):
    accelerator = MultiprocessingAccelerator(num_processes=1, tile_size=1000)
    image = accelerator.render(small_params)
    assert np.array_equal(image, render_fractal(small_params, backend='numpy'))


def test_accelerator_process_count_floor():
    assert MultiprocessingAccelerator(num_processes=0).num_processes == 1
