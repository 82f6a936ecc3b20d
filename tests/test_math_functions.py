import pytest
import numpy as np

from image_transform.core.math_functions import ComplexPlane, FractalIterator


def test_plane_swaps_axes_by_default():
    plane = ComplexPlane(-1.5, 1.5, -1.5, 1.5, 800, 800)

    assert plane.pixel_to_complex(0, 0) == complex(-1.5, -1.5)
    # the column drives the imaginary part, the row the real part
    assert plane.pixel_to_complex(400, 0) == complex(-1.5, 0.0)
    assert plane.pixel_to_complex(0, 400) == complex(0.0, -1.5)


def test_plane_without_swap():
    plane = ComplexPlane(-1.5, 1.5, -1.5, 1.5, 800, 800, swap_axes=False)
    assert plane.pixel_to_complex(400, 0) == complex(0.0, -1.5)


def test_complex_array_region_shape_and_dtype():
    plane = ComplexPlane(-1.5, 1.5, -1.5, 1.5, 100, 50)
    z = plane.create_complex_array(10, 30, 5, 8)

    assert z.shape == (3, 20)
    assert z.dtype == np.complex64
    assert z[0, 0] == np.complex64(plane.pixel_to_complex(10, 5))


def test_scale_is_single_precision():
    plane = ComplexPlane(-1.5, 1.5, -1.5, 1.5, 800, 800)
    assert plane.x_scale == np.float32(3.0) / np.float32(800)
    assert plane.x_scale.dtype == np.float32


@pytest.mark.parametrize("bounds,size", [
    ((1.0, 0.0, -1.0, 1.0), (10, 10)),
    ((-1.0, 1.0, 1.0, 1.0), (10, 10)),
    ((-1.0, 1.0, -1.0, 1.0), (0, 10)),
])
def test_plane_rejects_invalid_geometry(bounds, size):
    with pytest.raises(ValueError):
        ComplexPlane(*bounds, *size)


def test_point_outside_radius_does_not_iterate():
    result = FractalIterator(255, 2.0).julia_iteration(np.array([[3 + 0j]]), 0j)
    assert result.iterations[0, 0] == 0
    assert result.escaped[0, 0]


def test_iteration_counts_updates_applied():
    # 0 -> 1.5 -> 3.75: two updates, then |z| > 2
    result = FractalIterator(255, 2.0).julia_iteration(np.array([[0j]]), 1.5 + 0j)
    assert result.iterations[0, 0] == 2
    assert result.final_values[0, 0] == np.complex64(3.75)


def test_bounded_point_reaches_cap():
    result = FractalIterator(255, 2.0).julia_iteration(np.zeros((2, 2), dtype=np.complex64), 0j)
    assert np.all(result.iterations == 255)
    assert not result.escaped.any()


def test_point_on_radius_keeps_iterating():
    # |z| == 2 is still inside; z*z + c = 4 - 2 = 2 stays fixed
    result = FractalIterator(10, 2.0).julia_iteration(np.array([[2 + 0j]]), -2 + 0j)
    assert result.iterations[0, 0] == 10


def test_iterator_validates_arguments():
    with pytest.raises(ValueError):
        FractalIterator(0, 2.0)
    with pytest.raises(ValueError):
        FractalIterator(10, -1.0)
