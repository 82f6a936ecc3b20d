import pytest
import numpy as np
from PIL import Image

from image_transform.rendering import transforms
from image_transform.rendering.coloring import ColorRGB


def test_blur_smooths_an_edge():
    pixels = np.zeros((20, 20, 3), dtype=np.uint8)
    pixels[:, 10:] = 255
    blurred = np.asarray(transforms.blur(Image.fromarray(pixels), 2.0))

    assert blurred.shape == pixels.shape
    assert 0 < blurred[10, 10, 0] < 255


def test_blur_rejects_non_positive_amount(rgb_image):
    with pytest.raises(ValueError):
        transforms.blur(rgb_image, 0)


def test_brighten_saturates():
    pixels = np.array([[[250, 5, 128]]], dtype=np.uint8)
    img = Image.fromarray(pixels)

    assert np.asarray(transforms.brighten(img, 10)).tolist() == [[[255, 15, 138]]]
    assert np.asarray(transforms.brighten(img, -10)).tolist() == [[[240, 0, 118]]]


def test_brighten_keeps_alpha():
    img = Image.fromarray(np.array([[[10, 20, 30, 40]]], dtype=np.uint8))
    result = transforms.brighten(img, 100)

    assert result.mode == 'RGBA'
    assert result.getpixel((0, 0)) == (110, 120, 130, 40)


def test_brighten_grayscale_image():
    img = Image.fromarray(np.array([[0, 200]], dtype=np.uint8))
    result = transforms.brighten(img, 100)
    assert result.mode == 'L'
    assert np.asarray(result).tolist() == [[100, 255]]


def test_crop_region(rgb_image):
    result = transforms.crop(rgb_image, 1, 1, 2, 2)
    assert result.size == (2, 2)
    assert result.getpixel((0, 0)) == rgb_image.getpixel((1, 1))


def test_crop_is_clamped_to_bounds(rgb_image):
    result = transforms.crop(rgb_image, 2, 1, 100, 100)
    assert result.size == (2, 2)


def test_crop_outside_image_fails(rgb_image):
    with pytest.raises(ValueError):
        transforms.crop(rgb_image, 10, 0, 5, 5)


def test_rotate_clockwise():
    img = Image.fromarray(np.array([[[255, 0, 0], [0, 0, 255]]], dtype=np.uint8))

    rotated = transforms.rotate(img, 90)
    assert rotated.size == (1, 2)
    # the left edge becomes the top edge
    assert rotated.getpixel((0, 0)) == (255, 0, 0)
    assert rotated.getpixel((0, 1)) == (0, 0, 255)

    assert transforms.rotate(img, 270).getpixel((0, 0)) == (0, 0, 255)
    assert transforms.rotate(img, 180).getpixel((0, 0)) == (0, 0, 255)


def test_rotate_rejects_other_angles(rgb_image):
    with pytest.raises(ValueError):
        transforms.rotate(rgb_image, 45)


def test_invert(rgb_image):
    inverted = np.asarray(transforms.invert(rgb_image))
    assert np.array_equal(inverted, 255 - np.asarray(rgb_image))


def test_invert_keeps_alpha():
    img = Image.fromarray(np.array([[[0, 100, 255, 7]]], dtype=np.uint8))
    assert transforms.invert(img).getpixel((0, 0)) == (255, 155, 0, 7)


def test_grayscale(rgb_image):
    gray = transforms.grayscale(rgb_image)
    assert gray.mode == 'L'
    assert gray.size == rgb_image.size


def test_generate_solid_color():
    img = transforms.generate(5, 3, ColorRGB(1, 2, 3))
    assert img.size == (5, 3)
    pixels = np.asarray(img)
    assert pixels.shape == (3, 5, 3)
    assert np.all(pixels == (1, 2, 3))


def test_generate_rejects_empty_size():
    with pytest.raises(ValueError):
        transforms.generate(0, 3, ColorRGB(0, 0, 0))
