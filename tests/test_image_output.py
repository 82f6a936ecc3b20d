import pytest
import numpy as np
from PIL import Image

from image_transform.rendering.image_output import ImageExporter, RenderMetadata, open_image


@pytest.fixture
def metadata():
    return RenderMetadata(
        fractal_type="Gradient Julia",
        resolution=(4, 3),
        max_iterations=255,
        escape_radius=2.0,
        julia_constant=(-0.4, 0.6),
        backend="numpy",
        render_time_seconds=0.5,
    )


@pytest.fixture
def pixels():
    return np.arange(4 * 3 * 3, dtype=np.uint8).reshape(3, 4, 3)


def test_png_roundtrip_with_metadata(tmp_path, pixels, metadata):
    exporter = ImageExporter()
    path = exporter.save_image(pixels, tmp_path / "out.png", metadata)

    assert np.array_equal(np.asarray(open_image(path)), pixels)
    assert exporter.extract_metadata_from_image(path) == metadata


def test_tiff_carries_metadata(tmp_path, pixels, metadata):
    exporter = ImageExporter()
    path = exporter.save_image(pixels, tmp_path / "out.tiff", metadata)

    assert np.array_equal(np.asarray(open_image(path)), pixels)
    assert exporter.extract_metadata_from_image(path) == metadata


def test_jpeg_writes_companion_json(tmp_path, pixels, metadata):
    exporter = ImageExporter()
    path = exporter.save_image(pixels, tmp_path / "out.jpg", metadata)

    assert (tmp_path / "out.json").exists()
    assert exporter.extract_metadata_from_image(path) == metadata


def test_format_follows_extension(tmp_path, pixels):
    path = ImageExporter().save_image(pixels, tmp_path / "out.bmp")
    with Image.open(path) as img:
        assert img.format == "BMP"


def test_png_without_metadata(tmp_path, pixels):
    exporter = ImageExporter()
    path = exporter.save_image(pixels, tmp_path / "plain.png")
    assert exporter.extract_metadata_from_image(path) is None


def test_unsupported_extension(tmp_path, pixels):
    with pytest.raises(ValueError):
        ImageExporter().save_image(pixels, tmp_path / "out.xyz")


def test_bad_array_shape(tmp_path):
    with pytest.raises(ValueError):
        ImageExporter().save_image(np.zeros((2, 2, 2), dtype=np.uint8), tmp_path / "out.png")


def test_creates_output_directory(tmp_path, pixels):
    path = ImageExporter().save_image(pixels, tmp_path / "nested" / "dir" / "out.png")
    assert path.exists()


def test_open_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_image(tmp_path / "missing.png")


def test_open_non_image(tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("not an image")
    with pytest.raises(ValueError):
        open_image(path)


def test_metadata_json_roundtrip(metadata):
    assert RenderMetadata.from_json(metadata.to_json()) == metadata


def test_bmp_accepts_grayscale_with_alpha(tmp_path):
    gray_alpha = np.array([[[10, 255], [200, 0]]], dtype=np.uint8)
    image = Image.fromarray(gray_alpha)
    assert image.mode == 'LA'

    path = ImageExporter().save_image(image, tmp_path / "out.bmp")

    with Image.open(path) as img:
        assert img.mode == 'RGBA'
        assert img.getpixel((0, 0)) == (10, 10, 10, 255)
        assert img.getpixel((1, 0)) == (200, 200, 200, 0)


def test_foreign_tiff_description_is_not_metadata(tmp_path, pixels):
    path = tmp_path / "scan.tiff"
    Image.fromarray(pixels).save(path, format='TIFF', description="scanned page 3")

    assert ImageExporter().extract_metadata_from_image(path) is None


def test_foreign_png_metadata_text_is_ignored(tmp_path, pixels):
    from PIL import PngImagePlugin

    pnginfo = PngImagePlugin.PngInfo()
    pnginfo.add_text("FractalMetadata", '{"fractal_type": "other"}')
    path = tmp_path / "other.png"
    Image.fromarray(pixels).save(path, pnginfo=pnginfo)

    assert ImageExporter().extract_metadata_from_image(path) is None
