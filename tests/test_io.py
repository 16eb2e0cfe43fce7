import numpy as np
import pytest
from PIL import Image
from pixsort.domain.models import ExportConfig, ExportFormat
from pixsort.infrastructure.loaders.imageio_loader import ImageioLoader, load_image
from pixsort.services.export.service import encode_image, format_for_path, save_image
from pixsort.services.export.templating import FilenameTemplater, render_export_filename
from pixsort.services.session import SortSession


def test_loader_grey_png(tmp_path):
    grey = np.arange(12, dtype=np.uint8).reshape(3, 4) * 20
    path = tmp_path / "grey.png"
    Image.fromarray(grey).save(path)

    img = load_image(str(path))
    assert img.shape == (3, 4, 4)
    np.testing.assert_array_equal(img[:, :, 1], grey)
    assert np.all(img[:, :, 3] == 255)


def test_loader_rgba_png(tmp_path, random_rgba):
    path = tmp_path / "rgba.png"
    Image.fromarray(random_rgba).save(path)
    np.testing.assert_array_equal(load_image(str(path)), random_rgba)


def test_loader_extensions():
    loader = ImageioLoader()
    assert loader.can_handle("a.PNG")
    assert loader.can_handle("b.tga")
    assert not loader.can_handle("c.txt")
    with pytest.raises(ValueError):
        load_image("notes.txt")


def test_jpeg_drops_alpha(random_rgba):
    bits = encode_image(random_rgba, ExportConfig(export_fmt=ExportFormat.JPEG))
    assert bits[:2] == b"\xff\xd8"


def test_png_keeps_alpha(tmp_path, random_rgba):
    path = save_image(random_rgba, str(tmp_path / "x.png"), ExportConfig())
    with Image.open(path) as img:
        assert img.mode == "RGBA"


def test_unknown_format_rejected(random_rgba):
    with pytest.raises(ValueError):
        encode_image(random_rgba, ExportConfig(export_fmt="XCF"))


def test_format_for_path():
    assert format_for_path("a.jpeg") == ExportFormat.JPEG
    assert format_for_path("a.TIF") == ExportFormat.TIFF
    assert format_for_path("a.unknown", ExportFormat.WEBP) == ExportFormat.WEBP


def test_filename_template():
    assert render_export_filename("/scans/beach.png", "{{ original_name }}_sorted") == "beach_sorted"
    assert render_export_filename("/scans/beach.png", "{{ original_name }}_{{ mode }}", mode="hue") == "beach_hue"


def test_filename_template_fallbacks():
    templater = FilenameTemplater()
    assert templater.render("{{ broken", {"original_name": "a"}) == "a_sorted"
    assert templater.render("   ", {"original_name": "b"}) == "b_sorted"


@pytest.mark.parametrize(
    "name, pil_format, has_alpha",
    [("out.gif", "GIF", False), ("out.tga", "TGA", True), ("out.bmp", "BMP", False)],
)
def test_session_save_follows_extension(tmp_path, name, pil_format, has_alpha):
    session = SortSession()
    assert session.load(np.full((4, 4, 4), 150, dtype=np.uint8))

    path = tmp_path / name
    assert session.save(str(path))
    with Image.open(path) as img:
        assert img.format == pil_format
        assert ("A" in img.mode) == has_alpha
        assert img.size == (4, 4)


def test_unknown_extension_falls_back_to_export_format(tmp_path, random_rgba):
    path = save_image(random_rgba, str(tmp_path / "x.dat"), ExportConfig(export_fmt=ExportFormat.TIFF))
    with Image.open(path) as img:
        assert img.format == "TIFF"
