import dataclasses
import io
import os
from PIL import Image
from pixsort.domain.models import ExportConfig, ExportFormat
from pixsort.domain.types import ImageBuffer
from pixsort.kernel.image.validation import ensure_rgba8
from pixsort.kernel.system.logging import get_logger

logger = get_logger(__name__)

FORMAT_EXTENSIONS = {
    ExportFormat.PNG: "png",
    ExportFormat.JPEG: "jpg",
    ExportFormat.WEBP: "webp",
    ExportFormat.TIFF: "tiff",
    ExportFormat.BMP: "bmp",
    ExportFormat.GIF: "gif",
    ExportFormat.TGA: "tga",
}

EXTENSION_FORMATS = {
    ".png": ExportFormat.PNG,
    ".jpg": ExportFormat.JPEG,
    ".jpeg": ExportFormat.JPEG,
    ".webp": ExportFormat.WEBP,
    ".tif": ExportFormat.TIFF,
    ".tiff": ExportFormat.TIFF,
    ".bmp": ExportFormat.BMP,
    ".gif": ExportFormat.GIF,
    ".tga": ExportFormat.TGA,
}

# Formats without an alpha channel (GIF is palettised from RGB on save)
_OPAQUE_FORMATS = {ExportFormat.JPEG, ExportFormat.BMP, ExportFormat.GIF}


def buffer_to_pil(buffer: ImageBuffer, export_fmt: str) -> Image.Image:
    """
    RGBA8 buffer -> PIL image suitable for the target format.
    """
    img = ensure_rgba8(buffer)
    pil_img = Image.fromarray(img)
    if export_fmt in _OPAQUE_FORMATS:
        return pil_img.convert("RGB")
    return pil_img


def encode_image(buffer: ImageBuffer, export_settings: ExportConfig) -> bytes:
    """
    Encodes an RGBA8 buffer to the configured format.
    """
    if export_settings.export_fmt not in FORMAT_EXTENSIONS:
        raise ValueError(f"Unsupported export format: {export_settings.export_fmt}")

    pil_img = buffer_to_pil(buffer, export_settings.export_fmt)
    output_buf = io.BytesIO()
    if export_settings.export_fmt == ExportFormat.JPEG:
        pil_img.save(output_buf, format="JPEG", quality=export_settings.jpeg_quality)
    else:
        pil_img.save(output_buf, format=export_settings.export_fmt)
    return output_buf.getvalue()


def format_for_path(path: str, default: str = ExportFormat.PNG) -> str:
    return EXTENSION_FORMATS.get(os.path.splitext(path)[1].lower(), default)


def save_image(buffer: ImageBuffer, path: str, export_settings: ExportConfig) -> str:
    """
    Writes the buffer to path. The format follows the file extension when it
    is recognised, the export settings otherwise.
    """
    fmt = format_for_path(path, export_settings.export_fmt)
    bits = encode_image(buffer, dataclasses.replace(export_settings, export_fmt=fmt))
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as f:
        f.write(bits)
    logger.info(f"Saved {path} ({fmt}, {len(bits)} bytes)")
    return path
