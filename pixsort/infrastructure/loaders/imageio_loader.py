import os
import numpy as np
import imageio.v3 as iio
from pixsort.domain.interfaces import IImageLoader
from pixsort.domain.types import ImageBuffer
from pixsort.kernel.image.validation import ensure_rgba8
from pixsort.kernel.system.config import SUPPORTED_EXTENSIONS
from pixsort.kernel.system.logging import get_logger

logger = get_logger(__name__)


class ImageioLoader(IImageLoader):
    """
    Loader for common raster formats. Only the first frame of animated
    files is used.
    """

    def can_handle(self, file_path: str) -> bool:
        return os.path.splitext(file_path)[1].lower() in SUPPORTED_EXTENSIONS

    def load(self, file_path: str) -> ImageBuffer:
        try:
            img = iio.imread(file_path, index=0)
        except FileNotFoundError:
            raise
        except Exception as e:
            raise OSError(f"Cannot decode {file_path}: {e}") from e
        logger.debug(f"Decoded {file_path}: shape={img.shape} dtype={img.dtype}")
        return ensure_rgba8(np.ascontiguousarray(img))


def load_image(file_path: str) -> ImageBuffer:
    """
    Decodes a file into a contiguous (H, W, 4) uint8 buffer.
    """
    loader = ImageioLoader()
    if not loader.can_handle(file_path):
        raise ValueError(f"No loader found for: {file_path}")
    return loader.load(file_path)
