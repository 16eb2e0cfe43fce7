import hashlib
import os
import uuid
import numpy as np
from pixsort.domain.types import ImageBuffer


def rotate_cw(img: ImageBuffer) -> ImageBuffer:
    """
    Rotates 90 degrees clockwise. Rows of the result are the source columns
    read bottom to top.
    """
    return np.ascontiguousarray(np.rot90(img, k=-1))


def rotate_ccw(img: ImageBuffer) -> ImageBuffer:
    """
    Exact inverse of rotate_cw.
    """
    return np.ascontiguousarray(np.rot90(img, k=1))


def get_selection_plane(img: ImageBuffer) -> np.ndarray:
    """
    Integer channel average (R+G+B)//3 per pixel, widened before summation.
    """
    rgb = img[:, :, :3].astype(np.uint16)
    return (rgb.sum(axis=2) // 3).astype(np.uint8)


def calculate_file_hash(file_path: str) -> str:
    """
    Generates a fast fingerprint of an image file.
    Hashes the first 1MB, last 1MB, and total file size.
    """
    try:
        file_size = os.path.getsize(file_path)
        hasher = hashlib.sha256()
        hasher.update(str(file_size).encode())

        with open(file_path, "rb") as f:
            hasher.update(f.read(1024 * 1024))

            if file_size > 2 * 1024 * 1024:
                f.seek(-1024 * 1024, os.SEEK_END)
                hasher.update(f.read(1024 * 1024))

        return hasher.hexdigest()
    except OSError:
        return f"err_{uuid.uuid4()}"
