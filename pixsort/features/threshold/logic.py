import numpy as np
from numba import njit, prange  # type: ignore
from typing import Any
from pixsort.domain.models import ThresholdConfig
from pixsort.domain.types import ImageBuffer
from pixsort.features.metric.logic import _selection_jit, selection_metric
from pixsort.kernel.image.logic import get_selection_plane
from pixsort.kernel.image.validation import validate_threshold


@njit(parallel=True, cache=True)
def _threshold_jit(img: np.ndarray, t_min: int, t_max: int) -> np.ndarray:
    h, w, c = img.shape
    res = np.empty_like(img)
    for y in prange(h):
        for x in range(w):
            lum = _selection_jit(img[y, x, 0], img[y, x, 1], img[y, x, 2])
            v = 255 if (lum >= t_min and lum <= t_max) else 0
            res[y, x, 0] = v
            res[y, x, 1] = v
            res[y, x, 2] = v
            res[y, x, 3] = img[y, x, 3]
    return res


def in_band(pixel: Any, threshold: ThresholdConfig) -> bool:
    """
    True when the pixel's channel average lies inside [min, max] inclusive.
    """
    validate_threshold(threshold)
    return threshold.contains(selection_metric(pixel))


def band_mask(img: ImageBuffer, threshold: ThresholdConfig) -> np.ndarray:
    """
    Boolean (H, W) mask of in-band pixels.
    """
    validate_threshold(threshold)
    lum = get_selection_plane(img)
    return (lum >= threshold.min) & (lum <= threshold.max)


def render_threshold(img: ImageBuffer, threshold: ThresholdConfig) -> ImageBuffer:
    """
    New buffer: in-band pixels white, others black, alpha copied.
    The source buffer is never written.
    """
    return _threshold_jit(img, int(threshold.min), int(threshold.max))
