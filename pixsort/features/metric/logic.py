"""
Per-pixel scalar metrics.

The selection metric (integer channel average) decides span membership.
The ranking metric is chosen by SortMode and orders pixels inside a span.
Both are total: every 8-bit RGB triple maps to a finite value.
"""

from typing import Any, Dict
import numpy as np
from numba import njit, prange  # type: ignore
from pixsort.domain.models import SortMode
from pixsort.domain.types import ImageBuffer, MetricPlane

MODE_AVERAGE = 0
MODE_RED = 1
MODE_GREEN = 2
MODE_BLUE = 3
MODE_HUE = 4
MODE_SATURATION = 5
MODE_LIGHTNESS = 6

MODE_CODES: Dict[SortMode, int] = {
    SortMode.AVERAGE: MODE_AVERAGE,
    SortMode.RED: MODE_RED,
    SortMode.GREEN: MODE_GREEN,
    SortMode.BLUE: MODE_BLUE,
    SortMode.HUE: MODE_HUE,
    SortMode.SATURATION: MODE_SATURATION,
    SortMode.LIGHTNESS: MODE_LIGHTNESS,
}


@njit(cache=True)
def _selection_jit(r: int, g: int, b: int) -> int:
    return (int(r) + int(g) + int(b)) // 3


@njit(cache=True)
def _rgb_to_hsl_jit(r: int, g: int, b: int) -> tuple[float, float, float]:
    """
    Hue in degrees [0, 360), saturation and lightness in [0, 100].
    """
    rf = r / 255.0
    gf = g / 255.0
    bf = b / 255.0

    cmax = max(rf, max(gf, bf))
    cmin = min(rf, min(gf, bf))
    delta = cmax - cmin

    if delta == 0.0:
        h = 0.0
    elif cmax == rf:
        # Floored modulo: negative ratios wrap to the top of the circle
        h = 60.0 * (((gf - bf) / delta) % 6.0)
    elif cmax == gf:
        h = 60.0 * ((bf - rf) / delta + 2.0)
    else:
        h = 60.0 * ((rf - gf) / delta + 4.0)
    if h >= 360.0:
        h -= 360.0

    lum = 0.5 * (cmax + cmin)
    if delta == 0.0 or lum <= 0.0 or lum >= 1.0:
        s = 0.0
    else:
        s = delta / (1.0 - abs(2.0 * lum - 1.0))

    return h, s * 100.0, lum * 100.0


@njit(cache=True)
def _metric_jit(r: int, g: int, b: int, mode: int) -> float:
    if mode == MODE_AVERAGE:
        return float(_selection_jit(r, g, b))
    if mode == MODE_RED:
        return float(r)
    if mode == MODE_GREEN:
        return float(g)
    if mode == MODE_BLUE:
        return float(b)

    h, s, lum = _rgb_to_hsl_jit(r, g, b)
    if mode == MODE_HUE:
        return h
    if mode == MODE_SATURATION:
        return s
    return lum


@njit(parallel=True, cache=True)
def _metric_plane_jit(img: np.ndarray, mode: int) -> np.ndarray:
    h, w, _ = img.shape
    res = np.empty((h, w), dtype=np.float32)
    for y in prange(h):
        for x in range(w):
            res[y, x] = _metric_jit(img[y, x, 0], img[y, x, 1], img[y, x, 2], mode)
    return res


def mode_code(mode: SortMode) -> int:
    return MODE_CODES[SortMode.parse(mode)]


def selection_metric(pixel: Any) -> int:
    """
    Integer average of R, G and B. Alpha is ignored.
    """
    return int(_selection_jit(int(pixel[0]), int(pixel[1]), int(pixel[2])))


def rgb_to_hsl(pixel: Any) -> tuple[float, float, float]:
    h, s, lum = _rgb_to_hsl_jit(int(pixel[0]), int(pixel[1]), int(pixel[2]))
    return float(h), float(s), float(lum)


def pixel_metric(pixel: Any, mode: SortMode) -> float:
    """
    Ranking value of a single RGB(A) pixel, as float32 precision.
    """
    value = _metric_jit(int(pixel[0]), int(pixel[1]), int(pixel[2]), mode_code(mode))
    return float(np.float32(value))


def compute_metric(img: ImageBuffer, mode: SortMode) -> MetricPlane:
    """
    Ranking metric for every pixel of an RGBA8 buffer, (H, W) float32.
    """
    return _metric_plane_jit(img, mode_code(mode))
