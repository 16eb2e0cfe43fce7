import numpy as np
from numba import njit, prange  # type: ignore
from typing import List
from pixsort.domain.models import SortConfig, SortMode, ThresholdConfig
from pixsort.domain.types import ImageBuffer, Span
from pixsort.features.metric.logic import _metric_jit, _selection_jit, mode_code
from pixsort.kernel.image.validation import validate_threshold


@njit(cache=True)
def _find_spans_jit(row: np.ndarray, t_min: int, t_max: int) -> np.ndarray:
    """
    Single left-to-right scan. Returns (N, 2) half-open [start, end) ranges.
    """
    w = row.shape[0]
    # Alternating in/out pixels is the densest layout
    spans = np.empty(((w + 1) // 2, 2), dtype=np.int64)
    count = 0
    start = -1

    for x in range(w):
        lum = _selection_jit(row[x, 0], row[x, 1], row[x, 2])
        if lum >= t_min and lum <= t_max:
            if start < 0:
                start = x
        elif start >= 0:
            spans[count, 0] = start
            spans[count, 1] = x
            count += 1
            start = -1

    # Flush a span still open at the end of the row
    if start >= 0:
        spans[count, 0] = start
        spans[count, 1] = w
        count += 1

    return spans[:count]


@njit(cache=True)
def _sort_span_jit(
    row: np.ndarray, start: int, end: int, mode: int, invert: bool
) -> None:
    """
    Indirect sort: keys are computed once from a snapshot, a stable argsort
    yields the permutation, then RGB values are gathered back. Alpha stays put.
    """
    n = end - start
    if n < 2:
        return

    snapshot = np.empty((n, 3), dtype=np.uint8)
    keys = np.empty(n, dtype=np.float32)
    for i in range(n):
        r = row[start + i, 0]
        g = row[start + i, 1]
        b = row[start + i, 2]
        snapshot[i, 0] = r
        snapshot[i, 1] = g
        snapshot[i, 2] = b
        k = np.float32(_metric_jit(r, g, b, mode))
        # Negated keys keep the stable tie order for descending output
        keys[i] = -k if invert else k

    order = np.argsort(keys, kind="mergesort")

    for i in range(n):
        src = order[i]
        row[start + i, 0] = snapshot[src, 0]
        row[start + i, 1] = snapshot[src, 1]
        row[start + i, 2] = snapshot[src, 2]


@njit(cache=True)
def _sort_row_jit(
    row: np.ndarray, t_min: int, t_max: int, mode: int, invert: bool
) -> int:
    spans = _find_spans_jit(row, t_min, t_max)
    for s in range(spans.shape[0]):
        _sort_span_jit(row, spans[s, 0], spans[s, 1], mode, invert)
    return spans.shape[0]


@njit(parallel=True, cache=True)
def _sort_rows_jit(
    img: np.ndarray, t_min: int, t_max: int, mode: int, invert: bool
) -> np.ndarray:
    """
    Rows are disjoint views of the buffer, so each prange worker owns its
    row and its own slot in the counts array.
    """
    h = img.shape[0]
    counts = np.zeros(h, dtype=np.int64)
    for y in prange(h):
        counts[y] = _sort_row_jit(img[y], t_min, t_max, mode, invert)
    return counts


def find_spans(row: np.ndarray, threshold: ThresholdConfig) -> List[Span]:
    """
    Maximal runs of in-band pixels in a (W, 3|4) uint8 row, left to right.
    """
    validate_threshold(threshold)
    spans = _find_spans_jit(
        np.ascontiguousarray(row, dtype=np.uint8),
        int(threshold.min),
        int(threshold.max),
    )
    return [(int(s), int(e)) for s, e in spans]


def sort_span(
    row: np.ndarray, span: Span, mode: SortMode, invert: bool = False
) -> None:
    """
    Reorders the RGB values of row[start:end] in place.
    """
    start, end = span
    if start < 0 or end > row.shape[0] or start > end:
        raise IndexError(f"Span {span} outside row of length {row.shape[0]}")
    _sort_span_jit(row, int(start), int(end), mode_code(mode), bool(invert))


def sort_row(row: np.ndarray, config: SortConfig) -> int:
    """
    Detects and sorts every span of one row in place. Returns the span count.
    """
    return int(
        _sort_row_jit(
            row,
            int(config.threshold.min),
            int(config.threshold.max),
            mode_code(config.sort_mode),
            bool(config.invert),
        )
    )


def sort_rows(img: ImageBuffer, config: SortConfig) -> np.ndarray:
    """
    Sorts every row of a contiguous RGBA8 buffer in place, in parallel.
    Returns the per-row span counts.
    """
    return _sort_rows_jit(
        img,
        int(config.threshold.min),
        int(config.threshold.max),
        mode_code(config.sort_mode),
        bool(config.invert),
    )
