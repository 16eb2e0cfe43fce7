import numpy as np
from pixsort.domain.models import ThresholdConfig
from pixsort.features.sort.logic import find_spans


def _row(levels):
    """Grey RGBA row whose selection metric equals each level."""
    row = np.zeros((len(levels), 4), dtype=np.uint8)
    for i, v in enumerate(levels):
        row[i] = (v, v, v, 255)
    return row


BAND = ThresholdConfig(min=100, max=200)


def test_single_interior_span():
    assert find_spans(_row([50, 150, 160, 140, 50]), BAND) == [(1, 4)]


def test_span_open_at_end_is_flushed():
    assert find_spans(_row([0, 150, 150]), BAND) == [(1, 3)]


def test_whole_row_in_band():
    assert find_spans(_row([100, 120, 200]), BAND) == [(0, 3)]


def test_bounds_are_inclusive():
    assert find_spans(_row([99, 100, 99, 200, 201]), BAND) == [(1, 2), (3, 4)]


def test_alternating_row_densest_layout():
    levels = [150, 0] * 5 + [150]
    spans = find_spans(_row(levels), BAND)
    assert spans == [(i, i + 1) for i in range(0, 11, 2)]


def test_no_spans():
    assert find_spans(_row([0, 10, 255, 0]), BAND) == []


def test_empty_row():
    assert find_spans(np.zeros((0, 4), dtype=np.uint8), BAND) == []


def test_spans_ordered_and_disjoint(rng):
    row = rng.integers(0, 256, (500, 4), dtype=np.uint8)
    spans = find_spans(row, BAND)
    prev_end = -1
    for start, end in spans:
        assert start < end
        # Maximal: spans never touch
        assert start > prev_end
        prev_end = end


def test_selection_uses_average_not_single_channel():
    # Red alone is in band, but the average (100+0+0)//3 = 33 is not
    row = np.array([[100, 0, 0, 255], [150, 150, 150, 255]], dtype=np.uint8)
    assert find_spans(row, BAND) == [(1, 2)]
