import numpy as np
from pixsort.domain.interfaces import PipelineContext
from pixsort.domain.models import SortConfig, ThresholdConfig
from pixsort.features.threshold.logic import band_mask, in_band, render_threshold
from pixsort.features.threshold.processor import ThresholdProcessor
from pixsort.services.rendering.engine import apply_threshold


def test_band_edges_render_white_and_below_min_black():
    img = np.array(
        [[[100, 100, 100, 7], [150, 150, 150, 8], [99, 99, 99, 9]]], dtype=np.uint8
    )
    settings = SortConfig(threshold=ThresholdConfig(min=100, max=150), show_thresholds=True)

    res = apply_threshold(img, settings)

    assert res[0, 0].tolist() == [255, 255, 255, 7]
    assert res[0, 1].tolist() == [255, 255, 255, 8]
    assert res[0, 2].tolist() == [0, 0, 0, 9]


def test_above_max_black():
    img = np.array([[[151, 151, 151, 255]]], dtype=np.uint8)
    res = render_threshold(img, ThresholdConfig(min=100, max=150))
    assert res[0, 0].tolist() == [0, 0, 0, 255]


def test_preview_never_mutates_source(random_rgba):
    original = random_rgba.copy()
    res = apply_threshold(random_rgba, SortConfig())
    np.testing.assert_array_equal(random_rgba, original)
    assert res is not random_rgba


def test_output_is_binary_with_alpha(random_rgba):
    res = render_threshold(random_rgba, ThresholdConfig(60, 180))
    assert set(np.unique(res[:, :, :3]).tolist()) <= {0, 255}
    np.testing.assert_array_equal(res[:, :, 3], random_rgba[:, :, 3])
    # Channels are equal per pixel
    np.testing.assert_array_equal(res[:, :, 0], res[:, :, 1])
    np.testing.assert_array_equal(res[:, :, 1], res[:, :, 2])


def test_render_matches_band_mask(random_rgba):
    band = ThresholdConfig(60, 180)
    res = render_threshold(random_rgba, band)
    np.testing.assert_array_equal(res[:, :, 0] == 255, band_mask(random_rgba, band))


def test_in_band():
    band = ThresholdConfig(10, 20)
    assert in_band((10, 10, 10, 0), band)
    assert in_band((20, 20, 22, 0), band)
    assert not in_band((9, 9, 9, 255), band)
    assert not in_band((21, 21, 21, 255), band)


def test_processor_records_coverage():
    img = np.zeros((2, 2, 4), dtype=np.uint8)
    img[0, 0, :3] = 128
    context = PipelineContext(original_size=(2, 2))
    ThresholdProcessor(ThresholdConfig(100, 200)).process(img, context)
    assert context.metrics["band_coverage"] == 0.25
