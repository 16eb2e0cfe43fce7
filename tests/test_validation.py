import numpy as np
import pytest
from pixsort.domain.errors import InvalidThresholdError, UnsupportedPixelFormatError
from pixsort.domain.models import ThresholdConfig
from pixsort.kernel.image.validation import (
    ensure_rgba8,
    validate_bool,
    validate_int,
    validate_threshold,
)


def test_rgba8_passes_through_without_copy():
    img = np.zeros((2, 3, 4), dtype=np.uint8)
    assert ensure_rgba8(img) is img


def test_grey_gains_channels_and_opaque_alpha():
    grey = np.array([[0, 128], [200, 255]], dtype=np.uint8)
    res = ensure_rgba8(grey)
    assert res.shape == (2, 2, 4)
    np.testing.assert_array_equal(res[:, :, 0], grey)
    np.testing.assert_array_equal(res[:, :, 2], grey)
    assert np.all(res[:, :, 3] == 255)


def test_single_channel_axis():
    res = ensure_rgba8(np.full((2, 2, 1), 9, dtype=np.uint8))
    assert res[0, 0].tolist() == [9, 9, 9, 255]


def test_rgb_gains_alpha():
    res = ensure_rgba8(np.full((1, 1, 3), 7, dtype=np.uint8))
    assert res[0, 0].tolist() == [7, 7, 7, 255]


def test_uint16_is_scaled():
    img = np.array([[[0, 257, 65535, 65535]]], dtype=np.uint16)
    assert ensure_rgba8(img)[0, 0].tolist() == [0, 1, 255, 255]


def test_float_unit_range_is_scaled():
    img = np.array([[[0.0, 0.5, 1.0, 1.0]]], dtype=np.float32)
    assert ensure_rgba8(img)[0, 0].tolist() == [0, 128, 255, 255]


def test_non_contiguous_input_becomes_contiguous():
    img = np.zeros((4, 6, 4), dtype=np.uint8)[:, ::2]
    res = ensure_rgba8(img)
    assert res.flags["C_CONTIGUOUS"]


@pytest.mark.parametrize(
    "bad",
    [
        [[1, 2, 3, 4]],
        np.zeros((2, 2, 2), dtype=np.uint8),
        np.zeros((2, 2, 5), dtype=np.uint8),
        np.zeros((1, 2, 2, 4), dtype=np.uint8),
        np.zeros(4, dtype=np.uint8),
        np.full((1, 1, 4), 1.5, dtype=np.float32),
        np.full((1, 1, 4), np.nan, dtype=np.float64),
        np.full((1, 1, 4), 300, dtype=np.int32),
        np.zeros((1, 1, 4), dtype=np.complex64),
    ],
)
def test_unsupported_formats(bad):
    with pytest.raises(UnsupportedPixelFormatError):
        ensure_rgba8(bad)


def test_unsupported_is_a_type_error():
    with pytest.raises(TypeError):
        ensure_rgba8("not an image")


def test_threshold_validation():
    assert validate_threshold(ThresholdConfig(0, 255)) == ThresholdConfig(0, 255)
    assert validate_threshold(ThresholdConfig(42, 42)).min == 42

    with pytest.raises(InvalidThresholdError) as exc:
        validate_threshold(ThresholdConfig(200, 100))
    assert exc.value.t_min == 200
    assert exc.value.t_max == 100

    with pytest.raises(InvalidThresholdError):
        validate_threshold(ThresholdConfig(-1, 10))
    with pytest.raises(InvalidThresholdError):
        validate_threshold(ThresholdConfig(0, 256))


@pytest.mark.parametrize("t_min, t_max", [(100.5, 200), (100, 200.0), (True, 200), (0, "255")])
def test_threshold_bounds_must_be_integers(t_min, t_max):
    with pytest.raises(InvalidThresholdError, match="integers"):
        validate_threshold(ThresholdConfig(t_min, t_max))


def test_numpy_integer_bounds_accepted():
    band = ThresholdConfig(np.uint8(10), np.int64(20))
    assert validate_threshold(band) is band


def test_scalar_helpers():
    assert validate_int("12") == 12
    assert validate_int(None, 3) == 3
    assert validate_int("x", 5) == 5
    assert validate_bool("yes") is True
    assert validate_bool("false") is False
    assert validate_bool(None, True) is True
