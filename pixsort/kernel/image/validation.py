import numbers
from typing import Any, cast
import numpy as np
from pixsort.domain.errors import InvalidThresholdError, UnsupportedPixelFormatError
from pixsort.domain.types import ImageBuffer, ALPHA, CHANNELS, CHANNEL_MAX


def _to_uint8(arr: np.ndarray) -> np.ndarray:
    if arr.dtype == np.uint8:
        return arr
    if arr.dtype == np.bool_:
        return arr.astype(np.uint8) * CHANNEL_MAX
    if arr.dtype == np.uint16:
        return np.round(arr.astype(np.float32) / 257.0).astype(np.uint8)
    if np.issubdtype(arr.dtype, np.floating):
        if arr.size and (not np.all(np.isfinite(arr)) or arr.min() < 0.0 or arr.max() > 1.0):
            raise UnsupportedPixelFormatError(
                "Floating point buffers must hold finite values in [0, 1]"
            )
        return np.round(arr * float(CHANNEL_MAX)).astype(np.uint8)
    if np.issubdtype(arr.dtype, np.integer):
        if arr.size and (arr.min() < 0 or arr.max() > CHANNEL_MAX):
            raise UnsupportedPixelFormatError(
                f"Integer buffer of dtype {arr.dtype} exceeds the 8-bit range"
            )
        return arr.astype(np.uint8)
    raise UnsupportedPixelFormatError(f"Unsupported pixel dtype: {arr.dtype}")


def ensure_rgba8(arr: Any) -> ImageBuffer:
    """
    Ensures the input is a C-contiguous (H, W, 4) uint8 array.
    Grey, grey+channel-axis and RGB inputs gain an opaque alpha channel.
    A buffer that already matches is returned as-is (no copy).
    """
    if not isinstance(arr, np.ndarray):
        raise UnsupportedPixelFormatError(f"Expected numpy.ndarray, got {type(arr)}")

    if arr.ndim == 2:
        arr = arr[:, :, np.newaxis]
    if arr.ndim != 3 or arr.shape[2] not in (1, 3, CHANNELS):
        raise UnsupportedPixelFormatError(
            f"Cannot convert buffer of shape {arr.shape} to RGBA"
        )

    arr = _to_uint8(arr)
    h, w, c = arr.shape

    if c == CHANNELS:
        return cast(ImageBuffer, np.ascontiguousarray(arr))

    rgba = np.empty((h, w, CHANNELS), dtype=np.uint8)
    rgba[:, :, :3] = arr if c == 3 else np.repeat(arr, 3, axis=2)
    rgba[:, :, ALPHA] = CHANNEL_MAX
    return cast(ImageBuffer, rgba)


def validate_threshold(threshold: Any) -> Any:
    """
    Rejects an empty, out-of-range or non-integral band. Never swaps or clamps.
    """
    t_min, t_max = threshold.min, threshold.max
    for bound in (t_min, t_max):
        if isinstance(bound, (bool, np.bool_)) or not isinstance(bound, numbers.Integral):
            raise InvalidThresholdError(t_min, t_max, "bounds must be integers")
    if not (0 <= t_min <= CHANNEL_MAX and 0 <= t_max <= CHANNEL_MAX):
        raise InvalidThresholdError(t_min, t_max, "bounds must lie in 0..255")
    if t_min > t_max:
        raise InvalidThresholdError(t_min, t_max)
    return threshold


def validate_int(val: Any, default: int = 0) -> int:
    """Ensures a value is an int, providing a default if None."""
    if val is None:
        return default
    try:
        return int(val)
    except (TypeError, ValueError):
        return default


def validate_bool(val: Any, default: bool = False) -> bool:
    """Ensures a value is a bool."""
    if val is None:
        return default
    if isinstance(val, str):
        return val.strip().lower() in ("1", "true", "yes", "on")
    return bool(val)
