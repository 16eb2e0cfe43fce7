from typing import TypeAlias, Tuple
import numpy as np
import numpy.typing as npt


# Image Types
# 8-bit RGBA image (Height, Width, 4)
ImageBuffer: TypeAlias = npt.NDArray[np.uint8]

# Per-pixel scalar plane (Height, Width)
MetricPlane: TypeAlias = npt.NDArray[np.float32]

# Geometry Types
# (start, end) half-open range of positions within one row
Span: TypeAlias = Tuple[int, int]
# (Height, Width)
Dimensions: TypeAlias = Tuple[int, int]

CHANNELS = 4
ALPHA = 3
CHANNEL_MAX = 255
