import os

os.environ.setdefault("NUMBA_THREADING_LAYER", "workqueue")

import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def random_rgba(rng):
    """Random 24x37 RGBA8 image with non-uniform alpha."""
    return rng.integers(0, 256, (24, 37, 4), dtype=np.uint8)
