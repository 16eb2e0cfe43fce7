import csv
import logging
from unittest.mock import patch

import numpy as np
import pixsort
from pixsort.kernel.system import performance
from pixsort.kernel.system.logging import get_logger, setup_logging
from pixsort.kernel.system.parallel import configure_workers


def test_version_read_from_file():
    assert pixsort.__version__ == "0.1.0"


def test_get_logger_namespacing():
    assert get_logger().name == "pixsort"
    assert get_logger("perf").name == "pixsort.perf"
    assert get_logger("pixsort.features.sort").name == "pixsort.features.sort"


def test_setup_logging_idempotent():
    logger = setup_logging(logging.INFO)
    handlers = list(logger.handlers)
    again = setup_logging(logging.DEBUG)
    assert again is logger
    assert again.handlers == handlers
    assert again.level == logging.DEBUG


def test_time_function_logs_shape(caplog):
    @performance.time_function
    def double(img):
        return img * 2

    with caplog.at_level(logging.INFO, logger="pixsort.perf"):
        res = double(np.ones((3, 5)))

    assert res.sum() == 30
    assert "PERF: double took" in caplog.text
    assert "(3, 5)" in caplog.text


def test_perf_csv(tmp_path):
    with patch.object(performance.APP_CONFIG, "cache_dir", str(tmp_path)), \
            patch.object(performance.APP_CONFIG, "perf_log", True):

        @performance.time_function
        def noop(x):
            return x

        noop(np.zeros((2, 2)))

        with open(tmp_path / "perf_stats.csv", newline="") as f:
            rows = list(csv.reader(f))

    assert rows[0] == performance.PERF_LOG_HEADER
    assert rows[1][1] == "noop"


def test_configure_workers_bounds():
    assert configure_workers(1) == 1
    assert configure_workers(0) == 1
