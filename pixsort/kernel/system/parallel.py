import numba  # type: ignore
from pixsort.kernel.system.logging import get_logger

logger = get_logger(__name__)


def configure_workers(max_workers: int) -> int:
    """
    Sizes numba's thread pool for the row kernels. The pool cannot grow
    past NUMBA_NUM_THREADS, fixed when numba is first imported.
    """
    limit = int(numba.config.NUMBA_NUM_THREADS)
    workers = max(1, min(int(max_workers), limit))
    numba.set_num_threads(workers)
    logger.debug(f"Row worker pool: {workers} thread(s) (limit {limit})")
    return workers
