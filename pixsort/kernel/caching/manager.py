from typing import Optional
from pixsort.kernel.caching.logic import CacheEntry


class PipelineCache:
    """
    Holds the last result for the ACTIVE image.
    This cache is reset when switching source files.
    """

    def __init__(self) -> None:
        self.source_hash: str = ""
        self.result: Optional[CacheEntry] = None

    def clear(self) -> None:
        self.result = None
        self.source_hash = ""
