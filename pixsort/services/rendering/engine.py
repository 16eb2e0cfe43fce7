from typing import Optional
import numpy as np
from pixsort.domain.errors import UnsupportedPixelFormatError
from pixsort.domain.interfaces import PipelineContext
from pixsort.domain.models import SortConfig
from pixsort.domain.types import ImageBuffer
from pixsort.features.sort.processor import SortProcessor
from pixsort.features.threshold.processor import ThresholdProcessor
from pixsort.kernel.caching.logic import CacheEntry, calculate_config_hash
from pixsort.kernel.caching.manager import PipelineCache
from pixsort.kernel.image.validation import ensure_rgba8, validate_threshold
from pixsort.kernel.system.config import APP_CONFIG
from pixsort.kernel.system.logging import get_logger
from pixsort.kernel.system.parallel import configure_workers
from pixsort.kernel.system.performance import time_function

logger = get_logger(__name__)


def _new_context(img: ImageBuffer, source_hash: Optional[str] = None) -> PipelineContext:
    return PipelineContext(original_size=img.shape[:2], source_hash=source_hash)


@time_function
def apply_sort(
    buffer: ImageBuffer,
    settings: SortConfig,
    *,
    in_place: bool = False,
    context: Optional[PipelineContext] = None,
) -> ImageBuffer:
    """
    Full pixel sort of an RGBA8 buffer.

    Every check happens before any pixel is written: an invalid band raises
    InvalidThresholdError, a buffer that cannot become RGBA8 raises
    UnsupportedPixelFormatError. With in_place=True the caller's buffer is
    mutated and returned; otherwise the result is a new buffer.
    """
    validate_threshold(settings.threshold)
    img = ensure_rgba8(buffer)

    if in_place and img is not buffer:
        raise UnsupportedPixelFormatError(
            "In-place sorting requires a contiguous (H, W, 4) uint8 buffer"
        )
    if in_place and not img.flags.writeable:
        raise UnsupportedPixelFormatError("In-place sorting requires a writeable buffer")

    if context is None:
        context = _new_context(img)

    if img.shape[0] == 0 or img.shape[1] == 0:
        context.metrics["span_count"] = 0
        return img if in_place else img.copy()

    work = img if in_place else img.copy()
    result = SortProcessor(settings).process(work, context)

    # Vertical passes return a fresh (rotated back) array
    if in_place and result is not img:
        np.copyto(img, result)
        result = img

    logger.debug(
        f"Sorted {context.metrics.get('span_count', 0)} span(s) "
        f"in {context.metrics.get('rows_with_spans', 0)} row(s)"
    )
    return result


@time_function
def apply_threshold(
    buffer: ImageBuffer,
    settings: SortConfig,
    *,
    context: Optional[PipelineContext] = None,
) -> ImageBuffer:
    """
    Black/white preview of the threshold band. Always returns a new buffer.
    """
    validate_threshold(settings.threshold)
    img = ensure_rgba8(buffer)

    if context is None:
        context = _new_context(img)

    return ThresholdProcessor(settings.threshold).process(img, context)


class PixelSortEngine:
    """
    Entry point used by sessions and the CLI: worker pool sizing, validation
    and a single-entry result cache for the active image.
    """

    def __init__(self, max_workers: Optional[int] = None) -> None:
        self.config = APP_CONFIG
        self.cache = PipelineCache()
        self.workers = configure_workers(max_workers or self.config.max_workers)

    def apply_sort(
        self, buffer: ImageBuffer, settings: SortConfig, in_place: bool = False
    ) -> ImageBuffer:
        return apply_sort(buffer, settings, in_place=in_place)

    def apply_threshold(self, buffer: ImageBuffer, settings: SortConfig) -> ImageBuffer:
        return apply_threshold(buffer, settings)

    def process(
        self,
        buffer: ImageBuffer,
        settings: SortConfig,
        source_hash: Optional[str] = None,
        context: Optional[PipelineContext] = None,
    ) -> ImageBuffer:
        """
        Threshold overlay when settings.show_thresholds is set, full sort
        otherwise. Results are cached per (source_hash, settings).
        """
        validate_threshold(settings.threshold)
        img = ensure_rgba8(buffer)

        if context is None:
            context = _new_context(img, source_hash)

        conf_hash = calculate_config_hash(settings)

        if source_hash is not None:
            # Invalidate cache if source changed
            if self.cache.source_hash != source_hash:
                self.cache.clear()
                self.cache.source_hash = source_hash

            cached = self.cache.result
            if cached is not None and cached.config_hash == conf_hash:
                logger.debug(f"Cache hit for {source_hash[:12]}")
                context.metrics.update(cached.metrics)
                return cached.data.copy()

        if settings.show_thresholds:
            result = apply_threshold(img, settings, context=context)
        else:
            result = apply_sort(img, settings, context=context)

        if source_hash is not None:
            self.cache.result = CacheEntry(
                conf_hash, result.copy(), context.metrics.copy()
            )

        return result
