import numpy as np
from pixsort.domain.interfaces import IProcessor, PipelineContext
from pixsort.domain.models import SortConfig
from pixsort.domain.types import ImageBuffer
from pixsort.features.sort.logic import sort_rows
from pixsort.kernel.image.logic import rotate_ccw, rotate_cw


class SortProcessor(IProcessor):
    """
    Orient, sort every row in parallel, restore.
    """

    def __init__(self, config: SortConfig):
        self.config = config

    def process(self, image: ImageBuffer, context: PipelineContext) -> ImageBuffer:
        img = image

        # 1. Orient: rows of the rotated buffer are the original columns
        if self.config.vertical:
            img = rotate_cw(img)

        # 2. Process (mutates img row by row)
        counts = sort_rows(img, self.config)
        context.metrics["span_count"] = int(counts.sum())
        context.metrics["rows_with_spans"] = int(np.count_nonzero(counts))

        # 3. Restore
        if self.config.vertical:
            img = rotate_ccw(img)

        return img
