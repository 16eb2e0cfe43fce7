from pixsort.domain.interfaces import IProcessor, PipelineContext
from pixsort.domain.models import ThresholdConfig
from pixsort.domain.types import ImageBuffer
from pixsort.features.threshold.logic import band_mask, render_threshold


class ThresholdProcessor(IProcessor):
    """
    Diagnostic black/white overlay of the threshold band.
    """

    def __init__(self, config: ThresholdConfig):
        self.config = config

    def process(self, image: ImageBuffer, context: PipelineContext) -> ImageBuffer:
        if image.size:
            context.metrics["band_coverage"] = float(
                band_mask(image, self.config).mean()
            )
        else:
            context.metrics["band_coverage"] = 0.0
        return render_threshold(image, self.config)
