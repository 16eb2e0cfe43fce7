from typing import Protocol, Optional, Any, runtime_checkable
from dataclasses import dataclass, field
from pixsort.domain.types import ImageBuffer, Dimensions


@dataclass
class PipelineContext:
    """
    Shared state passed through the pipeline.
    """

    original_size: Dimensions

    # Metrics gathered by processing steps (e.g., span counts)
    metrics: dict[str, Any] = field(default_factory=dict)
    source_hash: Optional[str] = None


@runtime_checkable
class IProcessor(Protocol):
    """
    Interface for any image processing step.
    """

    def process(self, image: ImageBuffer, context: PipelineContext) -> ImageBuffer: ...


class IImageLoader(Protocol):
    """
    Interface for decoding image files into RGBA8 buffers.
    """

    def can_handle(self, file_path: str) -> bool: ...

    def load(self, file_path: str) -> ImageBuffer: ...
