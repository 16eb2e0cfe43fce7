import dataclasses
from typing import Any, Optional
from pixsort.domain.errors import PixelSortError
from pixsort.domain.models import ExportConfig, SortConfig, ThresholdConfig
from pixsort.domain.types import ImageBuffer
from pixsort.infrastructure.loaders.imageio_loader import load_image
from pixsort.kernel.image.logic import calculate_file_hash
from pixsort.kernel.image.validation import ensure_rgba8
from pixsort.kernel.system.config import DEFAULT_SORT_CONFIG
from pixsort.kernel.system.logging import get_logger
from pixsort.services.export.service import save_image
from pixsort.services.rendering.engine import PixelSortEngine

logger = get_logger(__name__)


class SortSession:
    """
    Editing session for a single image.

    Holds the untouched original next to the currently displayed result.
    Every transform starts again from the original, so a rejected
    configuration leaves the displayed image as it was.
    """

    def __init__(
        self,
        engine: Optional[PixelSortEngine] = None,
        settings: SortConfig = DEFAULT_SORT_CONFIG,
    ):
        self.engine = engine or PixelSortEngine()
        self.settings = settings

        # State
        self.source_path: Optional[str] = None
        self.source_hash: Optional[str] = None
        self.original: Optional[ImageBuffer] = None
        self.processed: Optional[ImageBuffer] = None
        self.last_error: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return self.original is not None

    def open(self, file_path: str) -> bool:
        """
        Decodes a file and makes it the active image.
        """
        try:
            img = load_image(file_path)
        except (OSError, ValueError, PixelSortError) as e:
            return self._report(f"Failed to open {file_path}: {e}")

        self.source_path = file_path
        self.source_hash = calculate_file_hash(file_path)
        self._set_original(img)
        logger.info(f"Opened {file_path} ({img.shape[1]}x{img.shape[0]})")
        return True

    def load(self, buffer: Any, source_hash: Optional[str] = None) -> bool:
        """
        Makes an in-memory buffer the active image.
        """
        try:
            img = ensure_rgba8(buffer)
        except PixelSortError as e:
            return self._report(str(e))

        self.source_path = None
        self.source_hash = source_hash
        # The session owns its copy of the original
        self._set_original(img.copy() if img is buffer else img)
        return True

    def update_settings(self, **changes: Any) -> SortConfig:
        """
        Replaces individual settings fields between passes.
        threshold_min / threshold_max update one side of the band.
        """
        t_min = changes.pop("threshold_min", None)
        t_max = changes.pop("threshold_max", None)
        if t_min is not None or t_max is not None:
            current = changes.get("threshold", self.settings.threshold)
            changes["threshold"] = ThresholdConfig(
                min=current.min if t_min is None else int(t_min),
                max=current.max if t_max is None else int(t_max),
            )
        self.settings = dataclasses.replace(self.settings, **changes)
        return self.settings

    def sort(self) -> bool:
        """
        Sorts a copy of the original and displays it.
        """
        if self.original is None:
            return False
        self.settings = dataclasses.replace(self.settings, show_thresholds=False)
        return self._render()

    def set_show_thresholds(self, enabled: bool) -> bool:
        """
        Toggles the threshold overlay. Disabling it shows the original again.
        """
        if self.original is None:
            return False
        self.settings = dataclasses.replace(self.settings, show_thresholds=enabled)
        if not enabled:
            self.processed = self.original.copy()
            return True
        return self._render()

    def refresh_thresholds(self) -> bool:
        """
        Recomputes the overlay after the band changed. No-op when hidden.
        """
        if self.original is None or not self.settings.show_thresholds:
            return False
        return self._render()

    def reset(self) -> bool:
        if self.original is None:
            return False
        self.processed = self.original.copy()
        self.last_error = None
        return True

    def save(self, file_path: str, export_settings: Optional[ExportConfig] = None) -> bool:
        if self.processed is None:
            return False
        try:
            save_image(self.processed, file_path, export_settings or ExportConfig())
        except (OSError, ValueError) as e:
            return self._report(f"Failed to save {file_path}: {e}")
        return True

    def _set_original(self, img: ImageBuffer) -> None:
        self.original = img
        self.processed = img.copy()
        self.last_error = None
        self.engine.cache.clear()

    def _render(self) -> bool:
        assert self.original is not None
        try:
            result = self.engine.process(self.original, self.settings, self.source_hash)
        except PixelSortError as e:
            return self._report(str(e))
        self.processed = result
        self.last_error = None
        return True

    def _report(self, message: str) -> bool:
        logger.error(message)
        self.last_error = message
        return False
