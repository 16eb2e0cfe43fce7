from dataclasses import dataclass, field, asdict
from typing import Dict, Any
from enum import Enum
from pixsort.kernel.image.validation import validate_bool, validate_int


class SortMode(Enum):
    """
    Ranking metric used to order pixels inside a span.
    """

    AVERAGE = "Average"
    RED = "Red"
    GREEN = "Green"
    BLUE = "Blue"
    HUE = "Hue"
    SATURATION = "Saturation"
    LIGHTNESS = "Lightness"

    @classmethod
    def parse(cls, value: Any) -> "SortMode":
        """
        Accepts a SortMode, its value ("Hue") or its name in any case ("hue").
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for mode in cls:
            if text == mode.value or text.upper() == mode.name:
                return mode
        raise ValueError(f"Unknown sort mode: {value!r}")


class ExportFormat:
    PNG = "PNG"
    JPEG = "JPEG"
    WEBP = "WEBP"
    TIFF = "TIFF"
    BMP = "BMP"
    GIF = "GIF"
    TGA = "TGA"


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Inclusive band over the selection metric (0-255).
    """

    min: int = 127
    max: int = 223

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class SortConfig:
    """
    Settings consumed by every row worker during one pass.
    """

    vertical: bool = False
    threshold: ThresholdConfig = field(default_factory=ThresholdConfig)
    sort_mode: SortMode = SortMode.LIGHTNESS
    invert: bool = False
    show_thresholds: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """
        Flattens for serialization.
        """
        return {
            "vertical": self.vertical,
            "threshold_min": self.threshold.min,
            "threshold_max": self.threshold.max,
            "sort_mode": self.sort_mode.value,
            "invert": self.invert,
            "show_thresholds": self.show_thresholds,
        }

    @classmethod
    def from_flat_dict(cls, data: Dict[str, Any]) -> "SortConfig":
        """
        from JSON / CLI layers. Missing keys fall back to defaults.
        """
        default = cls()
        return cls(
            vertical=validate_bool(data.get("vertical"), default.vertical),
            threshold=ThresholdConfig(
                min=validate_int(data.get("threshold_min"), default.threshold.min),
                max=validate_int(data.get("threshold_max"), default.threshold.max),
            ),
            sort_mode=SortMode.parse(data.get("sort_mode", default.sort_mode)),
            invert=validate_bool(data.get("invert"), default.invert),
            show_thresholds=validate_bool(
                data.get("show_thresholds"), default.show_thresholds
            ),
        )


@dataclass(frozen=True)
class ExportConfig:
    """
    Export parameters (path, format, naming).
    """

    export_path: str = "export"
    export_fmt: str = ExportFormat.PNG
    filename_pattern: str = "{{ original_name }}_sorted"
    jpeg_quality: int = 95


@dataclass(frozen=True)
class WorkspaceConfig:
    """
    Complete state for a single sorting job.
    """

    sort: SortConfig = field(default_factory=SortConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    def to_dict(self) -> Dict[str, Any]:
        res = self.sort.to_dict()
        res.update(asdict(self.export))
        return res

    @classmethod
    def from_flat_dict(cls, data: Dict[str, Any]) -> "WorkspaceConfig":
        valid_keys = ExportConfig.__dataclass_fields__.keys()
        export_data = {k: v for k, v in data.items() if k in valid_keys and v is not None}
        return cls(
            sort=SortConfig.from_flat_dict(
                {k: v for k, v in data.items() if v is not None}
            ),
            export=ExportConfig(**export_data),
        )
