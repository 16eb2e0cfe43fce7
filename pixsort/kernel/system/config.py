import os
from dataclasses import dataclass
from pixsort.domain.models import (
    ExportConfig,
    ExportFormat,
    SortConfig,
    SortMode,
    ThresholdConfig,
    WorkspaceConfig,
)

# User dir env (cache, exports)
BASE_USER_DIR = os.path.abspath(os.getenv("PIXSORT_USER_DIR", "user"))


@dataclass
class AppConfig:
    max_workers: int
    cache_dir: str
    default_export_dir: str
    perf_log: bool


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


# Global application constants
APP_CONFIG = AppConfig(
    max_workers=_env_int("PIXSORT_THREADS", os.cpu_count() or 1),
    cache_dir=os.path.join(BASE_USER_DIR, "cache"),
    default_export_dir=os.path.join(BASE_USER_DIR, "export"),
    perf_log=os.getenv("PIXSORT_PERF_LOG", "0") == "1",
)

# Extensions understood by the decoder collaborator
SUPPORTED_EXTENSIONS = (
    ".png",
    ".jpeg",
    ".jpg",
    ".bmp",
    ".gif",
    ".webp",
    ".tiff",
    ".tif",
    ".tga",
)

DEFAULT_SORT_CONFIG = SortConfig(
    vertical=False,
    threshold=ThresholdConfig(min=127, max=223),
    sort_mode=SortMode.LIGHTNESS,
    invert=False,
    show_thresholds=False,
)

DEFAULT_WORKSPACE_CONFIG = WorkspaceConfig(
    sort=DEFAULT_SORT_CONFIG,
    export=ExportConfig(
        export_path=APP_CONFIG.default_export_dir,
        export_fmt=ExportFormat.PNG,
        filename_pattern="{{ original_name }}_sorted",
    ),
)
