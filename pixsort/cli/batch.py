"""pixsort CLI batch sorter.

Sorts (or previews the threshold band of) image files without a GUI.
"""

import os
import sys

os.environ.setdefault("NUMBA_THREADING_LAYER", "workqueue")

import argparse
import dataclasses
import json
import logging
import time
from typing import List, Optional

from pixsort import __version__
from pixsort.domain.errors import PixelSortError
from pixsort.domain.models import ExportFormat, SortMode, ThresholdConfig, WorkspaceConfig
from pixsort.infrastructure.loaders.imageio_loader import load_image
from pixsort.kernel.image.logic import calculate_file_hash
from pixsort.kernel.image.validation import validate_threshold
from pixsort.kernel.system.config import DEFAULT_WORKSPACE_CONFIG, SUPPORTED_EXTENSIONS
from pixsort.kernel.system.logging import setup_logging
from pixsort.services.export.service import FORMAT_EXTENSIONS, encode_image
from pixsort.services.export.templating import render_export_filename
from pixsort.services.rendering.engine import PixelSortEngine


MODE_MAP = {mode.name.lower(): mode for mode in SortMode}

FORMAT_MAP = {
    "png": ExportFormat.PNG,
    "jpeg": ExportFormat.JPEG,
    "webp": ExportFormat.WEBP,
    "tiff": ExportFormat.TIFF,
    "bmp": ExportFormat.BMP,
    "gif": ExportFormat.GIF,
    "tga": ExportFormat.TGA,
}

MODE_CHOICES = tuple(MODE_MAP.keys())
FORMAT_CHOICES = tuple(FORMAT_MAP.keys())

CONFIG_DIR = os.path.expanduser("~/.pixsort")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")


def load_user_config() -> dict:
    """Loads ~/.pixsort/config.json if it exists. Returns {"cli": {}, "sorting": {}}."""
    if not os.path.isfile(CONFIG_FILE):
        return {"cli": {}, "sorting": {}}
    with open(CONFIG_FILE, "r") as f:
        data = json.load(f)
    return {
        "cli": data.get("cli", {}),
        "sorting": data.get("sorting", {}),
    }


def generate_default_config() -> int:
    """Creates ~/.pixsort/config.json with documented defaults. Returns 0 on success, 1 if exists."""
    if os.path.isfile(CONFIG_FILE):
        print(f"Config already exists: {CONFIG_FILE}", file=sys.stderr)
        return 1
    os.makedirs(CONFIG_DIR, exist_ok=True)
    default = {
        "cli": {
            "output": "./export",
            "format": "png",
            "filename_pattern": DEFAULT_WORKSPACE_CONFIG.export.filename_pattern,
        },
        "sorting": DEFAULT_WORKSPACE_CONFIG.sort.to_dict(),
    }
    with open(CONFIG_FILE, "w") as f:
        json.dump(default, f, indent=4)
    print(f"Config created: {CONFIG_FILE}", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixsort",
        description="pixsort -- threshold-band pixel sorting",
        epilog="Example: pixsort --mode hue --min 60 --max 200 --vertical photo.png",
    )

    parser.add_argument(
        "inputs",
        nargs="*",
        metavar="FILE_OR_DIR",
        help="Input files or directories containing images",
    )

    parser.add_argument(
        "--mode",
        choices=MODE_CHOICES,
        default=None,
        help="Ranking metric inside a span (default: lightness)",
    )

    parser.add_argument(
        "--min",
        type=int,
        default=None,
        dest="threshold_min",
        metavar="0-255",
        help="Lower bound of the threshold band, inclusive (default: 127)",
    )

    parser.add_argument(
        "--max",
        type=int,
        default=None,
        dest="threshold_max",
        metavar="0-255",
        help="Upper bound of the threshold band, inclusive (default: 223)",
    )

    parser.add_argument(
        "--vertical",
        action="store_true",
        default=None,
        help="Sort columns instead of rows",
    )

    parser.add_argument(
        "--invert",
        action="store_true",
        default=None,
        help="Sort descending (lightest to darkest)",
    )

    parser.add_argument(
        "--show-thresholds",
        action="store_true",
        default=None,
        help="Write the black/white threshold preview instead of sorting",
    )

    parser.add_argument(
        "--format",
        choices=FORMAT_CHOICES,
        default=None,
        dest="output_format",
        help="Output file format (default: png)",
    )

    parser.add_argument(
        "--output",
        default=None,
        metavar="DIR",
        help="Output directory (default: ./export)",
    )

    parser.add_argument(
        "--filename-pattern",
        default=None,
        metavar="TEMPLATE",
        help='Jinja2 filename template (default: "{{ original_name }}_sorted")',
    )

    parser.add_argument(
        "--settings",
        default=None,
        metavar="JSON_FILE",
        help="Load sort settings from a JSON file",
    )

    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        metavar="N",
        help="Row worker threads (default: all cores)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging",
    )

    parser.add_argument(
        "--init-config",
        action="store_true",
        default=False,
        help="Generate default config at ~/.pixsort/config.json and exit",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def discover_files(inputs: List[str]) -> List[str]:
    """Resolves input paths to a list of supported image files."""
    files = []
    for input_path in inputs:
        path = os.path.abspath(input_path)
        if os.path.isfile(path):
            ext = os.path.splitext(path)[1].lower()
            if ext in SUPPORTED_EXTENSIONS:
                files.append(path)
            else:
                print(f"Warning: Skipping unsupported file: {path}", file=sys.stderr)
        elif os.path.isdir(path):
            for root, dirs, filenames in os.walk(path):
                dirs.sort()
                for fname in sorted(filenames):
                    if os.path.splitext(fname)[1].lower() in SUPPORTED_EXTENSIONS:
                        files.append(os.path.join(root, fname))
        else:
            print(f"Warning: Path not found: {path}", file=sys.stderr)
    return files


def build_config(args: argparse.Namespace, user_config: dict) -> WorkspaceConfig:
    """Builds WorkspaceConfig with loading priority:
    DEFAULT -> user config -> --settings -> CLI flags
    """
    # Layer 1: defaults as flat dict
    base_dict = DEFAULT_WORKSPACE_CONFIG.to_dict()

    # Layer 2: user config
    base_dict.update(user_config.get("sorting", {}))
    cli_defaults = user_config.get("cli", {})
    if "output" in cli_defaults:
        base_dict["export_path"] = cli_defaults["output"]
    if "format" in cli_defaults:
        base_dict["export_fmt"] = FORMAT_MAP[cli_defaults["format"]]
    if "filename_pattern" in cli_defaults:
        base_dict["filename_pattern"] = cli_defaults["filename_pattern"]

    # Layer 3: --settings file overrides
    if args.settings:
        with open(os.path.abspath(args.settings), "r") as f:
            base_dict.update(json.load(f))

    config = WorkspaceConfig.from_flat_dict(base_dict)

    # Layer 4: CLI flags always win
    sort_overrides: dict = {}
    if args.mode is not None:
        sort_overrides["sort_mode"] = MODE_MAP[args.mode]
    if args.vertical is not None:
        sort_overrides["vertical"] = args.vertical
    if args.invert is not None:
        sort_overrides["invert"] = args.invert
    if args.show_thresholds is not None:
        sort_overrides["show_thresholds"] = args.show_thresholds
    if args.threshold_min is not None or args.threshold_max is not None:
        current = config.sort.threshold
        sort_overrides["threshold"] = ThresholdConfig(
            min=current.min if args.threshold_min is None else args.threshold_min,
            max=current.max if args.threshold_max is None else args.threshold_max,
        )
    sort = dataclasses.replace(config.sort, **sort_overrides)

    export_overrides: dict = {}
    if args.output is not None:
        export_overrides["export_path"] = args.output
    if args.output_format is not None:
        export_overrides["export_fmt"] = FORMAT_MAP[args.output_format]
    if args.filename_pattern is not None:
        export_overrides["filename_pattern"] = args.filename_pattern
    export = dataclasses.replace(config.export, **export_overrides)
    export = dataclasses.replace(export, export_path=os.path.abspath(export.export_path))

    return dataclasses.replace(config, sort=sort, export=export)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns 0 on success, 1 on failure."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.init_config:
        return generate_default_config()

    files = discover_files(args.inputs)
    if not files:
        print("Error: No supported image files found.", file=sys.stderr)
        return 1

    try:
        config = build_config(args, load_user_config())
    except (json.JSONDecodeError, FileNotFoundError, KeyError, TypeError, ValueError) as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    try:
        validate_threshold(config.sort.threshold)
    except PixelSortError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    export_settings = config.export
    os.makedirs(export_settings.export_path, exist_ok=True)

    engine = PixelSortEngine(max_workers=args.threads)

    total = len(files)
    failed = 0
    print(f"Processing {total} file(s) -> {export_settings.export_path}", file=sys.stderr)
    t_start = time.monotonic()

    for i, file_path in enumerate(files, 1):
        name = os.path.splitext(os.path.basename(file_path))[0]
        print(f"  [{i}/{total}] {name} ...", file=sys.stderr, end="", flush=True)
        t_file = time.monotonic()

        try:
            img = load_image(file_path)
            result = engine.process(img, config.sort, calculate_file_hash(file_path))
            bits = encode_image(result, export_settings)

            ext = FORMAT_EXTENSIONS[export_settings.export_fmt]
            filename = render_export_filename(file_path, export_settings.filename_pattern)
            out_path = os.path.join(export_settings.export_path, f"{filename}.{ext}")

            with open(out_path, "wb") as f:
                f.write(bits)

            elapsed = time.monotonic() - t_file
            print(f" OK ({elapsed:.1f}s)", file=sys.stderr)

        except PixelSortError as e:
            print(f" FAILED ({e})", file=sys.stderr)
            failed += 1
        except Exception as e:
            print(f" ERROR: {e}", file=sys.stderr)
            failed += 1

    total_time = time.monotonic() - t_start
    succeeded = total - failed
    print(f"Done: {succeeded}/{total} succeeded in {total_time:.1f}s", file=sys.stderr)

    return 1 if failed > 0 else 0


def cli_entry() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
