"""
Configuration loader: read config.json, merge defaults, validate into an immutable value.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from exif_recompress.config.defaults import DEFAULTS, ORIENTATION_SOURCES, OUTPUT_LAYOUTS, REQUIRED_KEYS


@dataclass(frozen=True)
class RecompressConfig:
    input_dir: Path
    output_dir: Path
    quality: int
    workers: int = 1
    output_layout: str = "mirror"
    orientation_source: str = "exif"
    reset_orientation_tag: bool = True
    log_level: str = "info"
    log_dir: Path | None = None


def _merge_defaults(override: dict[str, Any]) -> dict[str, Any]:
    """Overlay user values on a copy of DEFAULTS."""
    merged: dict[str, Any] = copy.deepcopy(DEFAULTS)
    merged.update(override)
    return merged


def _require_int(path: Path, key: str, value: Any, low: int, high: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Invalid config file {path}: {key} must be an integer, got {value!r}")
    if value < low or (high is not None and value > high):
        bounds = f"{low}..{high}" if high is not None else f">= {low}"
        raise ValueError(f"Invalid config file {path}: {key} must be {bounds}, got {value}")
    return value


def _require_str(path: Path, key: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid config file {path}: {key} must be a non-empty string")
    return value


def _resolve(base: Path, value: str) -> Path:
    candidate = Path(value).expanduser()
    return candidate if candidate.is_absolute() else base / candidate


def load_config(path: Path) -> RecompressConfig:
    """
    Load a JSON config file and validate it.
    Missing files raise FileNotFoundError; malformed or invalid files raise ValueError.
    Relative directories resolve against the config file's directory.
    """
    if path.is_dir():
        raise IsADirectoryError(f"Config path points to a directory: {path}")
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as fh:
            user_config = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid config file {path}: {exc}") from exc
    if not isinstance(user_config, dict):
        raise ValueError(f"Invalid config file {path}: top level must be a JSON object")

    missing = [key for key in REQUIRED_KEYS if key not in user_config]
    if missing:
        raise ValueError(f"Invalid config file {path}: missing {', '.join(missing)}")

    merged = _merge_defaults(user_config)
    base = path.resolve().parent

    layout = merged["OutputLayout"]
    if layout not in OUTPUT_LAYOUTS:
        raise ValueError(f"Invalid config file {path}: OutputLayout must be one of {sorted(OUTPUT_LAYOUTS)}")
    source = merged["OrientationSource"]
    if source not in ORIENTATION_SOURCES:
        raise ValueError(
            f"Invalid config file {path}: OrientationSource must be one of {sorted(ORIENTATION_SOURCES)}"
        )
    if not isinstance(merged["ResetOrientationTag"], bool):
        raise ValueError(f"Invalid config file {path}: ResetOrientationTag must be true or false")

    log_dir = merged["LogDir"]
    return RecompressConfig(
        input_dir=_resolve(base, _require_str(path, "InputDir", merged["InputDir"])),
        output_dir=_resolve(base, _require_str(path, "OutputDir", merged["OutputDir"])),
        quality=_require_int(path, "InitialQuality", merged["InitialQuality"], 1, 100),
        workers=_require_int(path, "Workers", merged["Workers"], 1),
        output_layout=layout,
        orientation_source=source,
        reset_orientation_tag=merged["ResetOrientationTag"],
        log_level=_require_str(path, "LogLevel", merged["LogLevel"]),
        log_dir=_resolve(base, _require_str(path, "LogDir", log_dir)) if log_dir is not None else None,
    )
