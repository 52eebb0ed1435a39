"""
Default configuration values.
"""

from __future__ import annotations

REQUIRED_KEYS = ("InputDir", "OutputDir", "InitialQuality")

DEFAULTS: dict[str, object] = {
    "Workers": 1,
    "OutputLayout": "mirror",
    "OrientationSource": "exif",
    "ResetOrientationTag": True,
    "LogLevel": "info",
    "LogDir": None,
}

OUTPUT_LAYOUTS = {"mirror", "flat"}
ORIENTATION_SOURCES = {"exif", "legacy"}
