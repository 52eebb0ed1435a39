"""
Path helpers: input discovery and output placement.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

JPEG_EXTENSIONS = (".jpg", ".jpeg")


class OutputCollisionError(OSError):
    """Two inputs would be written to the same output file."""


def iter_jpegs(folder: Path) -> Iterable[Path]:
    """Regular files under folder (recursive) with a .jpg/.jpeg suffix, any case, in sorted order."""
    for path in sorted(folder.rglob("*")):
        if path.is_file() and path.name.lower().endswith(JPEG_EXTENSIONS):
            yield path


def output_path_for(source: Path, input_dir: Path, output_dir: Path, layout: str) -> Path:
    """Mirror the relative location under output_dir, or drop it for the flat layout."""
    if layout == "flat":
        return output_dir / source.name
    return output_dir / source.relative_to(input_dir)
