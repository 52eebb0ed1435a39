"""JPEG segment, EXIF orientation, and pixel transform helpers."""

from exif_recompress.jpeg.exif import legacy_orientation, read_orientation, reset_orientation
from exif_recompress.jpeg.orientation import fix_orientation, inverse_orientation
from exif_recompress.jpeg.segments import (
    MalformedSegmentError,
    OversizedSegmentError,
    SegmentError,
    extract_exif,
    reassemble,
)

__all__ = [
    "extract_exif",
    "reassemble",
    "fix_orientation",
    "inverse_orientation",
    "read_orientation",
    "legacy_orientation",
    "reset_orientation",
    "SegmentError",
    "MalformedSegmentError",
    "OversizedSegmentError",
]
