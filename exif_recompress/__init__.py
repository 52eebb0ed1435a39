"""Batch JPEG recompression that keeps the EXIF block and bakes in orientation."""

__version__ = "0.1.0"
