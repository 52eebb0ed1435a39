"""
JPEG marker-segment helpers: locate the APP1 (EXIF) segment and rebuild a stream around it.

Only the header part of the stream (SOI up to SOS) is walked; scan data is never parsed.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterator

SOI = b"\xff\xd8"
MARKER_PREFIX = 0xFF
APP1 = 0xE1
SOS = 0xDA
EOI = 0xD9
MAX_SEGMENT_LENGTH = 0xFFFF


class SegmentError(ValueError):
    """Base error for marker-segment problems in a single file."""


class MalformedSegmentError(SegmentError):
    """A length field is invalid or points past the end of the buffer."""


class OversizedSegmentError(SegmentError):
    """A payload does not fit into a 16-bit segment length."""


@dataclass(frozen=True)
class Segment:
    marker: int
    offset: int
    payload: bytes


def iter_segments(data: bytes) -> Iterator[Segment]:
    """
    Yield header segments following SOI.
    Stops silently at a non-marker byte, at SOS/EOI, or when no full header is left.
    Raises MalformedSegmentError when a declared length is impossible.
    """
    if len(data) < 4 or data[:2] != SOI:
        return
    offset = 2
    while offset + 4 <= len(data):
        if data[offset] != MARKER_PREFIX:
            return
        marker = data[offset + 1]
        if marker == EOI:
            return
        (length,) = struct.unpack(">H", data[offset + 2 : offset + 4])
        if length < 2:
            raise MalformedSegmentError(f"Segment 0x{marker:02X} at {offset} has invalid length {length}")
        end = offset + 2 + length
        if end > len(data):
            raise MalformedSegmentError(
                f"Segment 0x{marker:02X} at {offset} declares {length} bytes, only {len(data) - offset - 2} left"
            )
        yield Segment(marker=marker, offset=offset, payload=bytes(data[offset + 4 : end]))
        if marker == SOS:
            return
        offset = end


def extract_exif(data: bytes) -> bytes | None:
    """Return the payload of the first APP1 segment (without marker and length), or None."""
    for segment in iter_segments(data):
        if segment.marker == APP1:
            return segment.payload
    return None


def reassemble(encoded: bytes, exif: bytes | None) -> bytes:
    """
    Put an APP1 segment right after SOI of a freshly encoded stream.
    The encoded stream keeps everything after its own SOI (APP0 included).
    """
    if exif is None:
        return encoded
    if encoded[:2] != SOI:
        raise MalformedSegmentError("Encoded stream does not start with SOI")
    length = len(exif) + 2
    if length > MAX_SEGMENT_LENGTH:
        raise OversizedSegmentError(
            f"APP1 payload of {len(exif)} bytes exceeds the {MAX_SEGMENT_LENGTH - 2} byte segment limit"
        )
    return b"".join((SOI, bytes((MARKER_PREFIX, APP1)), struct.pack(">H", length), exif, encoded[2:]))
