"""
Minimal EXIF reader: locate the Orientation tag (0x0112) in IFD0 of an APP1 payload.

No other tags are decoded. Values are read and patched in place; the payload length never changes.
"""

from __future__ import annotations

import struct

EXIF_HEADER = b"Exif\x00\x00"
TAG_ORIENTATION = 0x0112
TYPE_SHORT = 3
_ENTRY_SIZE = 12


def _orientation_value_offset(payload: bytes) -> tuple[int, str] | None:
    """Return (offset of the 16-bit value inside payload, struct byte-order char) or None."""
    if not payload.startswith(EXIF_HEADER):
        return None
    base = len(EXIF_HEADER)
    header = payload[base : base + 8]
    if len(header) < 8:
        return None
    if header[:2] == b"II":
        endian = "<"
    elif header[:2] == b"MM":
        endian = ">"
    else:
        return None
    magic, ifd0 = struct.unpack(f"{endian}HI", header[2:8])
    if magic != 42:
        return None

    ifd_start = base + ifd0
    if ifd_start + 2 > len(payload):
        return None
    (count,) = struct.unpack(f"{endian}H", payload[ifd_start : ifd_start + 2])
    for idx in range(count):
        entry = ifd_start + 2 + idx * _ENTRY_SIZE
        if entry + _ENTRY_SIZE > len(payload):
            return None
        tag, type_, _n = struct.unpack(f"{endian}HHI", payload[entry : entry + 8])
        if tag == TAG_ORIENTATION:
            if type_ != TYPE_SHORT:
                return None
            return entry + 8, endian
    return None


def read_orientation(payload: bytes | None) -> int | None:
    """Orientation code from IFD0, or None when the payload has no readable tag."""
    if not payload:
        return None
    located = _orientation_value_offset(payload)
    if located is None:
        return None
    offset, endian = located
    (value,) = struct.unpack(f"{endian}H", payload[offset : offset + 2])
    return value


def legacy_orientation(payload: bytes | None) -> int:
    """Last payload byte taken as the orientation code (approximate; kept for compatibility runs)."""
    if payload is None or len(payload) < 2:
        return 1
    return payload[-1]


def reset_orientation(payload: bytes) -> bytes:
    """Copy of payload with Orientation set to 1 (upright); unchanged when the tag is missing."""
    located = _orientation_value_offset(payload)
    if located is None:
        return payload
    offset, endian = located
    patched = bytearray(payload)
    patched[offset : offset + 2] = struct.pack(f"{endian}H", 1)
    return bytes(patched)
