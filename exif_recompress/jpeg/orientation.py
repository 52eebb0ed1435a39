"""
Pixel-buffer transforms for EXIF orientation codes.

Buffers are numpy arrays shaped (height, width) or (height, width, channels).
Every primitive builds a new array; inputs are never modified.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

Transform = Callable[[np.ndarray], np.ndarray]


def _blank(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    return np.empty((height, width) + pixels.shape[2:], dtype=pixels.dtype)


def rotate90(pixels: np.ndarray) -> np.ndarray:
    """Rotate clockwise: (x, y) -> (H-1-y, x)."""
    h, w = pixels.shape[:2]
    out = _blank(pixels, width=h, height=w)
    ys, xs = np.indices((h, w))
    out[xs, h - 1 - ys] = pixels
    return out


def rotate180(pixels: np.ndarray) -> np.ndarray:
    h, w = pixels.shape[:2]
    out = _blank(pixels, width=w, height=h)
    ys, xs = np.indices((h, w))
    out[h - 1 - ys, w - 1 - xs] = pixels
    return out


def rotate270(pixels: np.ndarray) -> np.ndarray:
    """Rotate 270 clockwise (90 counter-clockwise): (x, y) -> (y, W-1-x)."""
    h, w = pixels.shape[:2]
    out = _blank(pixels, width=h, height=w)
    ys, xs = np.indices((h, w))
    out[w - 1 - xs, ys] = pixels
    return out


def flip_horizontal(pixels: np.ndarray) -> np.ndarray:
    h, w = pixels.shape[:2]
    out = _blank(pixels, width=w, height=h)
    ys, xs = np.indices((h, w))
    out[ys, w - 1 - xs] = pixels
    return out


def flip_vertical(pixels: np.ndarray) -> np.ndarray:
    h, w = pixels.shape[:2]
    out = _blank(pixels, width=w, height=h)
    ys, xs = np.indices((h, w))
    out[h - 1 - ys, xs] = pixels
    return out


def _transpose(pixels: np.ndarray) -> np.ndarray:
    return flip_horizontal(rotate90(pixels))


def _transverse(pixels: np.ndarray) -> np.ndarray:
    return flip_horizontal(rotate270(pixels))


ORIENTATION_TRANSFORMS: dict[int, Transform] = {
    2: flip_horizontal,
    3: rotate180,
    4: flip_vertical,
    5: _transpose,
    6: rotate90,
    7: _transverse,
    8: rotate270,
}

_INVERSE = {1: 1, 2: 2, 3: 3, 4: 4, 5: 5, 6: 8, 7: 7, 8: 6}


def fix_orientation(pixels: np.ndarray, orientation: int | None) -> np.ndarray:
    """Return upright pixels for an EXIF orientation code; 1 and unknown codes return the input as-is."""
    transform = ORIENTATION_TRANSFORMS.get(orientation)  # type: ignore[arg-type]
    if transform is None:
        return pixels
    return transform(pixels)


def inverse_orientation(orientation: int) -> int:
    """Code whose transform undoes the transform of `orientation` (unknown codes map to 1)."""
    return _INVERSE.get(orientation, 1)
