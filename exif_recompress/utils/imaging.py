"""
Imaging utilities: decode JPEG bytes into pixel arrays and encode them back as baseline JPEG.
"""

from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image


def decode_jpeg(raw_bytes: bytes) -> np.ndarray:
    """Decode to an RGB (or greyscale) array; EXIF orientation is not applied here."""
    with Image.open(BytesIO(raw_bytes)) as image:
        image.load()
        if image.mode not in {"RGB", "L"}:
            image = image.convert("RGB")
        return np.array(image)


def encode_jpeg(pixels: np.ndarray, quality: int) -> bytes:
    """Encode as baseline JPEG without EXIF or ICC segments."""
    image = Image.fromarray(pixels)
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=quality, progressive=False, optimize=False)
    return buffer.getvalue()
