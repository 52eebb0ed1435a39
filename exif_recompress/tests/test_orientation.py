from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from exif_recompress.jpeg.orientation import (
    fix_orientation,
    flip_horizontal,
    flip_vertical,
    inverse_orientation,
    rotate90,
    rotate180,
    rotate270,
)

# Pillow's exif_transpose table, used as the reference for every code.
PILLOW_METHODS = {
    2: Image.Transpose.FLIP_LEFT_RIGHT,
    3: Image.Transpose.ROTATE_180,
    4: Image.Transpose.FLIP_TOP_BOTTOM,
    5: Image.Transpose.TRANSPOSE,
    6: Image.Transpose.ROTATE_270,
    7: Image.Transpose.TRANSVERSE,
    8: Image.Transpose.ROTATE_90,
}


def _sample(height: int = 3, width: int = 5, channels: int | None = 3) -> np.ndarray:
    shape = (height, width) if channels is None else (height, width, channels)
    return (np.arange(np.prod(shape)) % 251).astype(np.uint8).reshape(shape)


def test_rotate90_maps_pixels_clockwise() -> None:
    src = _sample(channels=None)  # H=3, W=5
    out = rotate90(src)

    assert out.shape == (5, 3)
    for y in range(3):
        for x in range(5):
            assert out[x, 3 - 1 - y] == src[y, x]


def test_rotate270_maps_pixels_counter_clockwise() -> None:
    src = _sample(channels=None)
    out = rotate270(src)

    assert out.shape == (5, 3)
    for y in range(3):
        for x in range(5):
            assert out[5 - 1 - x, y] == src[y, x]


def test_same_size_primitives() -> None:
    src = _sample()
    assert np.array_equal(rotate180(src), src[::-1, ::-1])
    assert np.array_equal(flip_horizontal(src), src[:, ::-1])
    assert np.array_equal(flip_vertical(src), src[::-1, :])


@pytest.mark.parametrize("code", sorted(PILLOW_METHODS))
def test_fix_orientation_matches_pillow_reference(code: int) -> None:
    src = _sample(4, 7)
    expected = np.array(Image.fromarray(src).transpose(PILLOW_METHODS[code]))

    out = fix_orientation(src, code)

    assert out.shape == expected.shape
    assert np.array_equal(out, expected)


@pytest.mark.parametrize(
    ("code", "size"),
    [(1, (3, 5)), (2, (3, 5)), (3, (3, 5)), (4, (3, 5)), (5, (5, 3)), (6, (5, 3)), (7, (5, 3)), (8, (5, 3))],
)
def test_fix_orientation_output_dimensions(code: int, size: tuple[int, int]) -> None:
    assert fix_orientation(_sample(), code).shape[:2] == size


@pytest.mark.parametrize("code", range(1, 9))
def test_fix_orientation_inverse_restores_original(code: int) -> None:
    src = _sample(4, 6)
    oriented = fix_orientation(src, code)
    restored = fix_orientation(oriented, inverse_orientation(code))
    assert np.array_equal(restored, src)


def test_inverse_pairs() -> None:
    assert [inverse_orientation(code) for code in range(1, 9)] == [1, 2, 3, 4, 5, 8, 7, 6]


@pytest.mark.parametrize("code", [1, 0, 9, 255, -1, None])
def test_identity_and_unknown_codes_return_input(code) -> None:
    src = _sample()
    assert fix_orientation(src, code) is src


@pytest.mark.parametrize("code", range(2, 9))
def test_transforms_never_mutate_input(code: int) -> None:
    src = _sample()
    before = src.copy()

    out = fix_orientation(src, code)

    assert np.array_equal(src, before)
    assert not np.shares_memory(out, src)


def test_greyscale_buffers_are_supported() -> None:
    src = _sample(channels=None)
    out = fix_orientation(src, 6)
    assert out.ndim == 2
    assert out.dtype == src.dtype
