from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from exif_recompress.jpeg.segments import extract_exif, iter_segments
from exif_recompress.logging.setup import LOG_FILENAME, setup_logging
from exif_recompress.utils.imaging import decode_jpeg, encode_jpeg
from exif_recompress.utils.paths import iter_jpegs, output_path_for


def _make_image_bytes(size: tuple[int, int], mode: str = "RGB", orientation: int | None = None) -> bytes:
    image = Image.new(mode, size)
    exif = Image.Exif()
    if orientation is not None:
        exif[274] = orientation
    buffer = BytesIO()
    image.save(buffer, format="JPEG", exif=exif.tobytes())
    return buffer.getvalue()


def test_decode_does_not_apply_exif_orientation() -> None:
    pixels = decode_jpeg(_make_image_bytes((10, 20), orientation=6))
    assert pixels.shape == (20, 10, 3)
    assert pixels.dtype == np.uint8


def test_decode_keeps_greyscale_and_converts_cmyk() -> None:
    assert decode_jpeg(_make_image_bytes((6, 4), mode="L")).shape == (4, 6)
    assert decode_jpeg(_make_image_bytes((6, 4), mode="CMYK")).shape == (4, 6, 3)


def test_decode_rejects_non_jpeg() -> None:
    with pytest.raises(OSError):
        decode_jpeg(b"not an image at all")


def test_encode_produces_baseline_jpeg_without_exif() -> None:
    pixels = np.zeros((9, 7, 3), dtype=np.uint8)

    encoded = encode_jpeg(pixels, quality=50)

    markers = [segment.marker for segment in iter_segments(encoded)]
    assert encoded[:2] == b"\xff\xd8"
    assert extract_exif(encoded) is None
    assert 0xC0 in markers  # SOF0, baseline
    assert 0xC2 not in markers
    with Image.open(BytesIO(encoded)) as image:
        assert image.size == (7, 9)


def test_encode_quality_changes_size() -> None:
    rng = np.random.default_rng(3)
    pixels = rng.integers(0, 256, (48, 48, 3), dtype=np.uint8)
    assert len(encode_jpeg(pixels, quality=20)) < len(encode_jpeg(pixels, quality=95))


def test_iter_jpegs_filters_by_suffix_case_insensitively(tmp_path: Path) -> None:
    for rel in ("a.jpg", "b.JPEG", "c.png", "d.jpg.txt", "sub/e.Jpg", "sub/.JPEG"):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x")
    (tmp_path / "folder.jpg").mkdir()

    found = [p.relative_to(tmp_path).as_posix() for p in iter_jpegs(tmp_path)]

    assert found == ["a.jpg", "b.JPEG", "sub/.JPEG", "sub/e.Jpg"]


def test_output_path_for_layouts(tmp_path: Path) -> None:
    source = tmp_path / "in" / "2024" / "trip" / "img.jpg"
    assert output_path_for(source, tmp_path / "in", tmp_path / "out", "mirror") == (
        tmp_path / "out" / "2024" / "trip" / "img.jpg"
    )
    assert output_path_for(source, tmp_path / "in", tmp_path / "out", "flat") == tmp_path / "out" / "img.jpg"


def test_setup_logging_writes_rotating_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        setup_logging(log_dir=tmp_path / "logs", level="debug")
        logging.getLogger("exif_recompress.test").debug("hello log file")
        for handler in root.handlers:
            handler.flush()
        assert "hello log file" in (tmp_path / "logs" / LOG_FILENAME).read_text(encoding="utf-8")
        assert root.level == logging.DEBUG
    finally:
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)
