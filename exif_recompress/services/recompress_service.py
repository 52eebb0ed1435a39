"""
Batch recompression service.

For each JPEG under the input directory:
- keep the original APP1 (EXIF) segment,
- bake the EXIF orientation into the pixels (and mark the preserved EXIF as upright),
- re-encode at the configured quality and write below the output directory.

Per-file failures are logged and recorded; they never stop the batch.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Sequence

from exif_recompress.config.loader import RecompressConfig
from exif_recompress.jpeg.exif import legacy_orientation, read_orientation, reset_orientation
from exif_recompress.jpeg.orientation import fix_orientation
from exif_recompress.jpeg.segments import extract_exif, reassemble
from exif_recompress.utils.imaging import decode_jpeg, encode_jpeg
from exif_recompress.utils.paths import OutputCollisionError, iter_jpegs, output_path_for

LOGGER = logging.getLogger(__name__)

PART_SUFFIX = ".part"


@dataclass
class FileResult:
    source: Path
    output: Path | None
    orientation: int | None = None
    exif_preserved: bool = False
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchProgress:
    processed: int
    succeeded: int
    failed: int
    total: int
    last: FileResult | None = None


@dataclass
class BatchReport:
    total: int
    succeeded: int = 0
    failed: int = 0
    cancelled: bool = False
    results: list[FileResult] = field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        return [f"{r.source}: {r.error}" for r in self.results if r.error is not None]


@dataclass
class _Job:
    source: Path
    output: Path | None
    error: Exception | None = None


class RecompressService:
    """Recompress every JPEG below config.input_dir into config.output_dir."""

    def __init__(self, config: RecompressConfig) -> None:
        self.config = config

    def run(
        self,
        progress_cb: Callable[[BatchProgress], None] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchReport:
        cfg = self.config
        if not cfg.input_dir.is_dir():
            raise NotADirectoryError(f"Input directory does not exist: {cfg.input_dir}")
        cfg.output_dir.mkdir(parents=True, exist_ok=True)

        jobs = self._plan(list(iter_jpegs(cfg.input_dir)))
        report = BatchReport(total=len(jobs))
        LOGGER.info(
            "Recompress started: %d files from %s to %s (quality=%d, workers=%d, layout=%s)",
            len(jobs),
            cfg.input_dir,
            cfg.output_dir,
            cfg.quality,
            cfg.workers,
            cfg.output_layout,
        )

        for result in self._process_jobs(jobs, cancel_event=cancel_event):
            report.results.append(result)
            if result.error is None:
                report.succeeded += 1
                LOGGER.info("Recompressed %s -> %s", result.source, result.output)
            else:
                report.failed += 1
                LOGGER.error("Failed to recompress %s: %s", result.source, result.error, exc_info=result.error)
            if progress_cb is not None:
                progress_cb(
                    BatchProgress(
                        processed=len(report.results),
                        succeeded=report.succeeded,
                        failed=report.failed,
                        total=report.total,
                        last=result,
                    )
                )
        if cancel_event is not None and cancel_event.is_set() and len(report.results) < report.total:
            report.cancelled = True
            LOGGER.warning(
                "Recompress cancelled: %d of %d files not processed", report.total - len(report.results), report.total
            )

        LOGGER.info(
            "Recompress finished: succeeded=%d failed=%d total=%d%s",
            report.succeeded,
            report.failed,
            report.total,
            " (cancelled)" if report.cancelled else "",
        )
        return report

    def _plan(self, sources: Sequence[Path]) -> list[_Job]:
        """Assign output paths up front so workers never compete for a name."""
        cfg = self.config
        claimed: dict[Path, Path] = {}
        jobs: list[_Job] = []
        for source in sources:
            output = output_path_for(source, cfg.input_dir, cfg.output_dir, cfg.output_layout)
            previous = claimed.get(output)
            if previous is not None:
                jobs.append(
                    _Job(
                        source=source,
                        output=None,
                        error=OutputCollisionError(f"{output} already produced from {previous}"),
                    )
                )
                continue
            claimed[output] = source
            jobs.append(_Job(source=source, output=output))
        return jobs

    def _process_jobs(self, jobs: Sequence[_Job], cancel_event: threading.Event | None = None) -> Iterable[FileResult]:
        if self.config.workers <= 1:
            for job in jobs:
                result = self._process_single_job(job, cancel_event)
                if result is None:
                    break
                yield result
            return
        # Jobs started before cancellation still yield their result; later ones return None.
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            for result in executor.map(lambda job: self._process_single_job(job, cancel_event), jobs):
                if result is not None:
                    yield result

    def _process_single_job(self, job: _Job, cancel_event: threading.Event | None = None) -> FileResult | None:
        if cancel_event is not None and cancel_event.is_set():
            return None
        if job.error is not None or job.output is None:
            return FileResult(source=job.source, output=None, error=job.error)
        try:
            orientation, exif = self._recompress(job.source, job.output)
        except Exception as exc:
            return FileResult(source=job.source, output=None, error=exc)
        return FileResult(source=job.source, output=job.output, orientation=orientation, exif_preserved=exif)

    def _recompress(self, source: Path, output: Path) -> tuple[int, bool]:
        raw_bytes = source.read_bytes()
        exif = extract_exif(raw_bytes)
        pixels = decode_jpeg(raw_bytes)

        orientation = self._orientation_for(exif)
        pixels = fix_orientation(pixels, orientation)
        if exif is not None and self._should_reset_tag(orientation):
            exif = reset_orientation(exif)

        encoded = encode_jpeg(pixels, quality=self.config.quality)
        self._write_output(output, reassemble(encoded, exif))
        return orientation, exif is not None

    def _orientation_for(self, exif: bytes | None) -> int:
        if self.config.orientation_source == "legacy":
            return legacy_orientation(exif)
        value = read_orientation(exif)
        return value if value is not None else 1

    def _should_reset_tag(self, orientation: int) -> bool:
        # Legacy runs keep the EXIF block byte-for-byte.
        cfg = self.config
        return cfg.reset_orientation_tag and cfg.orientation_source == "exif" and orientation != 1

    def _write_output(self, output: Path, data: bytes) -> None:
        """Write through a temporary sibling so a failed write leaves no partial file."""
        output.parent.mkdir(parents=True, exist_ok=True)
        tmp = output.with_name(output.name + PART_SUFFIX)
        try:
            tmp.write_bytes(data)
            tmp.replace(output)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
