"""
Command-line entry point.

Loads config.json, recompresses the input tree, and prints one line per file plus a summary.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from exif_recompress.app_context import AppContext, initialize_app
from exif_recompress.services.recompress_service import BatchProgress

EXIT_OK = 0
EXIT_FILE_ERRORS = 1
EXIT_CONFIG_ERROR = 2


def _bounded_int(low: int, high: int | None = None):
    def parse(text: str) -> int:
        try:
            value = int(text)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"expected an integer, got {text!r}") from exc
        if value < low or (high is not None and value > high):
            raise argparse.ArgumentTypeError(f"{value} is out of range")
        return value

    return parse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exif-recompress",
        description="Recompress JPEG files, keeping their EXIF block and fixing pixel orientation.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json (default: ./config.json)")
    parser.add_argument("--quality", type=_bounded_int(1, 100), default=None, help="Override InitialQuality")
    parser.add_argument("--workers", type=_bounded_int(1), default=None, help="Override Workers")
    parser.add_argument("--pause", action="store_true", help="Wait for Enter before exiting")
    return parser


def _print_progress(progress: BatchProgress) -> None:
    result = progress.last
    if result is None:
        return
    if result.ok:
        print(f"OK {result.output}")
    else:
        print(f"FAILED {result.source}: {result.error}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run one batch and return the process exit code."""
    args = build_parser().parse_args(argv)
    try:
        try:
            context: AppContext = initialize_app(args.config, quality=args.quality, workers=args.workers)
        except (OSError, ValueError) as exc:
            print(f"Configuration error: {exc}", file=sys.stderr)
            return EXIT_CONFIG_ERROR

        print("Recompressing with EXIF preserved...")
        try:
            report = context.service.run(progress_cb=_print_progress)
        except OSError as exc:
            print(f"Configuration error: {exc}", file=sys.stderr)
            return EXIT_CONFIG_ERROR
        print(f"Done: {report.succeeded} succeeded, {report.failed} failed, {report.total} total")
        return EXIT_OK if report.failed == 0 else EXIT_FILE_ERRORS
    finally:
        if args.pause:
            input("Press Enter to exit...")


if __name__ == "__main__":
    raise SystemExit(main())
