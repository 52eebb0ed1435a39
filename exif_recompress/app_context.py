"""
Application bootstrap helpers.

Responsibilities:
- Locate/load configuration.
- Configure logging.
- Build the recompress service from the loaded configuration.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path

from exif_recompress.config.loader import RecompressConfig, load_config
from exif_recompress.logging.setup import setup_logging
from exif_recompress.services.recompress_service import RecompressService

ENV_CONFIG_PATH = "EXIF_RECOMPRESS_CONFIG"
CONFIG_FILENAME = "config.json"


@dataclass
class AppContext:
    """Everything a run needs, built once at startup."""

    config: RecompressConfig
    config_path: Path
    service: RecompressService


def default_config_path(base_dir: Path | None = None) -> Path:
    """Return config.json in base_dir (or CWD), honoring the env override."""
    override = os.getenv(ENV_CONFIG_PATH)
    if override:
        return Path(override)
    return (base_dir or Path.cwd()) / CONFIG_FILENAME


def initialize_app(
    config_path: Path | None = None,
    quality: int | None = None,
    workers: int | None = None,
) -> AppContext:
    """
    Load configuration, apply command-line overrides, set up logging, and return an AppContext.
    Configuration errors propagate to the caller.
    """
    config_path = config_path or default_config_path()
    config = load_config(config_path)

    overrides: dict[str, int] = {}
    if quality is not None:
        overrides["quality"] = quality
    if workers is not None:
        overrides["workers"] = workers
    if overrides:
        config = dataclasses.replace(config, **overrides)

    setup_logging(log_dir=config.log_dir, level=config.log_level)
    return AppContext(config=config, config_path=config_path, service=RecompressService(config))
