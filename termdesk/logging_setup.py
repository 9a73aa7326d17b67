"""Loguru sink configuration."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}"


def configure_logging(level: str = "INFO", log_file: str = "", rotation: str = "5 MB") -> None:
    """Replace default loguru sinks with stderr (+ optional rotating file)."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=_FORMAT)
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(path, level="DEBUG", rotation=rotation, encoding="utf-8")
