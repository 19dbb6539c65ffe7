"""Logging setup shared by the CLI and the pipeline runner."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Decoder libraries are chatty at DEBUG/INFO
_QUIET_LOGGERS = ("laspy", "plyfile", "pye57")


def setup_logging(level: str | int = "INFO") -> None:
    """Send scanplan logs to stdout in the pipeline format.

    Args:
        level: Level name ("DEBUG", "info", ...) or a logging constant.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT, stream=sys.stdout)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
