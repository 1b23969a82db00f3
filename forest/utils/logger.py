"""
Logging setup for Forest.

All modules import ``logger`` from here. Output goes to STDERR so reports
printed to STDOUT stay clean when piped.

Levels:
- WARNING by default (unreadable files, missing grammar)
- INFO with ``--verbose`` (run summary, fallback counts)
- DEBUG with ``FOREST_DEBUG=true`` (per-file backend decisions)
"""

import os
import sys

from loguru import logger as loguru_logger

_LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return os.environ.get("FOREST_DEBUG", "").lower() == "true"


def configure_logging(verbose: bool = False, debug: bool | None = None) -> None:
    """Replace the default loguru sink with a single STDERR sink.

    Args:
        verbose: Log at INFO instead of WARNING.
        debug: Force DEBUG. Defaults to the FOREST_DEBUG environment variable.
    """
    if debug is None:
        debug = is_debug_enabled()

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    else:
        level = "WARNING"

    loguru_logger.remove()
    loguru_logger.add(sys.stderr, level=level, format=_LOG_FORMAT, colorize=None)


# Export loguru logger for direct use
logger = loguru_logger
