"""
Unified logging for tablecore.

Usage:
    from tablecore.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Imported table %s (%d rows)", table, len(rows))
    logger.debug("Skipping hidden column %s", field)
"""

import logging
import sys
from typing import Optional, Union

from tablecore.config import get_settings

ROOT_LOGGER_NAME = "tablecore"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_root_configured = False


def _resolve_level(level: Union[int, str, None]) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str) and level.strip():
        resolved = logging.getLevelName(level.strip().upper())
        if isinstance(resolved, int):
            return resolved
    return logging.INFO


def _configure_root_logger() -> None:
    """Attach a single stdout handler to the package logger, once."""
    global _root_configured
    if _root_configured:
        return

    level = _resolve_level(get_settings().LOG_LEVEL)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    root_logger.propagate = False

    _root_configured = True


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Return a logger under the ``tablecore`` hierarchy.

    Args:
        name: usually the calling module's ``__name__``
        level: optional explicit level for this logger only
    """
    _configure_root_logger()
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_level(level: Union[int, str], logger_name: Optional[str] = None) -> None:
    """
    Change the level of one logger, or of the whole package when
    ``logger_name`` is omitted.

    Example:
        set_level(logging.DEBUG)                          # everything
        set_level("DEBUG", "tablecore.sheets.importer")   # importer only
    """
    _configure_root_logger()
    logging.getLogger(logger_name or ROOT_LOGGER_NAME).setLevel(_resolve_level(level))
