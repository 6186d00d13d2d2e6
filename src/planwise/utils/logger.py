"""Application-wide logger writing to platformdirs user_log_dir.

Engine modules ask for a child logger (``get_logger("backlog")`` logs as
``planwise.backlog``); all children share the rotating file handler that is
attached to the root ``planwise`` logger on first use.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "planwise"
_LOG_FILE = "planwise.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

_logger: logging.Logger | None = None


def _build_file_handler() -> logging.Handler:
    log_dir = Path(user_log_dir(_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_dir / _LOG_FILE,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the application logger, or one of its children.

    Args:
        name: Optional child name, e.g. "lifecycle"

    Returns:
        The ``planwise`` logger, or ``planwise.<name>`` when a name is given
    """
    global _logger
    if _logger is None:
        logger = logging.getLogger(_APP_NAME)
        logger.setLevel(logging.DEBUG)
        if not logger.handlers:
            logger.addHandler(_build_file_handler())
        logger.propagate = False
        _logger = logger

    if name:
        return _logger.getChild(name)
    return _logger


def set_level(level: str | int) -> None:
    """Change the application log level (e.g. "INFO", logging.WARNING)."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    get_logger().setLevel(level)
