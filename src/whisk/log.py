"""Logging setup for whisk.

The interactive screen owns the terminal, so records go to a rotating file
instead of stderr.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from whisk.config.models import LoggingSettings

_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
_HANDLER_NAME = "whisk-file"


def configure_logging(settings: LoggingSettings) -> Path | None:
    """Attach a rotating file handler to the ``whisk`` logger.

    Calling this again replaces the previously installed handler.

    Args:
        settings: Logging configuration.

    Returns:
        Path | None: Log file location, or ``None`` if it could not be opened.
    """
    logger = logging.getLogger("whisk")
    level = logging.getLevelName(settings.level.upper())
    logger.setLevel(level if isinstance(level, int) else logging.WARNING)
    logger.propagate = False

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
            handler.close()

    path = Path(settings.file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=max(1, settings.max_size_mb) * 1024 * 1024,
            backupCount=max(0, settings.backup_count),
            encoding="utf-8",
        )
    except OSError:
        fallback = logging.NullHandler()
        fallback.set_name(_HANDLER_NAME)
        logger.addHandler(fallback)
        return None

    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    return path


__all__ = ["configure_logging"]
