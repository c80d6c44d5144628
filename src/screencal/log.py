"""Structured logging setup for screencal.

Provides a consistent log format across the application with ISO 8601
timestamps and pipe-separated fields.
"""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Marks handlers added by setup_logging so repeated calls are idempotent
# without touching handlers added externally.
_HANDLER_ATTR = "_screencal_log_handler"

# Third-party loggers that are chatty at INFO/DEBUG.
_QUIET_LOGGERS = ("urllib3", "googleapiclient.discovery_cache", "PIL")


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with the screencal formatter.

    Sets the root logger level, attaches a :class:`logging.StreamHandler`
    on *stderr*, and holds noisy third-party loggers at ``WARNING`` so
    HTTP connection chatter does not drown pipeline messages.

    Args:
        level: A standard logging level name (e.g. ``"DEBUG"``).

    Raises:
        ValueError: If *level* is not a recognised logging level string.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    root = logging.getLogger()
    root.setLevel(numeric_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    for handler in root.handlers:
        if getattr(handler, _HANDLER_ATTR, False):
            handler.setLevel(numeric_level)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return a named logger.

    Args:
        name: Dotted logger name, typically ``__name__`` of the caller.
    """
    return logging.getLogger(name)
