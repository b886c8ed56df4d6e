"""Centralised logging helpers for the dependency packer."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

PLUGIN_NAME = "DependencyPackerPlugin"

_LOGGER_CACHE: Dict[str, logging.Logger] = {}


def get_logger(name: str = "entrypack") -> logging.Logger:
    """Return a cached :class:`logging.Logger` instance."""

    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = logging.getLogger(name)
    return _LOGGER_CACHE[name]


def log_event(
    logger: Optional[logging.Logger],
    level: int,
    event: str,
    message: str,
    **data: Any,
) -> None:
    """Emit a prefixed diagnostic line carrying a structured payload.

    The payload is attached as ``entrypack_event`` / ``entrypack_data`` on the
    log record so handlers (and tests) can match on the event name instead of
    the human readable text.
    """

    target_logger = logger or get_logger()
    target_logger.log(
        level,
        f"[{PLUGIN_NAME}] » {message}",
        extra={"entrypack_event": event, "entrypack_data": data},
    )


def configure_console_logging(level_name: Optional[str] = None) -> logging.Logger:
    """Attach a console handler to the package logger."""

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }
    numeric_level = level_map.get((level_name or "info").lower(), logging.INFO)

    logger = get_logger()
    logger.setLevel(numeric_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        logger.addHandler(handler)
    return logger
