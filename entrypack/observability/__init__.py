"""Logging helpers shared by every entrypack component."""

from __future__ import annotations

from .logging import PLUGIN_NAME, configure_console_logging, get_logger, log_event

__all__ = [
    "PLUGIN_NAME",
    "configure_console_logging",
    "get_logger",
    "log_event",
]
