# src/lincheck/core/__init__.py
"""Core infrastructure: logging and configuration."""

from lincheck.core.config import (
    CheckSettings,
    HistorySettings,
    LincheckSettings,
    LoggingSettings,
    load_settings,
)
from lincheck.core.logging import bind_history, configure_logging, get_logger

__all__ = [
    "CheckSettings",
    "HistorySettings",
    "LincheckSettings",
    "LoggingSettings",
    "bind_history",
    "configure_logging",
    "get_logger",
    "load_settings",
]
