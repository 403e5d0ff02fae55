"""Logging infrastructure for settingsflow.

This module provides structured logging with JSON output and context
tracking. The library never installs handlers on import; applications opt in
through ``setup_logging``.
"""

from settingsflow.logging.filters import ContextFilter, resolution_scope
from settingsflow.logging.logger import CustomJsonFormatter, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
    "resolution_scope",
]
