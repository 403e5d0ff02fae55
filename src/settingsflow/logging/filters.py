"""Logging filters for context injection.

This module provides filters that inject context variables into log records,
so that every line written while a settings key is being resolved can be
correlated with that key.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from settingsflow.__version__ import __version__

resolution_key_var: ContextVar[Optional[str]] = ContextVar("resolution_key", default=None)


class ContextFilter(logging.Filter):
    """Logging filter that adds context variables to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        setattr(record, "resolution_key", resolution_key_var.get())
        setattr(record, "library_name", "settingsflow")
        setattr(record, "library_version", __version__)

        return True


@contextmanager
def resolution_scope(key: str) -> Iterator[None]:
    """Mark log records emitted inside the block with the key being resolved."""
    token = resolution_key_var.set(key)
    try:
        yield
    finally:
        resolution_key_var.reset(token)
