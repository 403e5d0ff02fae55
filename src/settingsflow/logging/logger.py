"""Structured logging for settingsflow.

Library modules only call ``get_logger``; nothing is configured on import.
Applications (and the ``settingsflow`` command) opt into JSON lines on
stderr with ``setup_logging``, which keeps stdout free for command output.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet

from opentelemetry import trace

LIBRARY_LOGGER = "settingsflow"

# Attributes every LogRecord carries; anything else arrived through ``extra``
# or a filter and is written as a field of its own.
_STANDARD_ATTRIBUTES: FrozenSet[str] = frozenset(
    logging.LogRecord(LIBRARY_LOGGER, logging.INFO, __file__, 0, "", (), None).__dict__
) | {"asctime", "message"}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class CustomJsonFormatter(logging.Formatter):
    """Render a record as one JSON object per line.

    Fields are ``timestamp``, ``level``, ``logger`` and ``message``, then any
    context attached to the record (``resolution_key``, ``error_code``, ...),
    then ``trace_id``/``span_id`` when an OpenTelemetry span is active.
    Context attributes that are ``None`` are left out.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        entry.update(
            (name, value)
            for name, value in vars(record).items()
            if name not in _STANDARD_ATTRIBUTES and value is not None
        )

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            entry["trace_id"] = trace.format_trace_id(span_context.trace_id)
            entry["span_id"] = trace.format_span_id(span_context.span_id)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Send the ``settingsflow`` loggers to stderr as JSON lines.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    level = level.upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": CustomJsonFormatter},
        },
        "filters": {
            "resolution_context": {"()": "settingsflow.logging.filters.ContextFilter"},
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json",
                "filters": ["resolution_context"],
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            LIBRARY_LOGGER: {
                "level": level,
                "handlers": ["stderr"],
                "propagate": False,
            }
        },
    })
