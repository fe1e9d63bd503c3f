"""
Logging configuration.

Every module logs through a child of the ``bounded_accumulation``
logger.  ``setup_logging`` attaches a single stderr handler, either
plain text or one JSON object per record.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

ROOT_LOGGER = "bounded_accumulation"

_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

_logging_configured = False


class JSONFormatter(logging.Formatter):
    """Formatter that outputs JSON strings."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # extra= fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure the project logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_format: Emit JSON lines instead of plain text
    """
    global _logging_configured

    if _logging_configured:
        return

    if json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    _logging_configured = True


def reset_logging() -> None:
    """Drop the installed handler so ``setup_logging`` can run again."""
    global _logging_configured

    logging.getLogger(ROOT_LOGGER).handlers = []
    _logging_configured = False


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, namespaced under the project logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
