"""Logging setup for command-line execution."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from .redaction import sanitize_text

LOGGER_NAME = "weather_cli"
LOG_FILE_NAME = "weather-cli.log"
LOG_FILE_MAX_BYTES = 1_000_000
LOG_FILE_BACKUPS = 10


class JsonConsoleFormatter(logging.Formatter):
    """Simple JSON formatter for structured console logs."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


def setup_logger(
    name: str = LOGGER_NAME,
    level: int = logging.WARNING,
    log_dir: Path | None = None,
) -> logging.Logger:
    """Create and configure a process-wide logger.

    Console output goes to stderr at ``level``. When ``log_dir`` is given, a
    rotating file log also records everything from DEBUG up.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_dir is not None else level)
    logger.propagate = False
    if logger.handlers:
        for handler in logger.handlers:
            if not isinstance(handler, RotatingFileHandler):
                handler.setLevel(level)
        return logger

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(JsonConsoleFormatter())
    logger.addHandler(console)

    if log_dir is not None:
        file_handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonConsoleFormatter())
        logger.addHandler(file_handler)
    return logger
