"""Structured console logging for the CLI and the corridor service."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

# Optional `extra=` keys copied into the JSON event when a caller supplies them.
CONTEXT_FIELDS = ("provider", "station_id", "cache", "cache_key")


class JsonConsoleFormatter(logging.Formatter):
    """One JSON object per line; provider fan-out threads are identified by name."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = value
        if record.exc_info:
            event["exception"] = self.formatException(record.exc_info)
        return json.dumps(event, default=str, ensure_ascii=False)


def setup_logger(name: str = "road_corridor_weather", level: int = logging.INFO) -> logging.Logger:
    """Configure the package logger once; later calls return it unchanged."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
