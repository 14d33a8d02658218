"""Centralized logging configuration."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from trip_planner.core.config import settings

GATEWAY_LOGGER_NAME = "trip_planner.gateway"


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter for production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_data["exception"] = self.formatException(record.exc_info)
        for key in ("attempt", "error_kind", "wait_seconds"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)
        return json.dumps(log_data, ensure_ascii=False)


def setup_logging(level_name: str | None = None, json_output: bool | None = None) -> None:
    """Configure root logging for the gateway and its run scripts.

    Level and format default to LOG_LEVEL and LOG_JSON from settings.
    """
    level_name = level_name or settings.log_level
    json_output = settings.log_json if json_output is None else json_output
    level = getattr(logging, level_name.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root.addHandler(handler)

    # Request lines are already covered by gateway retry logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_gateway_logger() -> logging.Logger:
    """Logger used by the gateway when no logger is configured explicitly."""
    return logging.getLogger(GATEWAY_LOGGER_NAME)
