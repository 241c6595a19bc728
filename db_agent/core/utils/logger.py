"""Logging setup for the db-agent CLI.

Every record handled by the root handler carries the run identifier set by
``set_correlation_id``. The JSON formatter also copies the agent-specific
``extra=`` keys listed in ``RUN_FIELDS`` (generation attempt, JSON recovery
strategy, project command) so a single run can be followed across modules.
"""
from __future__ import annotations

import contextvars
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

DEFAULT_LOGGER_NAME = "db_agent"
RUN_FIELDS = ("attempt", "strategy", "command")
TEXT_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | run=%(run_id)s | %(message)s"

_RUN_ID = contextvars.ContextVar("db_agent_run_id", default="-")


class RunIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _RUN_ID.get()
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, with run fields when the call site supplied them."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", "-"),
        }
        for field_name in RUN_FIELDS:
            if hasattr(record, field_name):
                payload[field_name] = getattr(record, field_name)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", *, structured: bool = False) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.addFilter(RunIdFilter())
    handler.setFormatter(StructuredFormatter() if structured else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)


def set_correlation_id(value: Optional[str]) -> None:
    """Tag subsequent records with ``value``; ``None`` resets to ``-``."""
    _RUN_ID.set(value or "-")


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or DEFAULT_LOGGER_NAME)


__all__ = [
    "RUN_FIELDS",
    "RunIdFilter",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "set_correlation_id",
]
