"""Centralized logging configuration with JSON-formatted extras."""

import json
import logging
import sys

from app.config import settings


class JSONExtrasFormatter(logging.Formatter):
    """Formatter that outputs a readable log line with extras as JSON.

    Output format:
        2024-01-15 10:30:45 | INFO | app.module | Release stage finished {"release_id": "c..."}
    """

    RESERVED_ATTRS = frozenset(
        {
            "args",
            "asctime",
            "created",
            "exc_info",
            "exc_text",
            "filename",
            "funcName",
            "levelname",
            "levelno",
            "lineno",
            "message",
            "module",
            "msecs",
            "msg",
            "name",
            "pathname",
            "process",
            "processName",
            "relativeCreated",
            "stack_info",
            "taskName",
            "thread",
            "threadName",
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        timestamp = self.formatTime(record, self.datefmt)
        line = f"{timestamp} | {record.levelname:<8} | {record.name} | {record.message}"

        extras = self.collect_extras(record)
        if extras:
            try:
                line = f"{line} {json.dumps(extras, default=str, ensure_ascii=False)}"
            except (TypeError, ValueError):
                pass

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line = f"{line}\n{record.exc_text}"

        return line

    @classmethod
    def collect_extras(cls, record: logging.LogRecord) -> dict[str, object]:
        """Return the `extra={...}` fields attached to a record."""
        return {
            key: value
            for key, value in record.__dict__.items()
            if key not in cls.RESERVED_ATTRS and not key.startswith("_")
        }


def _resolve_level(level_name: str) -> int:
    resolved = logging.getLevelName(level_name.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level_name: str | None = None) -> None:
    """Configure the root 'app' logger with console output and JSON extras."""
    logger = logging.getLogger("app")
    level = _resolve_level(level_name or settings.log_level)
    logger.setLevel(level)

    # Avoid adding duplicate handlers if called multiple times
    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONExtrasFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    # Prevent propagation to root logger (avoid duplicate output)
    logger.propagate = False
