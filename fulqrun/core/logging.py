"""Structured logging for the FulQrun qualification service."""

import logging
import sys
from typing import Any

# Promoted to top-level keys when passed as extra
CONTEXT_FIELDS = ("opportunity_id", "organization_id")

ENV_LEVELS = {
    "dev": logging.DEBUG,
    "test": logging.WARNING,
}


class StructuredFormatter(logging.Formatter):
    """Renders records as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["error"] = repr(record.exc_info[1])

        line = " ".join(f"{k}={v}" for k, v in log_data.items())
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _level_for_env() -> int:
    try:
        from fulqrun.core.config import get_settings

        return ENV_LEVELS.get(get_settings().FULQRUN_ENV, logging.INFO)
    except Exception:
        # Settings need Supabase credentials; fall back before they exist
        return logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger writing structured lines to stdout.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(_level_for_env())

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with additional context fields.

    ``opportunity_id`` and ``organization_id`` become top-level fields;
    anything else is appended after the message.
    """
    extra: dict[str, Any] = {field: kwargs.pop(field) for field in CONTEXT_FIELDS if field in kwargs}
    extra["extra_data"] = kwargs
    logger.log(level, msg, extra=extra)
