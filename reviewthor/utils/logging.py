"""Structured JSON logging for reviewthor."""

import json
import logging
import os
import traceback
from collections.abc import MutableMapping
from datetime import UTC, datetime
from typing import Any, ClassVar

ROOT_LOGGER_NAME = "reviewthor"

# Attributes every LogRecord carries; anything else on a record came from extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)))


def _json_safe(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line.

    Warnings and errors also carry their source location.
    """

    RESERVED_ATTRS: ClassVar[frozenset[str]] = _RECORD_ATTRS | {"message", "asctime"}

    def extra_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        """Collect the fields passed through ``extra=`` on a record."""
        return {
            key: _json_safe(value)
            for key, value in vars(record).items()
            if key not in self.RESERVED_ATTRS and not key.startswith("_")
        }

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted string.
        """
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            entry["exception"] = "".join(traceback.format_exception(*record.exc_info))

        entry.update(self.extra_fields(record))
        return json.dumps(entry, default=str)


class CorrelationAdapter(logging.LoggerAdapter):
    """Logger adapter that stamps every record with a correlation ID.

    Fields passed through ``extra=`` at the call site are merged with the
    bound correlation ID rather than replacing it.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        """Merge the bound context into the call's extra fields."""
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def configure_logging(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Configure structured JSON logging for the application.

    Args:
        name: The root logger name.

    Returns:
        Configured logger instance.
    """
    log_level_str = os.environ.get("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Reconfiguring must not stack handlers
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    logger.propagate = False

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Get a child logger for a specific module.

    Args:
        module_name: The module name to create a child logger for.

    Returns:
        Child logger instance.
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")


def with_correlation_id(logger: logging.Logger, correlation_id: str) -> CorrelationAdapter:
    """Bind a webhook delivery's correlation ID to a logger.

    Args:
        logger: The module logger.
        correlation_id: Opaque per-request token.

    Returns:
        Adapter that adds ``correlation_id`` to every record.
    """
    return CorrelationAdapter(logger, {"correlation_id": correlation_id})
