"""Structured logging helpers and an in-memory buffer of recent log records."""

import logging
from collections import deque
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Any, Optional


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that supports structured logging with extra fields.

    Usage:
        logger = get_structured_logger(__name__)
        logger.info("Source unavailable", url="http://localhost:8085/data.json")
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        """Process log message and extract extra fields."""
        standard_kwargs = {"exc_info", "stack_info", "stacklevel", "extra"}
        extra = kwargs.pop("extra", {})

        # Move non-standard kwargs to extra
        for key in list(kwargs.keys()):
            if key not in standard_kwargs:
                extra[key] = kwargs.pop(key)

        if self.extra:
            extra = {**self.extra, **extra}

        kwargs["extra"] = extra
        return msg, kwargs


def get_structured_logger(name: str, **default_extra: Any) -> StructuredLoggerAdapter:
    """
    Get a structured logger that supports extra keyword arguments.

    Args:
        name: Logger name (usually __name__)
        **default_extra: Default extra fields to include in all logs

    Returns:
        A StructuredLoggerAdapter instance
    """
    base_logger = logging.getLogger(name)
    return StructuredLoggerAdapter(base_logger, default_extra)


# LogRecord attributes that are not user-supplied extras
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "asctime",
        "taskName",
    }
)


@dataclass
class LogEntry:
    """Represents a single log entry."""

    timestamp: float
    level: str
    level_num: int
    logger_name: str
    message: str
    extra: dict = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "level": self.level,
            "logger": self.logger_name,
            "message": self.message,
            "extra": self.extra if self.extra else None,
        }


class BufferedLogHandler(logging.Handler):
    """Keeps the most recent log records so the web status page can show them."""

    def __init__(self, level: int = logging.DEBUG, buffer_size: int = 200):
        super().__init__(level)
        self._buffer: deque[LogEntry] = deque(maxlen=buffer_size)
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            extra = {
                key: value
                for key, value in record.__dict__.items()
                if key not in _STANDARD_ATTRS
            }
            self._buffer.append(
                LogEntry(
                    timestamp=record.created,
                    level=record.levelname,
                    level_num=record.levelno,
                    logger_name=record.name,
                    message=record.getMessage(),
                    extra={key: str(value) for key, value in extra.items()},
                )
            )
        except Exception:
            self.handleError(record)

    def get_buffer(self, min_level: int = logging.DEBUG) -> list[dict[str, Any]]:
        """
        Get buffered logs filtered by minimum level.

        Args:
            min_level: Minimum log level to include

        Returns:
            List of log entries as dictionaries, oldest first
        """
        return [entry.to_dict() for entry in self._buffer if entry.level_num >= min_level]


# Global handler instance
_log_handler: Optional[BufferedLogHandler] = None


def get_log_handler() -> BufferedLogHandler:
    """Get or create the global buffered log handler."""
    global _log_handler
    if _log_handler is None:
        _log_handler = BufferedLogHandler(level=logging.DEBUG)
    return _log_handler
