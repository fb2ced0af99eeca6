"""Per-object attributable logging: every line names the object it is about."""

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional

from .logging_config import setup_logger


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LogContext:
    """
    Identifies the unit of work a log line belongs to.

    A context is created per source object and narrowed per operation
    (``filter``, ``derive_size``); children share the correlation id.
    """

    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    operation: str = ""
    component: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_operation(self, operation: str) -> "LogContext":
        return replace(self, operation=operation, metadata=dict(self.metadata))

    def with_metadata(self, **kwargs: Any) -> "LogContext":
        return replace(self, metadata={**self.metadata, **kwargs})

    @classmethod
    def for_object(cls, bucket: str, key: str, component: str) -> "LogContext":
        """Context carrying the bucket and key of the object being processed."""
        return cls(component=component, metadata={"bucket": bucket, "key": key})

    @property
    def prefix(self) -> str:
        if self.operation:
            return f"[{self.operation}] [{self.correlation_id}]"
        return f"[{self.correlation_id}]"


def _render_fields(fields: Dict[str, Any]) -> str:
    return ", ".join(f"{name}={value}" for name, value in fields.items())


class StructuredLogger:
    """
    Renders ``message`` with its context prefix and ``key=value`` fields.

    Implements ``LoggerProtocol``; ``FakeLogger`` is the in-memory
    counterpart used by tests.
    """

    def __init__(self, name: str, level: Optional[int] = None):
        self._logger = setup_logger(name)
        if level is not None:
            self._logger.setLevel(level)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def format(
        self, message: str, context: Optional[LogContext] = None, **kwargs: Any
    ) -> str:
        fields = {**context.metadata, **kwargs} if context else kwargs
        if context:
            message = f"{context.prefix} {message}"
        if fields:
            message = f"{message} ({_render_fields(fields)})"
        return message

    def _log(
        self,
        level: LogLevel,
        message: str,
        context: Optional[LogContext] = None,
        **kwargs: Any,
    ) -> None:
        emit = getattr(self._logger, level.value.lower())
        emit(self.format(message, context, **kwargs))

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(LogLevel.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(LogLevel.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(LogLevel.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(LogLevel.ERROR, message, context, **kwargs)

    def critical(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(LogLevel.CRITICAL, message, context, **kwargs)
