"""
Structured logging for structured-chat.

Provides context-aware logging with sensitive data masking.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

_log_context: ContextVar[dict[str, Any] | None] = ContextVar("log_context", default=None)

_REDACTED = "***REDACTED***"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    def to_logging_level(self) -> int:
        """Convert to standard logging level."""
        return getattr(logging, self.value)


@dataclass
class LogContext:
    """Request-scoped logging context.

    Attributes:
        request_id: Client request identifier
        model: Model name
        schema_name: Name of the response schema, in structured mode
        extra: Additional context fields
    """

    request_id: str | None = None
    model: str | None = None
    schema_name: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.request_id:
            result["request_id"] = self.request_id
        if self.model:
            result["model"] = self.model
        if self.schema_name:
            result["schema_name"] = self.schema_name
        result.update(self.extra)
        return result


def get_log_context() -> LogContext:
    """Get current logging context."""
    data = _log_context.get()
    if not data:
        return LogContext()
    known = {k: data[k] for k in ("request_id", "model", "schema_name") if k in data}
    extra = {k: v for k, v in data.items() if k not in known}
    return LogContext(**known, extra=extra)


def set_log_context(context: LogContext) -> None:
    """Set logging context for the current async context."""
    _log_context.set(context.to_dict())


def clear_log_context() -> None:
    _log_context.set(None)


class SensitiveDataMasker:
    """Masks API keys and bearer tokens in log output."""

    DEFAULT_PATTERNS: ClassVar[list[tuple[str, str]]] = [
        (r"(sk-[a-zA-Z0-9_-]{16,})", f"sk-{_REDACTED}"),
        (r"(Bearer\s+)([^\s\"']+)", rf"\1{_REDACTED}"),
        (r"(api[_-]?key[\"']?\s*[:=]\s*[\"']?)([^\"'\s,}]+)", rf"\1{_REDACTED}"),
        (r"(Authorization[\"']?\s*[:=]\s*[\"']?)(?!Bearer)([^\"'\s,}]+)", rf"\1{_REDACTED}"),
    ]

    _SENSITIVE_KEYS = ("key", "token", "secret", "password", "authorization")

    def __init__(self, patterns: list[tuple[str, str]] | None = None) -> None:
        self._patterns = [
            (re.compile(p, re.IGNORECASE), r)
            for p, r in (patterns or self.DEFAULT_PATTERNS)
        ]

    def mask(self, text: str) -> str:
        """Mask sensitive data in text."""
        result = text
        for pattern, replacement in self._patterns:
            result = pattern.sub(replacement, result)
        return result

    def mask_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Mask sensitive data in a dictionary.

        Keys that look like credentials are replaced outright; strings are
        scanned with the text patterns.
        """
        result: dict[str, Any] = {}
        for key, value in data.items():
            key_lower = key.lower()
            if any(s in key_lower for s in self._SENSITIVE_KEYS):
                result[key] = _REDACTED
            elif isinstance(value, str):
                result[key] = self.mask(value)
            elif isinstance(value, dict):
                result[key] = self.mask_dict(value)
            elif isinstance(value, list):
                result[key] = [
                    self.mask_dict(v) if isinstance(v, dict) else v for v in value
                ]
            else:
                result[key] = value
        return result


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def __init__(self, masker: SensitiveDataMasker | None = None) -> None:
        super().__init__()
        self._masker = masker or SensitiveDataMasker()

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": self._masker.mask(record.getMessage()),
        }

        if context_dict := get_log_context().to_dict():
            log_data["context"] = context_dict

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(self._masker.mask_dict(extra_fields))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter."""

    def __init__(self, masker: SensitiveDataMasker | None = None) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self._masker = masker or SensitiveDataMasker()

    def format(self, record: logging.LogRecord) -> str:
        result = self._masker.mask(super().format(record))

        fields = get_log_context().to_dict()
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            fields.update(self._masker.mask_dict(extra_fields))
        if fields:
            result += " | " + " ".join(f"{k}={v}" for k, v in fields.items())

        return result


class StructuredLogger:
    """Logger accepting keyword fields.

    Example:
        >>> logger = get_logger("structured_chat.client")
        >>> logger.info("Request finished", model="gpt-4o-mini", latency_ms=412.0)
    """

    _handler: ClassVar[logging.Handler | None] = None

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, msg: str, exc_info: bool = False, **kwargs: Any) -> None:
        extra = {"extra_fields": kwargs} if kwargs else None
        self._logger.log(level, msg, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, exc_info=exc_info, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, exc_info=True, **kwargs)


_ROOT_LOGGER_NAME = "structured_chat"


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    format: str = "text",
    stream: Any = None,
    masker: SensitiveDataMasker | None = None,
) -> logging.Handler:
    """Attach a handler to the ``structured_chat`` logger hierarchy.

    Calling this again replaces the previously installed handler.

    Args:
        level: Log level
        format: Output format ('json' or 'text')
        stream: Output stream (default: stderr)
        masker: Sensitive data masker

    Returns:
        The installed handler
    """
    level = LogLevel(level.upper()) if isinstance(level, str) else level
    formatter: logging.Formatter = (
        JsonFormatter(masker=masker) if format == "json" else TextFormatter(masker=masker)
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)
    handler.setLevel(level.to_logging_level())

    root = logging.getLogger(_ROOT_LOGGER_NAME)
    if StructuredLogger._handler is not None:
        root.removeHandler(StructuredLogger._handler)
    root.addHandler(handler)
    root.setLevel(level.to_logging_level())
    StructuredLogger._handler = handler

    return handler


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for ``name``."""
    return StructuredLogger(logging.getLogger(name))
