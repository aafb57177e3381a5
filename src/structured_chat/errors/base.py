"""错误基类：结构化输出客户端的分层错误体系。

Base error classes for structured-chat.

Provides a layered error hierarchy:
- StructuredChatError: Base class for all library errors
- ConfigError: Configuration loading/validation errors
- TransportError: HTTP/network errors
- RemoteError: API errors with classification
- ValidationError: Request-side validation errors
- ResponseFormatError: Malformed completion envelopes
- OutputValidationError: Model output that does not match the schema
- UnsupportedModelError: Structured output requested on a model without it
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from structured_chat.errors.classification import ErrorClass


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    field_path: str | None = None
    """Path to the problematic field (e.g., 'choices[0].message.content')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'config', 'transport', 'output')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class StructuredChatError(Exception):
    """Base class for all structured-chat errors.

    Attributes:
        message: Human-readable error message
        context: Structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> StructuredChatError:
        """Add a hint to this error."""
        self.context.hint = hint
        self.args = (self._format_message(),)
        return self


class ConfigError(StructuredChatError):
    """Error while loading or validating configuration.

    Raised when:
    - Config file cannot be read
    - Invalid YAML syntax
    - Values fail validation
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        config_path: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="config")
        if config_path:
            ctx.details["config_path"] = config_path
        super().__init__(message, ctx)
        self.config_path = config_path


class TransportError(StructuredChatError):
    """Error during HTTP transport.

    Raised when:
    - Network connection failure
    - Timeout
    - SSL/TLS or proxy errors
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.url = url
        self.__cause__ = cause


class ValidationError(StructuredChatError):
    """Validation error for request construction.

    Raised when:
    - json_schema mode is requested without a schema
    - A schema is not a valid JSON Schema document
    - Invalid request parameters
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="validation")
        if field:
            ctx.field_path = field
        if expected is not None:
            ctx.details["expected"] = expected
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.expected = expected
        self.actual = actual


class ResponseFormatError(StructuredChatError):
    """The completion body does not have the expected envelope."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        body: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="response", field_path=field)
        super().__init__(message, ctx)
        self.field = field
        self.body = body


class OutputValidationError(StructuredChatError):
    """Model output could not be decoded or did not match the schema.

    Attributes:
        raw: Raw content returned by the model
        errors: Individual validation error messages
        refusal: Refusal text, when the model declined to answer
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        raw: str | None = None,
        errors: list[str] | None = None,
        refusal: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="output")
        if errors:
            ctx.details["errors"] = errors
        super().__init__(message, ctx)
        self.raw = raw
        self.errors = errors or []
        self.refusal = refusal


class UnsupportedModelError(StructuredChatError):
    """Structured output was requested on a model that does not support it."""

    def __init__(self, model: str, context: ErrorContext | None = None) -> None:
        ctx = context or ErrorContext(
            source="capabilities",
            hint="use a model that supports json_schema response_format",
        )
        ctx.details["model"] = model
        super().__init__(f"Model '{model}' does not support structured output", ctx)
        self.model = model


class RemoteError(StructuredChatError):
    """Error returned by the chat-completion API.

    Attributes:
        status_code: HTTP status code
        error_class: Standardized error classification
        retryable: Whether the error is retryable
        raw_error: Raw error response from the API
        retry_after: Suggested retry delay in seconds (from header)
        request_id: Request ID reported by the API
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error_class: ErrorClass,
        retryable: bool = False,
        raw_error: dict[str, Any] | None = None,
        retry_after: float | None = None,
        request_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="remote")
        ctx.details["status_code"] = status_code
        ctx.details["error_class"] = error_class.value
        ctx.details["retryable"] = retryable
        if request_id:
            ctx.details["request_id"] = request_id

        super().__init__(message, ctx)

        self.status_code = status_code
        self.error_class = error_class
        self.retryable = retryable
        self.raw_error = raw_error or {}
        self.retry_after = retry_after
        self.request_id = request_id

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> RemoteError:
        """Create RemoteError from an HTTP error response.

        Args:
            status_code: HTTP status code
            body: Response body (parsed JSON)
            headers: Response headers

        Returns:
            RemoteError with appropriate classification
        """
        from structured_chat.errors.classification import (
            classify_http_error,
            extract_error_message,
            is_retryable,
        )

        error_class = classify_http_error(status_code, body)
        message = extract_error_message(body) or f"HTTP {status_code}"

        retry_after = None
        request_id = None
        if headers:
            lowered = {k.lower(): v for k, v in headers.items()}
            retry_after_str = lowered.get("retry-after")
            if retry_after_str:
                with contextlib.suppress(ValueError):
                    retry_after = float(retry_after_str)
            request_id = lowered.get("x-request-id") or lowered.get("request-id")
        if body and isinstance(body.get("request_id"), str):
            request_id = body["request_id"]

        return cls(
            message=message,
            status_code=status_code,
            error_class=error_class,
            retryable=is_retryable(error_class),
            raw_error=body,
            retry_after=retry_after,
            request_id=request_id,
        )
