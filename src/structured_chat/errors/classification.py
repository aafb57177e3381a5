"""
Error classification for chat-completion API failures.

Maps HTTP status codes and error bodies to a small set of standard classes
used for retry decisions.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorClass(str, Enum):
    """Standard error classification."""

    INVALID_REQUEST = "invalid_request"
    """Malformed request body, invalid schema, or unsupported parameter."""

    AUTHENTICATION = "authentication"
    """Missing/invalid bearer token."""

    PERMISSION_DENIED = "permission_denied"
    """Caller is authenticated but not permitted to access the resource."""

    NOT_FOUND = "not_found"
    """Unknown model or endpoint."""

    QUOTA_EXHAUSTED = "quota_exhausted"
    """Account quota/billing limit exceeded."""

    RATE_LIMITED = "rate_limited"
    """Throttled; retryable with backoff."""

    REQUEST_TOO_LARGE = "request_too_large"
    """Context too long or payload too big."""

    TIMEOUT = "timeout"
    """Request timed out."""

    SERVER_ERROR = "server_error"
    """Transient server-side failure (5xx)."""

    OVERLOADED = "overloaded"
    """Service temporarily unavailable."""

    OTHER = "other"
    """Unknown classification."""


_RETRYABLE_CLASSES: frozenset[ErrorClass] = frozenset(
    {
        ErrorClass.RATE_LIMITED,
        ErrorClass.TIMEOUT,
        ErrorClass.SERVER_ERROR,
        ErrorClass.OVERLOADED,
    }
)

_DEFAULT_STATUS_MAPPING: dict[int, ErrorClass] = {
    400: ErrorClass.INVALID_REQUEST,
    401: ErrorClass.AUTHENTICATION,
    403: ErrorClass.PERMISSION_DENIED,
    404: ErrorClass.NOT_FOUND,
    408: ErrorClass.TIMEOUT,
    413: ErrorClass.REQUEST_TOO_LARGE,
    422: ErrorClass.INVALID_REQUEST,
    429: ErrorClass.RATE_LIMITED,
    500: ErrorClass.SERVER_ERROR,
    502: ErrorClass.SERVER_ERROR,
    503: ErrorClass.OVERLOADED,
    504: ErrorClass.TIMEOUT,
}

_QUOTA_PATTERNS = ("quota", "billing", "insufficient_quota", "spend")


def classify_http_error(
    status_code: int,
    body: dict[str, Any] | None = None,
) -> ErrorClass:
    """Classify an HTTP error into a standard error class.

    Args:
        status_code: HTTP status code
        body: Response body (parsed JSON)

    Returns:
        ErrorClass representing the error type
    """
    error_obj = body.get("error") if body else None

    # Body hints are more specific than the status alone
    if status_code == 400 and isinstance(error_obj, dict):
        code_val = error_obj.get("code") or error_obj.get("type") or ""
        if isinstance(code_val, str) and "context_length" in code_val.lower():
            return ErrorClass.REQUEST_TOO_LARGE

    if status_code == 429 and body:
        msg_lower = (extract_error_message(body) or "").lower()
        type_lower = ""
        if isinstance(error_obj, dict) and isinstance(error_obj.get("type"), str):
            type_lower = error_obj["type"].lower()
        for pattern in _QUOTA_PATTERNS:
            if pattern in msg_lower or pattern in type_lower:
                return ErrorClass.QUOTA_EXHAUSTED

    if status_code in _DEFAULT_STATUS_MAPPING:
        return _DEFAULT_STATUS_MAPPING[status_code]

    if 400 <= status_code < 500:
        return ErrorClass.INVALID_REQUEST
    if 500 <= status_code < 600:
        return ErrorClass.SERVER_ERROR

    return ErrorClass.OTHER


def is_retryable(error_class: ErrorClass) -> bool:
    """Check if an error class is retryable by default."""
    return error_class in _RETRYABLE_CLASSES


def extract_error_message(body: dict[str, Any] | None) -> str | None:
    """Extract error message from response body.

    Supports:
    - OpenAI style: {"error": {"message": "..."}}
    - Simple: {"error": "..."} or {"message": "..."}
    - Detail field: {"detail": "..."} or {"detail": [...]}

    Args:
        body: Response body (parsed JSON)

    Returns:
        Error message if found, None otherwise
    """
    if not body:
        return None

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            msg = error.get("message")
            if isinstance(msg, str):
                return msg
        elif isinstance(error, str):
            return error

    msg = body.get("message")
    if isinstance(msg, str):
        return msg

    detail = body.get("detail")
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        return str(detail[0])

    return None
