"""错误体系：结构化输出客户端的错误类型。

Error hierarchy for structured-chat.
"""

from structured_chat.errors.base import (
    ConfigError,
    ErrorContext,
    OutputValidationError,
    RemoteError,
    ResponseFormatError,
    StructuredChatError,
    TransportError,
    UnsupportedModelError,
    ValidationError,
)
from structured_chat.errors.classification import (
    ErrorClass,
    classify_http_error,
    extract_error_message,
    is_retryable,
)

__all__ = [
    "ConfigError",
    "ErrorClass",
    "ErrorContext",
    "OutputValidationError",
    "RemoteError",
    "ResponseFormatError",
    "StructuredChatError",
    "TransportError",
    "UnsupportedModelError",
    "ValidationError",
    "classify_http_error",
    "extract_error_message",
    "is_retryable",
]
