"""结构化输出客户端：请求符合 JSON Schema 的聊天补全结果。

structured-chat: JSON-schema-constrained chat completions.

Three ways to request structured output from a hosted chat-completion API:
- Pydantic models: ``client.chat().output_model(Book).parse()``
- JSON Schema documents validated with ``jsonschema``:
  ``client.chat().json_schema(BOOK_SCHEMA).parse()``
- Raw HTTP: ``build_chat_payload`` + ``post_chat_completion``
"""
from __future__ import annotations

from structured_chat.capabilities import supports_structured_output
from structured_chat.client import (
    CallStats,
    ChatClient,
    ChatClientBuilder,
    ChatRequestBuilder,
    ChatResponse,
)
from structured_chat.config import ProviderConfig, load_config
from structured_chat.errors import (
    ConfigError,
    OutputValidationError,
    RemoteError,
    ResponseFormatError,
    StructuredChatError,
    TransportError,
    UnsupportedModelError,
    ValidationError,
)
from structured_chat.structured import (
    JsonMode,
    OutputValidator,
    ResponseFormat,
    SchemaGenerator,
    build_schema_instruction,
    inject_schema_instruction,
    to_strict_schema,
)
from structured_chat.transport import (
    build_chat_payload,
    extract_content,
    post_chat_completion,
)
from structured_chat.types.message import Message, MessageRole

__version__ = "0.1.0"

__all__ = [
    # Client
    "CallStats",
    "ChatClient",
    "ChatClientBuilder",
    "ChatRequestBuilder",
    "ChatResponse",
    # Config
    "ProviderConfig",
    "load_config",
    "supports_structured_output",
    # Errors
    "ConfigError",
    "OutputValidationError",
    "RemoteError",
    "ResponseFormatError",
    "StructuredChatError",
    "TransportError",
    "UnsupportedModelError",
    "ValidationError",
    # Structured output
    "JsonMode",
    "OutputValidator",
    "ResponseFormat",
    "SchemaGenerator",
    "build_schema_instruction",
    "inject_schema_instruction",
    "to_strict_schema",
    # Raw HTTP
    "build_chat_payload",
    "extract_content",
    "post_chat_completion",
    # Types
    "Message",
    "MessageRole",
    "__version__",
]
