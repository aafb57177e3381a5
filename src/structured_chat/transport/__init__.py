"""
Transport layer - HTTP client for API communication.

Provides httpx-based transport with:
- API key resolution
- Timeout and proxy configuration
- The raw HTTP surface for structured output
"""

from structured_chat.transport.auth import get_auth_header, resolve_api_key
from structured_chat.transport.http import HttpTransport
from structured_chat.transport.raw import (
    DEFAULT_CHAT_PATH,
    build_chat_payload,
    extract_content,
    extract_message,
    post_chat_completion,
)

__all__ = [
    "DEFAULT_CHAT_PATH",
    "HttpTransport",
    "build_chat_payload",
    "extract_content",
    "extract_message",
    "get_auth_header",
    "post_chat_completion",
    "resolve_api_key",
]
