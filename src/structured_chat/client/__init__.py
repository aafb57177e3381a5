"""
Client layer - User-facing API.

This module provides:
- ChatClient: Main entry point for structured chat completions
- ChatRequestBuilder: Fluent API for building chat requests
- Response types
"""

from structured_chat.client.builder import ChatClientBuilder, ChatRequestBuilder
from structured_chat.client.core import ChatClient
from structured_chat.client.response import CallStats, ChatResponse

__all__ = [
    "CallStats",
    "ChatClient",
    "ChatClientBuilder",
    "ChatRequestBuilder",
    "ChatResponse",
]
