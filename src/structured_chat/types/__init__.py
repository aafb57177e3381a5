"""
Type definitions for structured-chat.
"""

from structured_chat.types.message import Message, MessageRole

__all__ = [
    "Message",
    "MessageRole",
]
