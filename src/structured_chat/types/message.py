"""
Chat message types.

Messages are the ordered role/content pairs sent in the ``messages`` field
of a chat-completion request.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Message role enumeration."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single chat message.

    Examples:
        >>> msg = Message.system("You are a helpful assistant.")
        >>> msg = Message.user("Tell me about a famous book.")
        >>> msg.to_dict()
        {'role': 'user', 'content': 'Tell me about a famous book.'}
    """

    model_config = ConfigDict(use_enum_values=True)

    role: MessageRole = Field(description="Message role")
    content: str = Field(description="Message text")

    @classmethod
    def system(cls, text: str) -> Message:
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=text)

    @classmethod
    def user(cls, text: str) -> Message:
        """Create a user message."""
        return cls(role=MessageRole.USER, content=text)

    @classmethod
    def assistant(cls, text: str) -> Message:
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT, content=text)

    @property
    def is_system(self) -> bool:
        return self.role == MessageRole.SYSTEM.value

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire format used in request payloads."""
        role = self.role.value if isinstance(self.role, MessageRole) else self.role
        return {"role": role, "content": self.content}
