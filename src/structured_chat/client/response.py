"""
Response types for client operations.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from structured_chat.types.message import Message


@dataclass
class ChatResponse:
    """Response from a chat completion request.

    Attributes:
        content: The generated text (a JSON document in structured mode)
        finish_reason: Why the model stopped generating
        usage: Token usage information
        model: Model that generated the response
        raw_response: Raw response data from the API
        refusal: Refusal text, when the model declined to answer
        parsed: Validated output when a schema or model was requested
    """

    content: str = ""
    finish_reason: str | None = None
    usage: dict[str, Any] | None = None
    model: str | None = None
    raw_response: dict[str, Any] | None = None
    refusal: str | None = None
    parsed: Any = None

    def to_message(self) -> Message:
        """Convert response to an assistant message."""
        return Message.assistant(self.content)

    @property
    def is_refusal(self) -> bool:
        return self.refusal is not None

    @property
    def is_truncated(self) -> bool:
        """True when generation stopped at the token limit."""
        return self.finish_reason == "length"

    @property
    def prompt_tokens(self) -> int | None:
        if self.usage:
            return self.usage.get("prompt_tokens")
        return None

    @property
    def completion_tokens(self) -> int | None:
        if self.usage:
            return self.usage.get("completion_tokens")
        return None

    @property
    def total_tokens(self) -> int | None:
        if self.usage:
            return self.usage.get("total_tokens")
        return None


@dataclass
class CallStats:
    """Statistics for a single API call.

    Attributes:
        client_request_id: Client-generated request ID for tracking
        latency_ms: Total latency in milliseconds
        retry_count: Number of retries performed
        model: Model used for the call
        endpoint: API endpoint used
        schema_name: Response schema name, in structured mode
        prompt_tokens: Prompt token count
        completion_tokens: Completion token count
    """

    client_request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    latency_ms: float = 0.0
    retry_count: int = 0
    model: str | None = None
    endpoint: str | None = None
    schema_name: str | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None

    _start_time: float = field(default_factory=time.monotonic, repr=False)

    def record_start(self) -> None:
        self._start_time = time.monotonic()

    def record_end(self) -> None:
        """Record the end time and calculate latency."""
        self.latency_ms = (time.monotonic() - self._start_time) * 1000

    def record_usage(self, usage: dict[str, Any] | None) -> None:
        if usage:
            self.prompt_tokens = usage.get("prompt_tokens")
            self.completion_tokens = usage.get("completion_tokens")

    @property
    def total_tokens(self) -> int | None:
        if self.prompt_tokens is not None and self.completion_tokens is not None:
            return self.prompt_tokens + self.completion_tokens
        return None
