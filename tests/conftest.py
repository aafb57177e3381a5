"""Root pytest fixtures for structured-chat tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from structured_chat.client import ChatClient
from structured_chat.config import ProviderConfig
from structured_chat.resilience import JitterStrategy, RetryConfig
from structured_chat.transport import HttpTransport

if TYPE_CHECKING:
    from collections.abc import Callable

BASE_URL = "https://api.test.local"
CHAT_URL = f"{BASE_URL}/v1/chat/completions"

BOOK_SCHEMA: dict[str, Any] = {
    "title": "Book",
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "authors": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["name", "authors"],
    "additionalProperties": False,
}


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment settings out of tests."""
    for var in (
        "STRUCTURED_CHAT_CONFIG",
        "STRUCTURED_CHAT_BASE_URL",
        "STRUCTURED_CHAT_TIMEOUT_SECS",
        "STRUCTURED_CHAT_PROXY",
        "STRUCTURED_CHAT_API_KEY",
        "OPENAI_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def book_schema() -> dict[str, Any]:
    return json.loads(json.dumps(BOOK_SCHEMA))


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(base_url=BASE_URL, unsupported_models=["legacy-chat"])


@pytest.fixture
def make_completion() -> Callable[..., dict[str, Any]]:
    """Factory for chat.completion bodies."""

    def _make(
        content: str | None = '{"name": "Dune", "authors": ["Frank Herbert"]}',
        *,
        finish_reason: str = "stop",
        refusal: str | None = None,
        model: str = "gpt-4o-mini",
    ) -> dict[str, Any]:
        message: dict[str, Any] = {"role": "assistant", "content": content}
        if refusal is not None:
            message["refusal"] = refusal
        return {
            "id": "chatcmpl-123",
            "object": "chat.completion",
            "created": 1699012345,
            "model": model,
            "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
            "usage": {"prompt_tokens": 42, "completion_tokens": 17, "total_tokens": 59},
        }

    return _make


@pytest.fixture
def make_client(
    provider_config: ProviderConfig,
) -> Callable[..., ChatClient]:
    """Factory for clients pointed at the mocked API with fast retries."""

    def _make(
        model: str = "gpt-4o-mini",
        *,
        config: ProviderConfig | None = None,
        max_retries: int = 0,
    ) -> ChatClient:
        cfg = config or provider_config
        transport = HttpTransport(cfg.base_url, api_key="sk-test", timeout=cfg.timeout_s)
        retry = RetryConfig(
            max_retries=max_retries, min_delay_ms=1, max_delay_ms=5, jitter=JitterStrategy.NONE
        )
        return ChatClient(config=cfg, transport=transport, model_id=model, retry_config=retry)

    return _make



@pytest.fixture
def chat_url() -> str:
    return CHAT_URL
