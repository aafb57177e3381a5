"""
Raw HTTP surface for structured output.

Builds the exact ``POST /v1/chat/completions`` body and sends it with a
plain httpx client, without the ``ChatClient`` layer:

    >>> payload = build_chat_payload(
    ...     "gpt-4o-mini",
    ...     [{"role": "user", "content": "Tell me about a famous book."}],
    ...     schema=BOOK_SCHEMA,
    ...     name="Book",
    ...     max_tokens=200,
    ...     temperature=0.0,
    ... )
    >>> body = await post_chat_completion(payload, base_url=..., api_key=...)
    >>> book = json.loads(extract_content(body))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from structured_chat.errors import ResponseFormatError
from structured_chat.structured.json_mode import ResponseFormat
from structured_chat.transport.auth import get_auth_header
from structured_chat.transport.http import build_timeout, send_request, user_agent
from structured_chat.types.message import Message

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_CHAT_PATH = "/v1/chat/completions"


def build_chat_payload(
    model: str,
    messages: Sequence[Message | dict[str, Any]],
    *,
    schema: dict[str, Any] | None = None,
    name: str | None = None,
    strict: bool = True,
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> dict[str, Any]:
    """Build a chat-completion request body.

    ``schema`` selects json_schema mode; without it no ``response_format``
    is sent. Optional numeric fields are omitted when None.
    """
    payload: dict[str, Any] = {
        "model": model,
        "messages": [m.to_dict() if isinstance(m, Message) else dict(m) for m in messages],
    }

    if schema is not None:
        payload.update(ResponseFormat.from_schema(schema, name=name, strict=strict).to_payload())
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens
    if temperature is not None:
        payload["temperature"] = temperature

    return payload


async def post_chat_completion(
    payload: dict[str, Any],
    *,
    base_url: str,
    api_key: str | None = None,
    path: str = DEFAULT_CHAT_PATH,
    timeout: float | None = None,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """POST ``payload`` to the chat completions endpoint.

    Args:
        payload: Request body, e.g. from build_chat_payload
        base_url: API host
        api_key: Bearer token
        path: Endpoint path
        timeout: Timeout in seconds
        client: Optional caller-owned httpx client

    Returns:
        Decoded completion object

    Raises:
        TransportError: On network failures
        RemoteError: On 4xx/5xx responses
        ResponseFormatError: If the body is not a JSON object
    """
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": user_agent(),
        **get_auth_header(api_key),
    }

    if client is not None:
        response = await send_request(client, "POST", url, json=payload, headers=headers)
    else:
        async with httpx.AsyncClient(timeout=build_timeout(timeout)) as owned:
            response = await send_request(owned, "POST", url, json=payload, headers=headers)

    try:
        body = response.json()
    except ValueError as e:
        raise ResponseFormatError("Response body is not valid JSON") from e
    if not isinstance(body, dict):
        raise ResponseFormatError("Response body is not a JSON object")
    return body


def extract_message(body: dict[str, Any]) -> dict[str, Any]:
    """Return ``choices[0].message`` from a completion object."""
    if not isinstance(body, dict):
        raise ResponseFormatError("Completion body is not a JSON object")

    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        raise ResponseFormatError("Completion has no choices", field="choices", body=body)

    choice = choices[0]
    message = choice.get("message") if isinstance(choice, dict) else None
    if not isinstance(message, dict):
        raise ResponseFormatError(
            "Completion choice has no message", field="choices[0].message", body=body
        )
    return message


def extract_content(body: dict[str, Any]) -> str:
    """Return ``choices[0].message.content``.

    Raises:
        ResponseFormatError: If the envelope is malformed or content is empty
    """
    content = extract_message(body).get("content")
    if not isinstance(content, str) or not content:
        raise ResponseFormatError(
            "Completion message has no content",
            field="choices[0].message.content",
            body=body,
        )
    return content
