"""Tests for the raw HTTP surface."""

import json
from typing import Any

import httpx
import pytest
from pytest_httpx import HTTPXMock

from structured_chat.errors import RemoteError, ResponseFormatError
from structured_chat.transport import (
    build_chat_payload,
    extract_content,
    extract_message,
    post_chat_completion,
)
from structured_chat.types import Message

BASE_URL = "https://api.test.local"


class TestBuildChatPayload:
    """Tests for build_chat_payload."""

    def test_structured_payload(self, book_schema: dict[str, Any]) -> None:
        payload = build_chat_payload(
            "gpt-4o-mini",
            [
                Message.system("You are a helpful assistant."),
                {"role": "user", "content": "Tell me about a famous book."},
            ],
            schema=book_schema,
            name="Book",
            max_tokens=200,
            temperature=0.0,
        )

        assert payload["model"] == "gpt-4o-mini"
        assert payload["messages"] == [
            {"role": "system", "content": "You are a helpful assistant."},
            {"role": "user", "content": "Tell me about a famous book."},
        ]
        assert payload["max_tokens"] == 200
        assert payload["temperature"] == 0.0
        assert payload["response_format"] == {
            "type": "json_schema",
            "json_schema": {"name": "Book", "strict": True, "schema": book_schema},
        }

    def test_name_defaults_to_title(self, book_schema: dict[str, Any]) -> None:
        payload = build_chat_payload("m", [Message.user("hi")], schema=book_schema)
        assert payload["response_format"]["json_schema"]["name"] == "Book"

    def test_non_strict_keeps_schema(self) -> None:
        schema = {"type": "object", "properties": {"a": {"type": "string"}}}
        payload = build_chat_payload("m", [Message.user("hi")], schema=schema, strict=False)

        json_schema = payload["response_format"]["json_schema"]
        assert json_schema["strict"] is False
        assert json_schema["schema"] == schema

    def test_optional_fields_omitted(self) -> None:
        payload = build_chat_payload("m", [Message.user("hi")])
        assert set(payload) == {"model", "messages"}

    def test_caller_messages_not_mutated(self) -> None:
        message = {"role": "user", "content": "hi"}
        payload = build_chat_payload("m", [message])
        payload["messages"][0]["content"] = "changed"
        assert message["content"] == "hi"


class TestPostChatCompletion:
    """Tests for post_chat_completion."""

    @pytest.mark.asyncio
    async def test_posts_payload(
        self, httpx_mock: HTTPXMock, chat_url: str, make_completion, book_schema
    ) -> None:
        httpx_mock.add_response(url=chat_url, method="POST", json=make_completion())
        payload = build_chat_payload(
            "gpt-4o-mini", [Message.user("Tell me about a famous book.")], schema=book_schema
        )

        body = await post_chat_completion(payload, base_url=BASE_URL, api_key="sk-test")

        request = httpx_mock.get_request()
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert json.loads(request.content) == payload
        assert json.loads(extract_content(body)) == {
            "name": "Dune",
            "authors": ["Frank Herbert"],
        }

    @pytest.mark.asyncio
    async def test_custom_path_and_client(self, httpx_mock: HTTPXMock, make_completion) -> None:
        httpx_mock.add_response(url=f"{BASE_URL}/openai/chat", json=make_completion())

        async with httpx.AsyncClient() as client:
            body = await post_chat_completion(
                {"model": "m", "messages": []},
                base_url=f"{BASE_URL}/",
                path="openai/chat",
                client=client,
            )
            assert not client.is_closed

        assert body["object"] == "chat.completion"
        assert "Authorization" not in httpx_mock.get_request().headers

    @pytest.mark.asyncio
    async def test_error_status(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            status_code=400,
            json={"error": {"message": "Invalid schema for response_format 'Book'"}},
        )

        with pytest.raises(RemoteError, match="Invalid schema"):
            await post_chat_completion({}, base_url=BASE_URL)

    @pytest.mark.asyncio
    async def test_non_json_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(text="<html>gateway</html>")

        with pytest.raises(ResponseFormatError, match="not valid JSON"):
            await post_chat_completion({}, base_url=BASE_URL)

    @pytest.mark.asyncio
    async def test_non_object_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json=["unexpected"])

        with pytest.raises(ResponseFormatError, match="not a JSON object"):
            await post_chat_completion({}, base_url=BASE_URL)


class TestExtractContent:
    """Tests for extract_content and extract_message."""

    def test_extract(self, make_completion) -> None:
        body = make_completion('{"name": "Dune", "authors": []}')
        assert extract_message(body)["role"] == "assistant"
        assert extract_content(body) == '{"name": "Dune", "authors": []}'

    def test_extract_non_object_body(self) -> None:
        with pytest.raises(ResponseFormatError, match="not a JSON object"):
            extract_content(["unexpected"])  # type: ignore[arg-type]

    def test_no_choices(self) -> None:
        with pytest.raises(ResponseFormatError) as exc_info:
            extract_content({"choices": []})
        assert exc_info.value.field == "choices"

    def test_choice_without_message(self) -> None:
        with pytest.raises(ResponseFormatError):
            extract_content({"choices": [{"index": 0}]})

    def test_null_content(self, make_completion) -> None:
        body = make_completion(None, refusal="I can't help with that.")
        with pytest.raises(ResponseFormatError) as exc_info:
            extract_content(body)
        assert exc_info.value.field == "choices[0].message.content"
        assert exc_info.value.body is body
