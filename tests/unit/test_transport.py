"""Tests for transport module."""

import httpx
import pytest
from pytest_httpx import HTTPXMock

from structured_chat.errors import ErrorClass, RemoteError, TransportError
from structured_chat.transport import HttpTransport, get_auth_header, resolve_api_key

BASE_URL = "https://api.test.local"


class TestResolveApiKey:
    """Tests for resolve_api_key."""

    def test_explicit_key_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert resolve_api_key("sk-explicit", "OPENAI_API_KEY") == "sk-explicit"

    def test_configured_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXAMPLE_API_KEY", "sk-example")
        monkeypatch.setenv("STRUCTURED_CHAT_API_KEY", "sk-fallback")
        assert resolve_api_key(None, "EXAMPLE_API_KEY") == "sk-example"

    def test_fallback_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STRUCTURED_CHAT_API_KEY", "sk-fallback")
        assert resolve_api_key(None, "OPENAI_API_KEY") == "sk-fallback"

    def test_missing(self) -> None:
        assert resolve_api_key(None, "OPENAI_API_KEY") is None

    def test_auth_header(self) -> None:
        assert get_auth_header("sk-test") == {"Authorization": "Bearer sk-test"}
        assert get_auth_header(None) == {}
        assert get_auth_header("") == {}


class TestHttpTransport:
    """Tests for HttpTransport."""

    def test_base_url_trailing_slash(self) -> None:
        assert HttpTransport(f"{BASE_URL}/").base_url == BASE_URL

    @pytest.mark.asyncio
    async def test_post_sends_headers(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{BASE_URL}/v1/chat/completions", json={"ok": True})

        async with HttpTransport(BASE_URL, api_key="sk-test") as transport:
            response = await transport.post("/v1/chat/completions", json={"model": "m"})

        assert response.json() == {"ok": True}
        request = httpx_mock.get_request()
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["User-Agent"].startswith("structured-chat/")

    @pytest.mark.asyncio
    async def test_no_auth_header_without_key(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{BASE_URL}/v1/models", json={"data": []})

        async with HttpTransport(BASE_URL) as transport:
            await transport.get("v1/models")

        assert "Authorization" not in httpx_mock.get_request().headers

    @pytest.mark.asyncio
    async def test_error_status_raises_remote_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            status_code=429,
            json={"error": {"message": "Slow down", "type": "rate_limit"}},
            headers={"Retry-After": "1", "x-request-id": "req_9"},
        )

        async with HttpTransport(BASE_URL, api_key="sk-test") as transport:
            with pytest.raises(RemoteError) as exc_info:
                await transport.post("/v1/chat/completions", json={})

        error = exc_info.value
        assert error.status_code == 429
        assert error.error_class == ErrorClass.RATE_LIMITED
        assert error.retry_after == 1.0
        assert error.request_id == "req_9"
        assert error.message == "Slow down"

    @pytest.mark.asyncio
    async def test_error_status_with_text_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(status_code=502, text="Bad Gateway")

        async with HttpTransport(BASE_URL) as transport:
            with pytest.raises(RemoteError) as exc_info:
                await transport.post("/v1/chat/completions", json={})

        assert exc_info.value.message == "HTTP 502"
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_connect_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        async with HttpTransport(BASE_URL) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.post("/v1/chat/completions", json={})

        assert exc_info.value.url == f"{BASE_URL}/v1/chat/completions"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("Read timed out"))

        async with HttpTransport(BASE_URL) as transport:
            with pytest.raises(TransportError, match="timed out"):
                await transport.post("/v1/chat/completions", json={})

    @pytest.mark.asyncio
    async def test_caller_client_not_closed(self, httpx_mock: HTTPXMock) -> None:
        """Test an injected client stays open after the transport closes."""
        httpx_mock.add_response(json={})

        async with httpx.AsyncClient() as client:
            transport = HttpTransport(BASE_URL, client=client)
            await transport.post("/v1/chat/completions", json={})
            await transport.close()
            assert not client.is_closed
