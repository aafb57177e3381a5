"""HTTP 传输层：基于 httpx 的异步 HTTP 客户端。

HTTP transport using httpx for async requests.

Provides:
- Configurable timeouts
- Proxy support
- Automatic header management
- Mapping of httpx failures and error statuses to library errors
"""

from __future__ import annotations

from contextlib import suppress
from typing import Any

import httpx

from structured_chat.errors import RemoteError, TransportError
from structured_chat.transport.auth import get_auth_header

_DEFAULT_TIMEOUT = 30.0
_DEFAULT_CONNECT_TIMEOUT = 10.0

_UA_VERSION: str | None = None


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        from importlib.metadata import PackageNotFoundError, version

        try:
            _UA_VERSION = version("structured-chat")
        except PackageNotFoundError:
            _UA_VERSION = "0.0.0"
    return _UA_VERSION


def user_agent() -> str:
    return f"structured-chat/{_get_ua_version()}"


def build_timeout(timeout: float | None) -> httpx.Timeout:
    return httpx.Timeout(
        timeout or _DEFAULT_TIMEOUT,
        connect=min(_DEFAULT_CONNECT_TIMEOUT, timeout or _DEFAULT_TIMEOUT),
    )


def raise_for_error_response(response: httpx.Response) -> None:
    """Raise RemoteError for a 4xx/5xx response."""
    if response.status_code < 400:
        return

    body = None
    with suppress(ValueError):
        decoded = response.json()
        if isinstance(decoded, dict):
            body = decoded

    raise RemoteError.from_response(
        status_code=response.status_code,
        body=body,
        headers=dict(response.headers),
    )


async def send_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request, mapping httpx failures to TransportError/RemoteError."""
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.ConnectError as e:
        raise TransportError(f"Connection failed: {e}", url=url, cause=e) from e
    except httpx.TimeoutException as e:
        raise TransportError(f"Request timed out: {e}", url=url, cause=e) from e
    except httpx.HTTPError as e:
        raise TransportError(f"HTTP error: {e}", url=url, cause=e) from e

    raise_for_error_response(response)
    return response


class HttpTransport:
    """HTTP transport for API communication.

    Example:
        >>> async with HttpTransport("https://api.openai.com", api_key="sk-...") as transport:
        ...     response = await transport.post("/v1/chat/completions", payload)
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout: float | None = None,
        proxy: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            base_url: API host
            api_key: Bearer token
            timeout: Request timeout in seconds
            proxy: Proxy URL
            client: Pre-built httpx client (owned by the caller)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout or _DEFAULT_TIMEOUT
        self._proxy = proxy
        self._auth_headers = get_auth_header(api_key)
        self._client = client
        self._owns_client = client is None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=build_timeout(self._timeout),
                proxy=self._proxy,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_headers(self, extra_headers: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        headers.update(self._auth_headers)
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Make an HTTP request.

        Args:
            method: HTTP method
            path: Request path (relative to base URL)
            json: JSON body
            headers: Additional headers
            params: Query parameters

        Returns:
            HTTP response

        Raises:
            TransportError: On network/connection errors
            RemoteError: On API errors (4xx, 5xx)
        """
        return await send_request(
            self._get_client(),
            method,
            self._url(path),
            json=json,
            headers=self._build_headers(headers),
            params=params,
        )

    async def post(
        self,
        path: str,
        json: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return await self.request("POST", path, json=json, headers=headers)

    async def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return await self.request("GET", path, params=params, headers=headers)

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
