"""核心客户端实现：请求受 JSON Schema 约束的结构化输出。

Core ChatClient implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from structured_chat.capabilities import supports_structured_output
from structured_chat.client.builder import ChatClientBuilder, ChatRequestBuilder
from structured_chat.client.response import CallStats, ChatResponse
from structured_chat.config import ProviderConfig, load_config
from structured_chat.errors import (
    OutputValidationError,
    ResponseFormatError,
    UnsupportedModelError,
)
from structured_chat.resilience import RetryConfig, RetryPolicy
from structured_chat.structured.json_mode import StructuredOutput
from structured_chat.telemetry import get_logger
from structured_chat.transport import HttpTransport, extract_message, resolve_api_key

if TYPE_CHECKING:
    from structured_chat.structured.json_mode import ResponseFormat

logger = get_logger(__name__)


class ChatClient:
    """Client for JSON-schema-constrained chat completions.

    Example:
        >>> async with await ChatClient.create("gpt-4o-mini") as client:
        ...     book = await (
        ...         client.chat()
        ...         .user("Tell me about a famous book.")
        ...         .output_model(Book)
        ...         .parse()
        ...     )
        >>> book.authors
        ['Harper Lee']
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: HttpTransport,
        model_id: str,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """Initialize the client (internal use).

        Use ChatClient.create() or ChatClientBuilder for public construction.
        """
        self._config = config
        self._transport = transport
        self._model_id = model_id
        self._retry = RetryPolicy(retry_config or RetryConfig(max_retries=config.max_retries))

    @classmethod
    async def create(
        cls,
        model: str,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        config: ProviderConfig | None = None,
    ) -> ChatClient:
        """Create a new ChatClient.

        Args:
            model: Model identifier
            api_key: Explicit API key (otherwise read from the environment)
            base_url: API host override
            timeout: Timeout override in seconds
            config: Provider settings (defaults to load_config())

        Returns:
            Configured ChatClient
        """
        config = (config or load_config()).with_overrides(
            base_url=base_url,
            timeout_s=timeout,
        )
        transport = HttpTransport(
            config.base_url,
            api_key=resolve_api_key(api_key, config.api_key_env),
            timeout=config.timeout_s,
            proxy=config.proxy,
        )
        return cls(config=config, transport=transport, model_id=model)

    @classmethod
    def builder(cls) -> ChatClientBuilder:
        """Get a builder for advanced configuration."""
        return ChatClientBuilder()

    def chat(self) -> ChatRequestBuilder:
        """Start building a chat request."""
        return ChatRequestBuilder(self)

    @property
    def model_id(self) -> str:
        return self._model_id

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def supports_structured_output(self) -> bool:
        return supports_structured_output(self._model_id, self._config)

    async def _execute_chat(
        self, builder: ChatRequestBuilder
    ) -> tuple[ChatResponse, CallStats]:
        """Execute a chat request and return the response with stats."""
        response_format = builder.response_format_config
        structured = builder.is_structured

        if structured and not self.supports_structured_output:
            raise UnsupportedModelError(self._model_id)

        payload = builder.build_payload()
        stats = CallStats(
            model=self._model_id,
            endpoint=self._config.chat_path,
            schema_name=response_format.name if structured else None,
        )

        def on_retry(attempt: int, error: Exception, delay: float) -> None:
            logger.warning(
                "Retrying chat completion",
                attempt=attempt,
                delay_s=round(delay, 3),
                error=str(error),
                request_id=stats.client_request_id,
            )

        logger.debug(
            "Chat completion started",
            model=self._model_id,
            structured=structured,
            request_id=stats.client_request_id,
        )
        stats.record_start()
        result = await self._retry.execute(
            lambda: self._transport.post(self._config.chat_path, json=payload),
            on_retry=on_retry,
        )
        stats.record_end()
        stats.retry_count = result.retries

        if not result.success:
            logger.warning(
                "Chat completion failed",
                model=self._model_id,
                attempts=result.attempts,
                error=str(result.error),
                request_id=stats.client_request_id,
            )
            raise result.error

        try:
            body = result.value.json()
        except ValueError as e:
            raise ResponseFormatError("Response body is not valid JSON") from e
        response = self._parse_response(body)
        stats.record_usage(response.usage)
        logger.debug(
            "Chat completion finished",
            model=self._model_id,
            latency_ms=round(stats.latency_ms, 1),
            finish_reason=response.finish_reason,
            request_id=stats.client_request_id,
        )

        if structured and response.refusal is None:
            response.parsed = self._validate_output(response, response_format)

        return response, stats

    def _parse_response(self, data: dict[str, Any]) -> ChatResponse:
        """Parse a completion object into a ChatResponse."""
        message = extract_message(data)
        choice = data["choices"][0]

        content = message.get("content")
        if content is not None and not isinstance(content, str):
            raise ResponseFormatError(
                "Completion message content is not a string",
                field="choices[0].message.content",
                body=data,
            )

        return ChatResponse(
            content=content or "",
            finish_reason=choice.get("finish_reason"),
            usage=data.get("usage"),
            model=data.get("model"),
            raw_response=data,
            refusal=message.get("refusal") or None,
        )

    def _validate_output(
        self, response: ChatResponse, response_format: ResponseFormat
    ) -> Any:
        """Decode and validate structured content."""
        output = StructuredOutput.from_response(response.content, response_format.validator())
        if output.is_valid:
            return output.data

        logger.warning(
            "Structured output failed validation",
            model=self._model_id,
            schema_name=response_format.name,
            errors=output.validation_result.errors,
        )
        error = OutputValidationError(
            f"Output does not match schema '{response_format.name}'",
            raw=response.content,
            errors=list(output.validation_result.errors),
        )
        if response.is_truncated:
            error.with_hint("finish_reason was 'length'; raise max_tokens")
        raise error

    def _require_parsed(self, response: ChatResponse) -> Any:
        if response.refusal is not None:
            raise OutputValidationError(
                f"Model refused to answer: {response.refusal}",
                raw=response.content or None,
                refusal=response.refusal,
            )
        return response.parsed

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> ChatClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
