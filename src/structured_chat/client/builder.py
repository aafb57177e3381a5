"""
Builder classes for fluent API construction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from structured_chat.errors import ValidationError
from structured_chat.structured.json_mode import ResponseFormat
from structured_chat.structured.prompt import inject_schema_instruction
from structured_chat.types.message import Message

if TYPE_CHECKING:
    from pydantic import BaseModel

    from structured_chat.client.core import ChatClient
    from structured_chat.client.response import CallStats, ChatResponse


class ChatClientBuilder:
    """Builder for creating ChatClient instances with custom configuration.

    Example:
        >>> client = await (
        ...     ChatClientBuilder()
        ...     .model("gpt-4o-mini")
        ...     .config_file("structured-chat.yaml")
        ...     .max_retries(3)
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        self._model: str | None = None
        self._api_key: str | None = None
        self._base_url: str | None = None
        self._timeout: float | None = None
        self._config_file: str | None = None
        self._max_retries: int | None = None
        self._inject_schema_instruction: bool | None = None

    def model(self, model_id: str) -> ChatClientBuilder:
        """Set the model to use."""
        self._model = model_id
        return self

    def api_key(self, key: str) -> ChatClientBuilder:
        """Set explicit API key."""
        self._api_key = key
        return self

    def base_url(self, url: str) -> ChatClientBuilder:
        """Override the API host."""
        self._base_url = url
        return self

    def timeout(self, seconds: float) -> ChatClientBuilder:
        """Set request timeout."""
        self._timeout = seconds
        return self

    def config_file(self, path: str) -> ChatClientBuilder:
        """Load provider settings from a YAML file."""
        self._config_file = path
        return self

    def max_retries(self, n: int) -> ChatClientBuilder:
        """Set the number of retries for retryable errors."""
        self._max_retries = n
        return self

    def inject_schema_instruction(self, enable: bool = True) -> ChatClientBuilder:
        """Prepend the schema instruction to the system prompt client-side."""
        self._inject_schema_instruction = enable
        return self

    async def build(self) -> ChatClient:
        """Build the ChatClient instance.

        Raises:
            ValueError: If model is not set
        """
        if not self._model:
            raise ValueError("Model must be set before building")

        from structured_chat.client.core import ChatClient
        from structured_chat.config import load_config

        config = load_config(self._config_file).with_overrides(
            max_retries=self._max_retries,
            inject_schema_instruction=self._inject_schema_instruction,
        )

        return await ChatClient.create(
            self._model,
            api_key=self._api_key,
            base_url=self._base_url,
            timeout=self._timeout,
            config=config,
        )


class ChatRequestBuilder:
    """Builder for chat completion requests.

    Example:
        >>> book = await (
        ...     client.chat()
        ...     .system("You are a helpful librarian.")
        ...     .user("Tell me about a famous book.")
        ...     .output_model(Book)
        ...     .max_tokens(200)
        ...     .parse()
        ... )
    """

    def __init__(self, client: ChatClient) -> None:
        self._client = client
        self._messages: list[Message] = []
        self._temperature: float | None = None
        self._max_tokens: int | None = None
        self._top_p: float | None = None
        self._stop_sequences: list[str] | None = None
        self._response_format: ResponseFormat | None = None
        self._extra_params: dict[str, Any] = {}

    def messages(self, messages: list[Message]) -> ChatRequestBuilder:
        """Set the messages for the request."""
        self._messages = list(messages)
        return self

    def add_message(self, message: Message) -> ChatRequestBuilder:
        self._messages.append(message)
        return self

    def system(self, content: str) -> ChatRequestBuilder:
        """Add a system message."""
        self._messages.append(Message.system(content))
        return self

    def user(self, content: str) -> ChatRequestBuilder:
        """Add a user message."""
        self._messages.append(Message.user(content))
        return self

    def temperature(self, value: float) -> ChatRequestBuilder:
        """Set the sampling temperature."""
        self._temperature = value
        return self

    def max_tokens(self, value: int) -> ChatRequestBuilder:
        """Set maximum tokens to generate."""
        self._max_tokens = value
        return self

    def top_p(self, value: float) -> ChatRequestBuilder:
        self._top_p = value
        return self

    def stop(self, sequences: list[str]) -> ChatRequestBuilder:
        self._stop_sequences = sequences
        return self

    def param(self, key: str, value: Any) -> ChatRequestBuilder:
        """Set an extra request parameter."""
        self._extra_params[key] = value
        return self

    def response_format(self, response_format: ResponseFormat) -> ChatRequestBuilder:
        """Set the response format directly."""
        self._response_format = response_format
        return self

    def json_schema(
        self,
        schema: dict[str, Any],
        name: str | None = None,
        strict: bool = True,
    ) -> ChatRequestBuilder:
        """Constrain output to a JSON schema document."""
        self._response_format = ResponseFormat.from_schema(schema, name=name, strict=strict)
        return self

    def output_model(
        self,
        model: type[BaseModel],
        name: str | None = None,
        strict: bool = True,
    ) -> ChatRequestBuilder:
        """Constrain output to a Pydantic model; ``parsed`` will be an instance."""
        self._response_format = ResponseFormat.from_pydantic(model, name=name, strict=strict)
        return self

    @property
    def response_format_config(self) -> ResponseFormat | None:
        return self._response_format

    @property
    def is_structured(self) -> bool:
        return self._response_format is not None and self._response_format.is_structured

    def build_messages(self) -> list[Message]:
        """Return the messages to send, with the schema instruction when enabled."""
        if self.is_structured and self._client.config.inject_schema_instruction:
            return inject_schema_instruction(self._messages, self._response_format.schema)
        return list(self._messages)

    def build_payload(self) -> dict[str, Any]:
        """Build the request payload.

        Raises:
            ValidationError: If there are no messages
        """
        if not self._messages:
            raise ValidationError("At least one message is required", field="messages")

        config = self._client.config
        payload: dict[str, Any] = {
            "model": self._client.model_id,
            "messages": [m.to_dict() for m in self.build_messages()],
        }

        if self._response_format is not None:
            payload.update(self._response_format.to_payload())

        max_tokens = self._max_tokens if self._max_tokens is not None else config.default_max_tokens
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        temperature = (
            self._temperature if self._temperature is not None else config.default_temperature
        )
        if temperature is not None:
            payload["temperature"] = temperature

        if self._top_p is not None:
            payload["top_p"] = self._top_p
        if self._stop_sequences:
            payload["stop"] = self._stop_sequences

        payload.update(self._extra_params)
        return payload

    async def execute(self) -> ChatResponse:
        """Execute the chat request.

        Raises:
            UnsupportedModelError: Structured output on an unsupported model
            OutputValidationError: Output does not match the schema
        """
        response, _ = await self._client._execute_chat(self)
        return response

    async def execute_with_stats(self) -> tuple[ChatResponse, CallStats]:
        """Execute the chat request and return stats."""
        return await self._client._execute_chat(self)

    async def parse(self) -> Any:
        """Execute and return the validated output.

        Returns:
            A model instance for ``output_model``, the decoded JSON otherwise

        Raises:
            ValidationError: If no schema or model was set
            OutputValidationError: On refusal or invalid output
        """
        if not self.is_structured:
            raise ValidationError(
                "parse() requires json_schema() or output_model()",
                field="response_format",
            )
        response = await self.execute()
        return self._client._require_parsed(response)
