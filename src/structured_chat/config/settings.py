"""
Provider configuration.

Settings are resolved in order:
1. Built-in defaults
2. YAML file (explicit path or STRUCTURED_CHAT_CONFIG)
3. Environment overrides (STRUCTURED_CHAT_BASE_URL, STRUCTURED_CHAT_TIMEOUT_SECS,
   STRUCTURED_CHAT_PROXY)

Example config file::

    base_url: https://api.example.com
    api_key_env: EXAMPLE_API_KEY
    max_retries: 3
    unsupported_models:
      - legacy-chat-model
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from structured_chat.errors import ConfigError

CONFIG_PATH_ENV = "STRUCTURED_CHAT_CONFIG"

_ENV_OVERRIDES: dict[str, str] = {
    "STRUCTURED_CHAT_BASE_URL": "base_url",
    "STRUCTURED_CHAT_TIMEOUT_SECS": "timeout_s",
    "STRUCTURED_CHAT_PROXY": "proxy",
}


class ProviderConfig(BaseModel):
    """Connection and capability settings for the chat-completion API."""

    model_config = ConfigDict(extra="forbid")

    base_url: str = Field(
        default="https://api.openai.com", description="API host, without the endpoint path"
    )
    chat_path: str = Field(
        default="/v1/chat/completions", description="Chat completions endpoint path"
    )
    api_key_env: str = Field(
        default="OPENAI_API_KEY", description="Environment variable holding the bearer token"
    )
    timeout_s: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    proxy: str | None = Field(default=None, description="Proxy URL")
    max_retries: int = Field(default=2, ge=0, description="Retries for retryable errors")
    unsupported_models: list[str] = Field(
        default_factory=list,
        description="Models that do not support json_schema response_format",
    )
    inject_schema_instruction: bool = Field(
        default=False,
        description="Prepend the schema instruction to the system prompt client-side",
    )
    default_max_tokens: int | None = Field(default=None, gt=0)
    default_temperature: float | None = Field(default=None, ge=0)

    def with_overrides(self, **overrides: Any) -> ProviderConfig:
        """Return a copy with non-None overrides applied and re-validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return ProviderConfig.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid configuration override: {e}") from e


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            f"Cannot read config file: {e}", config_path=str(path)
        ) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", config_path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            "Config file must contain a mapping", config_path=str(path)
        )
    return data


def load_config(path: str | Path | None = None) -> ProviderConfig:
    """Load provider configuration.

    Args:
        path: Optional YAML file; falls back to STRUCTURED_CHAT_CONFIG

    Returns:
        Validated ProviderConfig

    Raises:
        ConfigError: If the file cannot be read or values are invalid
    """
    data: dict[str, Any] = {}
    source = path or os.getenv(CONFIG_PATH_ENV)
    if source:
        data.update(_read_yaml(Path(source)))

    for env_var, key in _ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            data[key] = value

    try:
        return ProviderConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(
            f"Invalid configuration: {e}",
            config_path=str(source) if source else None,
        ) from e
