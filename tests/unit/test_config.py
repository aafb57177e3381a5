"""Tests for provider configuration."""

from pathlib import Path

import pytest

from structured_chat.config import ProviderConfig, load_config
from structured_chat.errors import ConfigError


class TestProviderConfig:
    """Tests for ProviderConfig."""

    def test_defaults(self) -> None:
        config = ProviderConfig()
        assert config.base_url == "https://api.openai.com"
        assert config.chat_path == "/v1/chat/completions"
        assert config.api_key_env == "OPENAI_API_KEY"
        assert config.timeout_s == 30.0
        assert config.max_retries == 2
        assert config.unsupported_models == []
        assert config.inject_schema_instruction is False
        assert config.default_max_tokens is None

    def test_with_overrides_ignores_none(self) -> None:
        config = ProviderConfig().with_overrides(base_url=None, max_retries=5)
        assert config.base_url == "https://api.openai.com"
        assert config.max_retries == 5

    def test_with_overrides_validates(self) -> None:
        with pytest.raises(ConfigError):
            ProviderConfig().with_overrides(timeout_s=0)


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_file(self) -> None:
        assert load_config() == ProviderConfig()

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "structured-chat.yaml"
        path.write_text(
            "base_url: https://api.example.com\n"
            "max_retries: 4\n"
            "unsupported_models:\n"
            "  - legacy-chat\n"
        )

        config = load_config(path)
        assert config.base_url == "https://api.example.com"
        assert config.max_retries == 4
        assert config.unsupported_models == ["legacy-chat"]

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "sc.yaml"
        path.write_text("default_max_tokens: 256\n")
        monkeypatch.setenv("STRUCTURED_CHAT_CONFIG", str(path))

        assert load_config().default_max_tokens == 256

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment variables win over file values."""
        path = tmp_path / "sc.yaml"
        path.write_text("base_url: https://file.example.com\ntimeout_s: 5\n")
        monkeypatch.setenv("STRUCTURED_CHAT_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("STRUCTURED_CHAT_TIMEOUT_SECS", "12.5")
        monkeypatch.setenv("STRUCTURED_CHAT_PROXY", "http://proxy:3128")

        config = load_config(path)
        assert config.base_url == "https://env.example.com"
        assert config.timeout_s == 12.5
        assert config.proxy == "http://proxy:3128"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == ProviderConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "missing.yaml")
        assert exc_info.value.config_path.endswith("missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("base_url: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        path = tmp_path / "extra.yaml"
        path.write_text("base_url: https://x\nstreaming: true\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_invalid_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STRUCTURED_CHAT_TIMEOUT_SECS", "soon")
        with pytest.raises(ConfigError):
            load_config()
