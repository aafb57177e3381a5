"""
Configuration for structured-chat.
"""

from structured_chat.config.settings import CONFIG_PATH_ENV, ProviderConfig, load_config

__all__ = [
    "CONFIG_PATH_ENV",
    "ProviderConfig",
    "load_config",
]
