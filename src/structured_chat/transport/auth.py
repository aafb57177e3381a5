"""
API key resolution utilities.

Resolves the bearer token from:
1. Explicit value
2. The configured environment variable
3. STRUCTURED_CHAT_API_KEY
"""

from __future__ import annotations

import os

FALLBACK_KEY_ENV = "STRUCTURED_CHAT_API_KEY"


def resolve_api_key(
    explicit_key: str | None = None,
    env_var: str | None = None,
) -> str | None:
    """Resolve the API key.

    Args:
        explicit_key: Explicitly provided API key
        env_var: Environment variable named by the provider config

    Returns:
        Resolved API key or None if not found
    """
    if explicit_key:
        return explicit_key

    if env_var:
        key = os.getenv(env_var)
        if key:
            return key

    return os.getenv(FALLBACK_KEY_ENV) or None


def get_auth_header(api_key: str | None) -> dict[str, str]:
    """Build the bearer authentication header, or ``{}`` without a key."""
    if not api_key:
        return {}
    return {"Authorization": f"Bearer {api_key}"}
