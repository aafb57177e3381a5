"""
Resilience for structured-chat: retry with backoff.
"""

from structured_chat.resilience.retry import (
    JitterStrategy,
    RetryConfig,
    RetryPolicy,
    RetryResult,
    with_retry,
)

__all__ = [
    "JitterStrategy",
    "RetryConfig",
    "RetryPolicy",
    "RetryResult",
    "with_retry",
]
