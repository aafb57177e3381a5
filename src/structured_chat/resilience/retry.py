"""
Retry policy with exponential backoff and jitter.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from structured_chat.errors import ErrorClass, RemoteError, TransportError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


class JitterStrategy(str, Enum):
    """Jitter strategy for retry delays."""

    NONE = "none"
    FULL = "full"
    EQUAL = "equal"


@dataclass
class RetryConfig:
    """Configuration for retry policy.

    Attributes:
        max_retries: Maximum number of retry attempts (0 = no retries)
        min_delay_ms: Base delay before the first retry in milliseconds
        max_delay_ms: Maximum delay between retries in milliseconds
        jitter: Jitter strategy (none, full, equal)
        retry_on_error_class: Remote error classes to retry on
        retry_on_transport_error: Whether network failures are retried
    """

    max_retries: int = 2
    min_delay_ms: int = 500
    max_delay_ms: int = 30000
    jitter: JitterStrategy = JitterStrategy.FULL
    retry_on_error_class: set[ErrorClass] = field(
        default_factory=lambda: {
            ErrorClass.RATE_LIMITED,
            ErrorClass.TIMEOUT,
            ErrorClass.SERVER_ERROR,
            ErrorClass.OVERLOADED,
        }
    )
    retry_on_transport_error: bool = True
    exponential_base: float = 2.0

    @classmethod
    def no_retry(cls) -> RetryConfig:
        """Create a config that disables retries."""
        return cls(max_retries=0)


@dataclass
class RetryResult:
    """Result of a retry operation.

    Attributes:
        success: Whether the operation succeeded
        value: The result value (if success)
        error: The last error (if failed)
        attempts: Number of attempts made
        total_delay_ms: Total delay from retries in milliseconds
    """

    success: bool
    value: Any = None
    error: Exception | None = None
    attempts: int = 0
    total_delay_ms: float = 0.0

    @property
    def retries(self) -> int:
        return max(self.attempts - 1, 0)


class RetryPolicy:
    """Retry policy with exponential backoff and jitter.

    Example:
        >>> policy = RetryPolicy(RetryConfig(max_retries=3))
        >>> result = await policy.execute(send_request)
        >>> if not result.success:
        ...     raise result.error
    """

    def __init__(self, config: RetryConfig | None = None) -> None:
        self._config = config or RetryConfig()

    @property
    def config(self) -> RetryConfig:
        return self._config

    def calculate_delay(self, attempt: int, retry_after: float | None = None) -> float:
        """Calculate delay for a retry attempt.

        Args:
            attempt: Current attempt number (0-based)
            retry_after: Optional retry-after hint from server

        Returns:
            Delay in seconds
        """
        if retry_after is not None and retry_after > 0:
            return min(retry_after, self._config.max_delay_ms / 1000.0)

        base_delay_ms = self._config.min_delay_ms * (
            self._config.exponential_base ** attempt
        )
        base_delay_ms = min(base_delay_ms, self._config.max_delay_ms)

        if self._config.jitter == JitterStrategy.FULL:
            delay_ms = random.uniform(0, base_delay_ms)
        elif self._config.jitter == JitterStrategy.EQUAL:
            delay_ms = base_delay_ms / 2 + random.uniform(0, base_delay_ms / 2)
        else:
            delay_ms = base_delay_ms

        return delay_ms / 1000.0

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """Check if an error should trigger a retry.

        Args:
            error: The exception that occurred
            attempt: Current attempt number (0-based)
        """
        if attempt >= self._config.max_retries:
            return False

        if isinstance(error, RemoteError):
            return error.error_class in self._config.retry_on_error_class

        if isinstance(error, TransportError):
            return self._config.retry_on_transport_error

        return False

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        on_retry: Callable[[int, Exception, float], None] | None = None,
    ) -> RetryResult:
        """Execute an operation with retry.

        Args:
            operation: Async operation to execute
            on_retry: Optional callback called before each retry with
                (attempt, error, delay)

        Returns:
            RetryResult with success status and value/error
        """
        total_delay = 0.0
        attempt = 0

        while True:
            try:
                value = await operation()
            except (RemoteError, TransportError) as e:
                attempt += 1
                if not self.should_retry(e, attempt - 1):
                    return RetryResult(
                        success=False,
                        error=e,
                        attempts=attempt,
                        total_delay_ms=total_delay * 1000,
                    )

                retry_after = e.retry_after if isinstance(e, RemoteError) else None
                delay = self.calculate_delay(attempt - 1, retry_after)
                total_delay += delay

                if on_retry:
                    on_retry(attempt, e, delay)

                await asyncio.sleep(delay)
            else:
                return RetryResult(
                    success=True,
                    value=value,
                    attempts=attempt + 1,
                    total_delay_ms=total_delay * 1000,
                )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    on_retry: Callable[[int, Exception, float], None] | None = None,
) -> T:
    """Execute an operation with retry, raising the last error on failure."""
    result = await RetryPolicy(config).execute(operation, on_retry)
    if not result.success:
        raise result.error  # type: ignore[misc]
    return result.value
