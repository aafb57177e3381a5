"""Tests for resilience module."""

import pytest

from structured_chat.errors import ErrorClass, RemoteError, TransportError, ValidationError
from structured_chat.resilience import (
    JitterStrategy,
    RetryConfig,
    RetryPolicy,
    with_retry,
)


def _remote(error_class: ErrorClass, status: int = 503, retry_after: float | None = None) -> RemoteError:
    return RemoteError(
        "failed",
        status_code=status,
        error_class=error_class,
        retry_after=retry_after,
    )


def _fast(max_retries: int = 2) -> RetryConfig:
    return RetryConfig(
        max_retries=max_retries, min_delay_ms=1, max_delay_ms=2, jitter=JitterStrategy.NONE
    )


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_default_config(self) -> None:
        config = RetryConfig()
        assert config.max_retries == 2
        assert config.jitter == JitterStrategy.FULL

    def test_no_retry_config(self) -> None:
        assert RetryConfig.no_retry().max_retries == 0

    def test_calculate_delay_exponential(self) -> None:
        """Test exponential growth without jitter."""
        policy = RetryPolicy(
            RetryConfig(min_delay_ms=100, max_delay_ms=10000, jitter=JitterStrategy.NONE)
        )
        assert policy.calculate_delay(0) == pytest.approx(0.1)
        assert policy.calculate_delay(1) == pytest.approx(0.2)
        assert policy.calculate_delay(2) == pytest.approx(0.4)

    def test_calculate_delay_respects_max(self) -> None:
        policy = RetryPolicy(
            RetryConfig(min_delay_ms=1000, max_delay_ms=1500, jitter=JitterStrategy.NONE)
        )
        assert policy.calculate_delay(5) == pytest.approx(1.5)

    def test_full_jitter_bounds(self) -> None:
        policy = RetryPolicy(RetryConfig(min_delay_ms=100, jitter=JitterStrategy.FULL))
        for _ in range(20):
            assert 0 <= policy.calculate_delay(0) <= 0.1

    def test_calculate_delay_respects_retry_after(self) -> None:
        policy = RetryPolicy(RetryConfig(max_delay_ms=60000))
        assert policy.calculate_delay(0, retry_after=3.0) == 3.0

    def test_should_retry_by_class(self) -> None:
        policy = RetryPolicy(_fast())
        assert policy.should_retry(_remote(ErrorClass.RATE_LIMITED, 429), 0)
        assert policy.should_retry(_remote(ErrorClass.OVERLOADED), 0)
        assert not policy.should_retry(_remote(ErrorClass.INVALID_REQUEST, 400), 0)
        assert not policy.should_retry(_remote(ErrorClass.AUTHENTICATION, 401), 0)

    def test_should_retry_transport(self) -> None:
        policy = RetryPolicy(_fast())
        assert policy.should_retry(TransportError("down"), 0)
        disabled = RetryPolicy(RetryConfig(retry_on_transport_error=False))
        assert not disabled.should_retry(TransportError("down"), 0)

    def test_should_retry_max_retries(self) -> None:
        policy = RetryPolicy(_fast(max_retries=1))
        assert policy.should_retry(_remote(ErrorClass.SERVER_ERROR), 0)
        assert not policy.should_retry(_remote(ErrorClass.SERVER_ERROR), 1)

    @pytest.mark.asyncio
    async def test_execute_success(self) -> None:
        async def operation() -> str:
            return "ok"

        result = await RetryPolicy(_fast()).execute(operation)
        assert result.success
        assert result.value == "ok"
        assert result.attempts == 1
        assert result.retries == 0

    @pytest.mark.asyncio
    async def test_execute_retry_then_success(self) -> None:
        calls = 0
        retries: list[int] = []

        async def operation() -> str:
            nonlocal calls
            calls += 1
            if calls < 3:
                raise _remote(ErrorClass.SERVER_ERROR)
            return "ok"

        result = await RetryPolicy(_fast()).execute(
            operation, on_retry=lambda attempt, error, delay: retries.append(attempt)
        )
        assert result.success
        assert result.attempts == 3
        assert retries == [1, 2]

    @pytest.mark.asyncio
    async def test_execute_all_retries_fail(self) -> None:
        async def operation() -> str:
            raise _remote(ErrorClass.OVERLOADED)

        result = await RetryPolicy(_fast(max_retries=2)).execute(operation)
        assert not result.success
        assert result.attempts == 3
        assert isinstance(result.error, RemoteError)

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self) -> None:
        """Test non-network errors are not swallowed."""

        async def operation() -> str:
            raise ValidationError("bad request")

        with pytest.raises(ValidationError):
            await RetryPolicy(_fast()).execute(operation)

    @pytest.mark.asyncio
    async def test_with_retry_raises_last_error(self) -> None:
        async def operation() -> str:
            raise _remote(ErrorClass.INVALID_REQUEST, 400)

        with pytest.raises(RemoteError):
            await with_retry(operation, _fast())

    @pytest.mark.asyncio
    async def test_with_retry_returns_value(self) -> None:
        async def operation() -> int:
            return 7

        assert await with_retry(operation, _fast()) == 7
