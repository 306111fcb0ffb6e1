"""Tests for retry utilities."""

from unittest.mock import AsyncMock, patch

import pytest

from ridesim.core.exceptions import NetworkError, TransientError, ValidationError
from ridesim.core.retry import RetryConfig, with_retry


@pytest.mark.unit
class TestRetryConfig:
    """Test RetryConfig defaults and customization."""

    def test_default_config(self):
        config = RetryConfig()
        assert config.max_attempts == 3
        assert config.base_delay == 0.5
        assert config.multiplier == 2.0
        assert config.max_delay == 30.0
        assert config.retryable_exceptions == (TransientError,)

    def test_exponential_delays_are_capped(self):
        config = RetryConfig(base_delay=1.0, multiplier=2.0, max_delay=3.0)
        assert [config.delay_for(i) for i in range(4)] == [1.0, 2.0, 3.0, 3.0]

    def test_fixed_config_uses_constant_delay(self):
        config = RetryConfig.fixed(3, 1.0, (NetworkError,))
        assert config.max_attempts == 3
        assert [config.delay_for(i) for i in range(3)] == [1.0, 1.0, 1.0]
        assert config.retryable_exceptions == (NetworkError,)


@pytest.mark.unit
class TestWithRetryAsync:
    """Test async retry functionality."""

    async def test_succeeds_on_first_attempt(self):
        operation = AsyncMock(return_value="success")

        result = await with_retry(operation)

        assert result == "success"
        assert operation.call_count == 1

    async def test_succeeds_after_transient_failures(self):
        call_count = 0

        async def flaky_operation():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise NetworkError("connection failed")
            return "success"

        result = await with_retry(flaky_operation, RetryConfig(base_delay=0.01))

        assert result == "success"
        assert call_count == 3

    async def test_raises_after_max_attempts(self):
        operation = AsyncMock(side_effect=NetworkError("down"))

        with pytest.raises(NetworkError):
            await with_retry(operation, RetryConfig(max_attempts=3, base_delay=0.0))

        assert operation.call_count == 3

    async def test_permanent_error_is_not_retried(self):
        operation = AsyncMock(side_effect=ValidationError("bad input"))

        with pytest.raises(ValidationError):
            await with_retry(operation, RetryConfig(base_delay=0.0))

        assert operation.call_count == 1

    async def test_sleeps_fixed_delay_between_attempts(self):
        operation = AsyncMock(side_effect=NetworkError("down"))

        with patch("ridesim.core.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(NetworkError):
                await with_retry(operation, RetryConfig.fixed(3, 1.0))

        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 1.0]
