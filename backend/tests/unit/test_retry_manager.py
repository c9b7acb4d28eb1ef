#!/usr/bin/env python3
"""
Unit tests for RetryManager.

Tests the attempt count, delays between attempts, propagation of the last
error and cancellation through the shutdown event.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from setup_reporter.enums import RetryState
from setup_reporter.exceptions import (
    RetryCancelledError,
    ReporterConnectionError,
    TransportError,
)
from setup_reporter.models.policy_model import RetryPolicy
from setup_reporter.workers.mixins.retry_manager import RetryManager, retry

SLEEP_PATH = "setup_reporter.workers.mixins.retry_manager.asyncio.sleep"


class FlakyOperation:
    """Callable failing with the given errors before succeeding."""

    def __init__(self, *errors: Exception, result: str = "ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.mark.unit
class TestRetryManager:
    """Test suite for bounded retries."""

    @pytest.fixture
    def policy(self):
        return RetryPolicy(max_attempts=3, delay_seconds=5)

    @pytest.mark.asyncio
    async def test_first_attempt_success_does_not_sleep(self, policy):
        operation = FlakyOperation()

        with patch(SLEEP_PATH, new_callable=AsyncMock) as mock_sleep:
            result = await retry(policy, operation)

        assert result == "ok"
        assert operation.calls == 1
        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_succeeds_on_third_attempt(self, policy):
        operation = FlakyOperation(TransportError("one"), TransportError("two"))

        with patch(SLEEP_PATH, new_callable=AsyncMock) as mock_sleep:
            result = await retry(policy, operation)

        assert result == "ok"
        assert operation.calls == 3
        assert mock_sleep.await_count == 2
        assert all(call.args == (5,) for call in mock_sleep.await_args_list)

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_last_error(self):
        policy = RetryPolicy(max_attempts=2, delay_seconds=5)
        first, second = ReporterConnectionError("first"), ReporterConnectionError("second")
        operation = FlakyOperation(first, second)

        with patch(SLEEP_PATH, new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(ReporterConnectionError) as exc_info:
                await retry(policy, operation)

        assert exc_info.value is second
        assert operation.calls == 2
        assert mock_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_single_attempt_policy_never_sleeps(self):
        policy = RetryPolicy(max_attempts=1, delay_seconds=5)
        operation = FlakyOperation(TransportError("down"))

        with patch(SLEEP_PATH, new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(TransportError):
                await retry(policy, operation)

        assert operation.calls == 1
        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_state_after_exhaustion(self):
        manager = RetryManager(RetryPolicy(max_attempts=2, delay_seconds=0), operation_name="fetch")
        operation = FlakyOperation(TransportError("a"), TransportError("b"))

        with pytest.raises(TransportError):
            await manager.run(operation)

        stats = manager.get_stats()
        assert manager.state is RetryState.EXHAUSTED
        assert stats["attempts"] == 2
        assert stats["last_error"] == "b"
        assert stats["operation"] == "fetch"

    @pytest.mark.asyncio
    async def test_shutdown_during_wait_cancels_retries(self, policy):
        shutdown_event = asyncio.Event()
        shutdown_event.set()
        error = TransportError("down")
        operation = FlakyOperation(error, error, error)
        manager = RetryManager(policy, shutdown_event, "report cycle")

        with pytest.raises(RetryCancelledError) as exc_info:
            await manager.run(operation)

        assert operation.calls == 1
        assert exc_info.value.attempts == 1
        assert exc_info.value.last_error is error
        assert manager.state is RetryState.CANCELLED

    @pytest.mark.asyncio
    async def test_unset_shutdown_event_waits_out_delay(self):
        policy = RetryPolicy(max_attempts=2, delay_seconds=0.01)
        operation = FlakyOperation(TransportError("down"))

        result = await retry(policy, operation, shutdown_event=asyncio.Event())

        assert result == "ok"
        assert operation.calls == 2

    @pytest.mark.asyncio
    async def test_shutdown_set_mid_wait_interrupts(self):
        policy = RetryPolicy(max_attempts=3, delay_seconds=30)
        shutdown_event = asyncio.Event()
        operation = FlakyOperation(TransportError("down"), TransportError("down"))

        async def request_shutdown():
            await asyncio.sleep(0.01)
            shutdown_event.set()

        setter = asyncio.create_task(request_shutdown())
        with pytest.raises(RetryCancelledError):
            await asyncio.wait_for(retry(policy, operation, shutdown_event), timeout=5)
        await setter

        assert operation.calls == 1
