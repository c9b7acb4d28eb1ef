# backend/setup_reporter/workers/mixins/retry_manager.py
"""
Retry Manager for fallible network operations.

Runs an async operation up to ``max_attempts`` times with a fixed delay
between attempts. Used for the database and mailer start-up connections and
for the whole report cycle.

The loop is an explicit state machine:

    ATTEMPTING --success--> SUCCEEDED
    ATTEMPTING --failure, attempts left--> WAITING
    ATTEMPTING --failure, none left--> EXHAUSTED
    WAITING --delay elapsed--> ATTEMPTING
    WAITING --shutdown requested--> CANCELLED
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from ...enums import LogEmoji, LoggerName, RetryState
from ...exceptions import RetryCancelledError
from ...models.policy_model import RetryPolicy
from ...services.logger import get_service_logger

T = TypeVar("T")

logger = get_service_logger(LoggerName.RETRY_MANAGER, default_emoji=LogEmoji.RETRY)


class RetryManager:
    """
    Bounded, sequential retry of one async operation.

    Features:
    - At most one attempt in flight; each attempt sees the side effects
      (e.g. a reconnect) of the previous one
    - Fixed delay between attempts, interruptible by a shutdown event
    - The last error is re-raised unchanged once attempts are exhausted
    """

    def __init__(
        self,
        policy: RetryPolicy,
        shutdown_event: Optional[asyncio.Event] = None,
        operation_name: str = "operation",
    ):
        """
        Initialize retry manager.

        Args:
            policy: Attempts and delay to use
            shutdown_event: When set during a wait, remaining attempts are abandoned
            operation_name: Name used in log messages
        """
        self.policy = policy
        self.shutdown_event = shutdown_event
        self.operation_name = operation_name

        self.state = RetryState.ATTEMPTING
        self.attempts = 0
        self.last_error: Optional[Exception] = None

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute ``operation`` until it succeeds or attempts run out.

        Args:
            operation: Zero-argument callable returning a fresh awaitable per attempt

        Returns:
            The operation's result from the first successful attempt

        Raises:
            Exception: The last attempt's error once attempts are exhausted
            RetryCancelledError: If shutdown was requested while waiting
        """
        self.state = RetryState.ATTEMPTING
        self.attempts = 0
        self.last_error = None

        while True:
            self.attempts += 1
            try:
                result = await operation()
            except Exception as e:
                self.last_error = e
                self._on_failure(e)
            else:
                self.state = RetryState.SUCCEEDED
                if self.attempts > 1:
                    logger.info(
                        f"{self.operation_name} succeeded on attempt "
                        f"{self.attempts}/{self.policy.max_attempts}",
                        emoji=LogEmoji.SUCCESS,
                    )
                return result

            if self.state is RetryState.EXHAUSTED:
                raise self.last_error

            interrupted = await self._wait(self.policy.delay_seconds)
            if interrupted:
                self.state = RetryState.CANCELLED
                logger.warning(
                    f"Shutdown requested, abandoning {self.operation_name} "
                    f"after {self.attempts} attempt(s)",
                    emoji=LogEmoji.CANCELED,
                )
                raise RetryCancelledError(self.attempts, self.last_error) from self.last_error

            self.state = RetryState.ATTEMPTING

    def _on_failure(self, error: Exception) -> None:
        """Record a failed attempt and pick the next state."""
        logger.warning(
            f"Attempt {self.attempts} of {self.policy.max_attempts} for "
            f"{self.operation_name} failed: {error}"
        )
        if self.attempts >= self.policy.max_attempts:
            self.state = RetryState.EXHAUSTED
            logger.error(
                f"All {self.policy.max_attempts} attempts for {self.operation_name} failed",
                exception=error,
            )
            return

        self.state = RetryState.WAITING
        logger.info(f"Retrying {self.operation_name} in {self.policy.delay_seconds} seconds...")

    async def _wait(self, delay: float) -> bool:
        """
        Sleep between attempts.

        Returns:
            True if the shutdown event was set before the delay elapsed
        """
        if self.shutdown_event is None:
            await asyncio.sleep(delay)
            return False

        if self.shutdown_event.is_set():
            return True

        try:
            await asyncio.wait_for(self.shutdown_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    def get_stats(self) -> Dict[str, Any]:
        """
        Get retry manager configuration and last run state.

        Returns:
            Dictionary with policy and state information
        """
        return {
            "operation": self.operation_name,
            "state": self.state.value,
            "attempts": self.attempts,
            "max_attempts": self.policy.max_attempts,
            "delay_seconds": self.policy.delay_seconds,
            "last_error": str(self.last_error) if self.last_error else None,
        }

    def __repr__(self) -> str:
        """String representation of retry manager."""
        return (
            f"RetryManager(operation='{self.operation_name}', "
            f"max_attempts={self.policy.max_attempts}, "
            f"delay={self.policy.delay_seconds})"
        )


async def retry(
    policy: RetryPolicy,
    operation: Callable[[], Awaitable[T]],
    shutdown_event: Optional[asyncio.Event] = None,
    operation_name: str = "operation",
) -> T:
    """Run ``operation`` under a fresh RetryManager. See RetryManager.run."""
    manager = RetryManager(policy, shutdown_event, operation_name)
    return await manager.run(operation)
