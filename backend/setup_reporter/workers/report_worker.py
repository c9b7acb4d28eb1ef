# backend/setup_reporter/workers/report_worker.py
"""
Report Worker - the process's single control loop.

Each iteration asks the scheduler how long to sleep, sleeps until the daily
send time (plus the configured delay), reloads settings and runs one report
cycle under the retry policy. Only one cycle ever runs at a time.

A shutdown request interrupts the sleep and the waits between retry
attempts. An attempt already in progress is allowed to finish so a report
is never cut off mid-send.
"""

import asyncio
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from ..config import Settings, SettingsStore
from ..constants import CONFIG_ERROR_BACKOFF_SECONDS
from ..enums import CycleOutcome, LogEmoji, LoggerName
from ..exceptions import ConfigError, RetryCancelledError
from ..models.setup_event_model import CycleResult
from ..services.report_pipeline import ReportPipeline
from .base_worker import BaseWorker
from .utils.scheduler_time_utils import (
    format_duration,
    next_run_time,
    seconds_until_next_run,
)


class ReportWorker(BaseWorker):
    """
    Scheduled worker that sends the daily long-setup report.

    Responsibilities:
    - Compute the next wake time from the current settings snapshot
    - Reload settings between cycles, keeping the old ones on failure
    - Run the report pipeline under the retry policy
    - Track cycle outcomes for status reporting
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        pipeline: ReportPipeline,
        shutdown_event: Optional[asyncio.Event] = None,
        clock: Optional[Callable[[Settings], datetime]] = None,
    ):
        """
        Initialize the report worker.

        Args:
            settings_store: Holder of the current settings snapshot
            pipeline: Report pipeline over the database and mailer
            shutdown_event: Event that ends the loop when set
            clock: Returns "now" for a settings snapshot (defaults to Settings.general.now)
        """
        super().__init__("ReportWorker", LoggerName.REPORT_WORKER)
        self.settings_store = settings_store
        self.pipeline = pipeline
        self.shutdown_event = shutdown_event or asyncio.Event()
        self._clock = clock or (lambda settings: settings.general.now())

        self.next_run_at: Optional[datetime] = None
        self.last_run_at: Optional[datetime] = None
        self.last_outcome: Optional[CycleOutcome] = None
        self.last_result: Optional[CycleResult] = None
        self.cycles_succeeded = 0
        self.cycles_failed = 0

    async def initialize(self) -> None:
        """Connect the database and mailer, retrying per the settings."""
        settings = self.settings_store.current
        self.log_debug(f"Starting with settings:{settings.describe()}")
        await self.pipeline.apply_settings(settings)
        try:
            await self.pipeline.connect(settings, self.shutdown_event)
        except RetryCancelledError:
            self.log_warning("Shutdown requested during start-up connections")

    async def cleanup(self) -> None:
        """Close the database and mailer once any in-flight use has finished."""
        await self.pipeline.close()

    def request_shutdown(self) -> None:
        """Ask the loop to stop; an attempt in progress still completes."""
        self.shutdown_event.set()

    async def _sleep(self, seconds: float) -> bool:
        """
        Sleep unless shutdown is requested first.

        Returns:
            True if shutdown was requested
        """
        if self.shutdown_event.is_set():
            return True
        try:
            await asyncio.wait_for(self.shutdown_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    def compute_delay(self, settings: Settings) -> int:
        """
        Seconds until the next report, logging the planned time.

        Raises:
            ConfigError: If the configured send time is invalid
        """
        target = settings.schedule_target()
        now = self._clock(settings)
        delay = seconds_until_next_run(now, target)
        self.next_run_at = next_run_time(now, target)

        self.log_info(
            f"Next report: {self.next_run_at.strftime('%d.%m.%y %H:%M:%S')}, "
            f"in {format_duration(delay)}",
            emoji=LogEmoji.SCHEDULER,
        )
        return delay

    async def run_cycle_once(self) -> CycleOutcome:
        """Run one report cycle with retries and record its outcome."""
        settings = self.settings_store.current
        await self.pipeline.apply_settings(settings)
        self.last_run_at = self._clock(settings)

        try:
            result = await self.pipeline.run_with_retry(settings, self.shutdown_event)
        except RetryCancelledError as e:
            self.last_outcome = CycleOutcome.CANCELLED
            self.log_warning(f"Report cycle abandoned: {e}", emoji=LogEmoji.CANCELED)
            return self.last_outcome
        except Exception as e:
            # Exhausted retries end this cycle only; the loop schedules the next one
            self.cycles_failed += 1
            self.last_outcome = CycleOutcome.FAILED
            self.log_error("All attempts to send the report failed", e)
            return self.last_outcome

        self.cycles_succeeded += 1
        self.last_result = result
        self.last_outcome = result.outcome
        if result.sent:
            self.log_info("Report sent successfully", emoji=LogEmoji.SUCCESS)
        else:
            self.log_info("Cycle completed, nothing to report", emoji=LogEmoji.SUCCESS)
        return self.last_outcome

    async def run(self) -> None:
        """Main loop: sleep until the send time, reload, run a cycle, repeat."""
        while self.running and not self.shutdown_event.is_set():
            try:
                delay = self.compute_delay(self.settings_store.current)
            except ConfigError as e:
                self.log_error(
                    f"Could not compute the next send time, re-reading settings "
                    f"in {CONFIG_ERROR_BACKOFF_SECONDS} seconds",
                    e,
                )
                if await self._sleep(CONFIG_ERROR_BACKOFF_SECONDS):
                    break
                self.settings_store.reload()
                continue

            if await self._sleep(delay):
                break

            self.settings_store.reload()
            await self.run_cycle_once()

        self.log_info("Report loop finished", emoji=LogEmoji.SHUTDOWN)

    def get_status(self) -> Dict[str, Any]:
        """
        Get current worker status.

        Returns:
            Dictionary with schedule and cycle statistics
        """
        status = super().get_status()
        status.update(
            {
                "next_run_at": self.next_run_at.isoformat() if self.next_run_at else None,
                "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
                "last_outcome": self.last_outcome.value if self.last_outcome else None,
                "cycles_succeeded": self.cycles_succeeded,
                "cycles_failed": self.cycles_failed,
                "shutdown_requested": self.shutdown_event.is_set(),
            }
        )
        return status
