# backend/setup_reporter/services/report_pipeline.py
"""
Report Pipeline - one fetch → evaluate → send cycle.

Cycle order is fixed: database reconnect, fetch, mail reconnect, send. The
mail step is only reached once the fetch has succeeded. The whole cycle is
the unit of retry: a failed fetch or send repeats every step.

Each collaborator sits behind its own asyncio.Lock, held across the
reconnect and the operation that follows it, so neither a concurrent
shutdown nor another caller can touch the resource mid-operation.
"""

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..config import DatabaseSettings, Settings, SmtpSettings
from ..enums import LogEmoji, LoggerName
from ..exceptions import ParseError, ReporterConnectionError
from ..models.setup_event_model import CycleResult, SetupEvaluation, SetupEvent
from ..services.logger import get_service_logger
from ..workers.mixins.retry_manager import retry
from .setup_limit_service import SetupLimitEvaluator

logger = get_service_logger(LoggerName.REPORT_PIPELINE, default_emoji=LogEmoji.REPORT)


class EventSource(Protocol):
    """Database collaborator."""

    def update_settings(self, settings: DatabaseSettings) -> None: ...

    async def reconnect(self) -> None: ...

    async def fetch_recent_events(self) -> List[Dict[str, Any]]: ...

    async def close(self) -> None: ...


class ReportSink(Protocol):
    """Mail collaborator."""

    def update_settings(self, settings: SmtpSettings) -> None: ...

    async def reconnect(self) -> None: ...

    async def send_report(
        self, subject: str, evaluations: Sequence[SetupEvaluation], sender_display_name: str
    ) -> None: ...

    async def close(self) -> None: ...


def parse_rows(rows: Sequence[Mapping[str, Any]]) -> Tuple[List[SetupEvent], int]:
    """
    Parse raw rows into events, skipping malformed ones.

    Returns:
        Parsed events in row order and the number of skipped rows
    """
    events = []
    skipped = 0
    for index, row in enumerate(rows):
        try:
            events.append(SetupEvent.from_row(row))
        except ParseError as e:
            skipped += 1
            logger.warning(f"Skipping row {index}: {e}", emoji=LogEmoji.SKIPPED)
    return events, skipped


class ReportPipeline:
    """Orchestrates one report cycle over the event source and the mailer."""

    def __init__(self, event_source: EventSource, mailer: ReportSink):
        self.event_source = event_source
        self.mailer = mailer
        self._db_lock = asyncio.Lock()
        self._mail_lock = asyncio.Lock()

    async def apply_settings(self, settings: Settings) -> None:
        """Hand the latest connection settings to both collaborators."""
        async with self._db_lock:
            self.event_source.update_settings(settings.database)
        async with self._mail_lock:
            self.mailer.update_settings(settings.smtp)

    async def connect(
        self, settings: Settings, shutdown_event: Optional[asyncio.Event] = None
    ) -> None:
        """
        Open both collaborators at start-up under the retry policy.

        Exhausted retries are logged, not raised: the first cycle's reconnect
        tries again.

        Raises:
            RetryCancelledError: If shutdown was requested while retrying
        """
        policy = settings.retry_policy()

        async with self._db_lock:
            try:
                await retry(
                    policy, self.event_source.reconnect, shutdown_event, "database connection"
                )
                logger.info("Database connection established", emoji=LogEmoji.CONNECTION)
            except ReporterConnectionError as e:
                logger.error("Database is unreachable, will retry on the next cycle", exception=e)

        async with self._mail_lock:
            try:
                await retry(policy, self.mailer.reconnect, shutdown_event, "mail server connection")
                logger.info("Mail client initialized", emoji=LogEmoji.CONNECTION)
            except ReporterConnectionError as e:
                logger.error("Mail client could not be initialized", exception=e)

    async def _soft_reconnect(self, resource: Any, resource_name: str) -> None:
        """Reconnect, logging a failure instead of raising it."""
        try:
            await resource.reconnect()
        except ReporterConnectionError as e:
            logger.warning(
                f"Could not reconnect to the {resource_name}, "
                f"continuing with the previous connection: {e}",
                emoji=LogEmoji.DISCONNECTED,
            )

    async def run_cycle(self, settings: Settings) -> CycleResult:
        """
        Run one cycle against a settings snapshot.

        Args:
            settings: Snapshot providing limits, break table and report texts

        Returns:
            CycleResult describing what was fetched and sent

        Raises:
            TransportError: If the fetch or the send fails
        """
        async with self._db_lock:
            await self._soft_reconnect(self.event_source, "database")
            rows = await self.event_source.fetch_recent_events()

        events, skipped = parse_rows(rows)
        evaluator = SetupLimitEvaluator(settings.shift_breaks)
        long_setups = evaluator.filter_long_setups(events, settings.limit_table())

        logger.info(
            f"Fetched {len(rows)} row(s), {len(events)} parsed, "
            f"{len(long_setups)} over their limit"
        )

        async with self._mail_lock:
            await self._soft_reconnect(self.mailer, "mail server")

            if not long_setups:
                logger.info("No long setups to report, skipping e-mail")
                return CycleResult(
                    fetched_rows=len(rows), skipped_rows=skipped, reported_events=0
                )

            await self.mailer.send_report(
                settings.report.subject,
                long_setups,
                sender_display_name=settings.report.sender_name,
            )

        return CycleResult(
            fetched_rows=len(rows),
            skipped_rows=skipped,
            reported_events=len(long_setups),
            sent=True,
        )

    async def run_with_retry(
        self,
        settings: Settings,
        shutdown_event: Optional[asyncio.Event] = None,
    ) -> CycleResult:
        """Run the cycle under the settings' retry policy."""
        return await retry(
            settings.retry_policy(),
            lambda: self.run_cycle(settings),
            shutdown_event=shutdown_event,
            operation_name="report cycle",
        )

    async def close(self) -> None:
        """Close both collaborators, waiting for any in-flight use to finish."""
        async with self._db_lock:
            await self.event_source.close()
        async with self._mail_lock:
            await self.mailer.close()
