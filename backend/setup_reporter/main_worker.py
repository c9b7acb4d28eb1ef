#!/usr/bin/env python3
# backend/setup_reporter/main_worker.py
"""
Setup Reporter entry point.

Loads settings, configures logging, builds the database and mail
collaborators and runs the report worker until SIGINT or SIGTERM.

Start-up order:
1. Load settings (a failure here is fatal)
2. Configure loguru sinks from the general settings
3. Connect the database and mailer under the retry policy
4. Run the report loop until shutdown is requested
"""

import asyncio
import signal
import sys
from typing import Optional

from .config import SettingsStore
from .database.event_source import SetupEventSource
from .enums import LogEmoji, LoggerName
from .exceptions import ConfigError
from .services.logger import configure_logging, get_service_logger
from .services.mailer import ReportMailer
from .services.report_pipeline import ReportPipeline
from .workers.report_worker import ReportWorker

logger = get_service_logger(LoggerName.SYSTEM, default_emoji=LogEmoji.SYSTEM)


def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop, shutdown_event: asyncio.Event
) -> None:
    """Route SIGINT and SIGTERM to the shutdown event."""

    def _signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down gracefully...",
            emoji=LogEmoji.SHUTDOWN,
        )
        loop.call_soon_threadsafe(shutdown_event.set)

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)


async def main(settings_store: Optional[SettingsStore] = None) -> int:
    """
    Run the reporter until shutdown.

    Returns:
        Process exit code
    """
    if settings_store is None:
        try:
            settings_store = SettingsStore.from_loader()
        except ConfigError as e:
            logger.error("Failed to load settings, exiting", exception=e)
            return 1

    settings = settings_store.current
    configure_logging(
        level=settings.general.log_level,
        log_directory=settings.general.log_directory,
        log_file_name=settings.general.log_file_name,
    )
    logger.info("Setup reporter starting", emoji=LogEmoji.STARTUP)

    shutdown_event = asyncio.Event()
    _install_signal_handlers(asyncio.get_running_loop(), shutdown_event)

    pipeline = ReportPipeline(
        SetupEventSource(settings.database), ReportMailer(settings.smtp)
    )
    worker = ReportWorker(settings_store, pipeline, shutdown_event)

    try:
        await worker.start()
        await worker.run()
    except Exception as e:
        logger.error("Report worker stopped unexpectedly", exception=e)
        return 1
    finally:
        await worker.stop()
        logger.info("Setup reporter finished", emoji=LogEmoji.SHUTDOWN)

    return 0


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")


if __name__ == "__main__":
    run()
