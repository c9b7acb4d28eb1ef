"""
Centralized Logger Service Module.

Usage:
    from setup_reporter.services.logger import configure_logging, get_service_logger
    from setup_reporter.enums import LogLevel, LoggerName

    configure_logging(LogLevel.INFO)
    logger = get_service_logger(LoggerName.REPORT_WORKER)
"""

from ...enums import LogEmoji, LoggerName, LogLevel
from .logger_service import ServiceLogger, configure_logging, get_service_logger

__all__ = [
    "ServiceLogger",
    "configure_logging",
    "get_service_logger",
    # Enums
    "LogEmoji",
    "LoggerName",
    "LogLevel",
]
