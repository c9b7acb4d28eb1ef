"""
Centralized Logger Service for the setup reporter.

Configures loguru once per process with a console sink and a rotating file
sink, and hands out ServiceLogger instances that tag every record with a
logger name and an emoji.

Usage:
    from setup_reporter.services.logger import get_service_logger
    from setup_reporter.enums import LoggerName, LogEmoji

    logger = get_service_logger(LoggerName.MAILER, default_emoji=LogEmoji.MAIL)
    logger.info("Report sent")
    logger.error("Send failed", exception=e)
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from ...constants import (
    LOG_FILE_BASE_NAME,
    LOG_FILE_COMPRESSION,
    LOG_FILE_DIRECTORY,
    LOG_FILE_RETENTION,
    LOG_FILE_ROTATION,
    LOG_TIMESTAMP_FORMAT,
)
from ...enums import LogEmoji, LoggerName, LogLevel

CONSOLE_FORMAT = (
    "<green>{time:" + LOG_TIMESTAMP_FORMAT + "}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[logger_name]}</cyan> - <level>{message}</level>"
)
DEBUG_FORMAT = (
    "<green>{time:" + LOG_TIMESTAMP_FORMAT + "}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[logger_name]}</cyan> | "
    "{name}:{function}:{line} - <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:" + LOG_TIMESTAMP_FORMAT + "} | {level: <8} | "
    "{extra[logger_name]} | {name}:{function}:{line} - {message}"
)

FALLBACK_EMOJIS = {
    LogLevel.ERROR: LogEmoji.ERROR,
    LogLevel.WARNING: LogEmoji.WARNING,
    LogLevel.INFO: LogEmoji.INFO,
    LogLevel.DEBUG: LogEmoji.DEBUG,
}

logger.configure(extra={"logger_name": LoggerName.SYSTEM.value})


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    log_directory: str = LOG_FILE_DIRECTORY,
    log_file_name: str = LOG_FILE_BASE_NAME,
    enable_console: bool = True,
    enable_file_logging: bool = True,
) -> None:
    """
    Replace loguru's default sink with the reporter's console and file sinks.

    Args:
        level: Minimum level for both sinks
        log_directory: Directory for the rotating log file (created if missing)
        log_file_name: Log file name inside the directory
        enable_console: Write to stderr
        enable_file_logging: Write to the rotating file
    """
    logger.remove()
    is_debug = level in (LogLevel.DEBUG, LogLevel.TRACE)

    if enable_console:
        logger.add(
            sys.stderr,
            level=level.value,
            format=DEBUG_FORMAT if is_debug else CONSOLE_FORMAT,
            colorize=sys.stderr.isatty(),
            backtrace=is_debug,
            diagnose=False,
        )

    if enable_file_logging:
        directory = Path(log_directory)
        directory.mkdir(parents=True, exist_ok=True)
        logger.add(
            directory / log_file_name,
            level=level.value,
            format=FILE_FORMAT,
            rotation=LOG_FILE_ROTATION,
            retention=LOG_FILE_RETENTION,
            compression=LOG_FILE_COMPRESSION,
            encoding="utf-8",
            enqueue=True,
        )


class ServiceLogger:
    """
    Logger bound to one LoggerName.

    Emoji priority system (highest to lowest):
    1. Direct: emoji passed to the log method call
    2. Instance-set: default emoji given when the logger was created
    3. Fallback: emoji for the log level
    """

    def __init__(self, logger_name: LoggerName, default_emoji: Optional[LogEmoji] = None):
        self.logger_name = logger_name
        self.default_emoji = default_emoji
        self._logger = logger.bind(logger_name=logger_name.value)

    def _resolve_emoji(self, emoji: Optional[LogEmoji], level: LogLevel) -> LogEmoji:
        if emoji is not None:
            return emoji
        if self.default_emoji is not None:
            return self.default_emoji
        return FALLBACK_EMOJIS[level]

    def _log(
        self,
        level: LogLevel,
        message: str,
        emoji: Optional[LogEmoji],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        text = f"{self._resolve_emoji(emoji, level).value} {message}"
        if context:
            details = ", ".join(f"{key}={value}" for key, value in context.items())
            text = f"{text} [{details}]"
        # depth=2 attributes the record to the caller of info()/error()/...
        self._logger.opt(depth=2).log(level.value, text)

    def error(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        error_context: Optional[Dict[str, Any]] = None,
        emoji: Optional[LogEmoji] = None,
    ) -> None:
        """Log an error, appending the exception text when given."""
        if exception is not None:
            message = f"{message}: {exception!r}"
        self._log(LogLevel.ERROR, message, emoji, error_context)

    def warning(
        self,
        message: str,
        extra_context: Optional[Dict[str, Any]] = None,
        emoji: Optional[LogEmoji] = None,
    ) -> None:
        self._log(LogLevel.WARNING, message, emoji, extra_context)

    def info(
        self,
        message: str,
        extra_context: Optional[Dict[str, Any]] = None,
        emoji: Optional[LogEmoji] = None,
    ) -> None:
        self._log(LogLevel.INFO, message, emoji, extra_context)

    def debug(
        self,
        message: str,
        extra_context: Optional[Dict[str, Any]] = None,
        emoji: Optional[LogEmoji] = None,
    ) -> None:
        self._log(LogLevel.DEBUG, message, emoji, extra_context)


def get_service_logger(
    logger_name: LoggerName,
    default_emoji: Optional[LogEmoji] = None,
) -> ServiceLogger:
    """
    Factory function to create a pre-configured logger for a specific service.

    Args:
        logger_name: The logger name enum attached to every record
        default_emoji: Instance-level default emoji that overrides level fallbacks

    Returns:
        ServiceLogger instance with error, warning, info, debug methods
    """
    return ServiceLogger(logger_name, default_emoji)
