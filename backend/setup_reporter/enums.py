# backend/setup_reporter/enums.py
"""
Application Enums - Centralized enum definitions.

Kept separate from constants.py and the models so that both can import
them without creating circular dependencies.
"""

from enum import Enum


# =============================================================================
# LOGGING
# =============================================================================


class LogLevel(str, Enum):
    """Log level constants for centralized logging system."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggerName(str, Enum):
    """Logger name constants for categorizing log entries."""

    SYSTEM = "system"
    CONFIG = "config"
    REPORT_WORKER = "report_worker"
    REPORT_PIPELINE = "report_pipeline"
    RETRY_MANAGER = "retry_manager"
    EVENT_SOURCE = "event_source"
    MAILER = "mailer"


class LogEmoji(str, Enum):
    """Type-safe emoji constants for log messages."""

    # Status emojis
    SUCCESS = "✅"
    FAILED = "❌"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"
    DEBUG = "🐞"
    CANCELED = "🚫"

    # Work emojis
    PROCESSING = "🔄"
    RETRY = "🔁"
    SKIPPED = "⏭️"

    # System emojis
    SYSTEM = "⚙️"
    STARTUP = "🚀"
    SHUTDOWN = "🛑"

    # Resource emojis
    DATABASE = "🗄️"
    CONNECTION = "🟢"
    DISCONNECTED = "🔴"
    MAIL = "📧"

    # Worker emojis
    SCHEDULER = "⏰"
    REPORT = "📊"


# =============================================================================
# SHIFT BREAKS
# =============================================================================


class ShiftKind(str, Enum):
    """Shift a scheduled break belongs to."""

    DAY = "day"
    NIGHT = "night"


class BreakAttribution(str, Enum):
    """
    Where break consumption is attributed within a setup interval.

    AT_START shifts every break boundary earlier by its adjustment and lets a
    counted break push the interval end out before later breaks are checked.
    AT_END uses the canonical boundaries and never extends the interval.
    """

    AT_START = "at_start"
    AT_END = "at_end"


# =============================================================================
# WORKER STATE
# =============================================================================


class RetryState(str, Enum):
    """States of the bounded retry loop."""

    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


class CycleOutcome(str, Enum):
    """Outcome of one scheduled report cycle."""

    SENT = "sent"
    NOTHING_TO_REPORT = "nothing_to_report"
    FAILED = "failed"
    CANCELLED = "cancelled"
