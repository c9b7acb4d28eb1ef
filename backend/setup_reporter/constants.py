# backend/setup_reporter/constants.py
"""
Global Constants for the setup reporter

Centralized location for all application constants to avoid hardcoded values
throughout the codebase.
"""

from datetime import time

from .enums import ShiftKind
from .models.shift_break_model import BreakSchedule, ShiftBreak

# =============================================================================
# CONFIGURATION
# =============================================================================

CONFIG_PATH_ENV_VAR = "SETUP_REPORTER_CONFIG"
DEFAULT_CONFIG_PATH = "config/config.toml"
ENV_PREFIX = "SETUP_REPORTER_"
ENV_NESTED_DELIMITER = "__"

# Seconds to wait before re-reading settings after the schedule could not be computed
CONFIG_ERROR_BACKOFF_SECONDS = 60

MASKED_SECRET = "********"
DESCRIBE_LABEL_WIDTH = 30

# =============================================================================
# REPORT
# =============================================================================

DEFAULT_SETUP_LIMIT_MINUTES = 240
DEFAULT_SEND_TIME = "08:00"
DEFAULT_REPORT_SUBJECT = "Daily long setup report"
DEFAULT_SENDER_NAME = "Setup Reporter"
REPORT_TEMPLATE_NAME = "long_setups_report.html"

# =============================================================================
# RETRY
# =============================================================================

MAX_RETRY_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 5

# =============================================================================
# DATABASE
# =============================================================================

DEFAULT_DB_PORT = 5432
DB_CONNECT_TIMEOUT_SECONDS = 15

# =============================================================================
# SMTP
# =============================================================================

DEFAULT_SMTP_PORT = 25
SMTP_TIMEOUT_SECONDS = 30
SMTP_SUCCESS_STATUS = 250

# =============================================================================
# LOGGING
# =============================================================================

LOG_FILE_DIRECTORY = "logs"
LOG_FILE_BASE_NAME = "setup_reporter.log"
LOG_FILE_ROTATION = "10 MB"
LOG_FILE_RETENTION = "30 days"
LOG_FILE_COMPRESSION = "gz"
LOG_TIMESTAMP_FORMAT = "DD.MM.YYYY HH:mm:ss.SSS"

# =============================================================================
# SHIFT BREAKS
# =============================================================================

SECONDS_PER_MINUTE = 60
SECONDS_PER_DAY = 24 * 60 * 60

# Day shift 08:00-20:00, night shift 20:00-08:00.
DEFAULT_BREAK_SCHEDULE = BreakSchedule(
    version="2024-01",
    breaks=(
        ShiftBreak(
            name="day_1",
            shift=ShiftKind.DAY,
            starts_at=time(9, 0),
            duration_minutes=15,
            start_adjustment_minutes=5,
        ),
        ShiftBreak(
            name="day_2",
            shift=ShiftKind.DAY,
            starts_at=time(12, 0),
            duration_minutes=30,
            start_adjustment_minutes=10,
        ),
        ShiftBreak(
            name="day_3",
            shift=ShiftKind.DAY,
            starts_at=time(17, 0),
            duration_minutes=15,
            start_adjustment_minutes=5,
        ),
        ShiftBreak(
            name="night_1",
            shift=ShiftKind.NIGHT,
            starts_at=time(21, 0),
            duration_minutes=15,
            start_adjustment_minutes=5,
        ),
        ShiftBreak(
            name="night_2",
            shift=ShiftKind.NIGHT,
            starts_at=time(0, 0),
            duration_minutes=30,
            start_adjustment_minutes=10,
        ),
        ShiftBreak(
            name="night_3",
            shift=ShiftKind.NIGHT,
            starts_at=time(5, 0),
            duration_minutes=15,
            start_adjustment_minutes=5,
        ),
    ),
)
