"""
Worker utilities.

Pure helpers used by the report worker.
"""

from .scheduler_time_utils import (
    format_duration,
    next_run_time,
    parse_send_time,
    seconds_until_next_run,
    validate_wall_clock,
)

__all__ = [
    "format_duration",
    "next_run_time",
    "parse_send_time",
    "seconds_until_next_run",
    "validate_wall_clock",
]
