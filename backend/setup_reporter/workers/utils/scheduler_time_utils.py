# backend/setup_reporter/workers/utils/scheduler_time_utils.py
"""
Scheduler Time Utils

Pure helpers that turn the configured daily send time into a sleep duration
for the report worker. There is a single wake time for the whole process.

The next run is the send time today, or the same wall-clock time on the next
calendar day once today's has passed. Moving by a calendar day rather than a
fixed 24 hours keeps the wake time on the configured wall-clock time across
daylight-saving transitions.
"""

from datetime import datetime, timedelta, timezone
from typing import Tuple

from ...exceptions import ConfigError
from ...models.policy_model import ScheduleTarget


def parse_send_time(time_str: str) -> Tuple[int, int]:
    """
    Parse a "HH:MM" send time.

    Raises:
        ConfigError: If the string is malformed or out of range
    """
    parts = time_str.strip().split(":")
    if len(parts) != 2:
        raise ConfigError(f"Invalid time format '{time_str}', expected HH:MM")

    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError as e:
        raise ConfigError(f"Invalid time format '{time_str}', expected HH:MM") from e

    validate_wall_clock(hour, minute)
    return hour, minute


def validate_wall_clock(hour: int, minute: int) -> None:
    """Raise ConfigError for an hour outside 0-23 or a minute outside 0-59."""
    if not 0 <= hour <= 23:
        raise ConfigError(f"Invalid send hour {hour}, must be 0-23")
    if not 0 <= minute <= 59:
        raise ConfigError(f"Invalid send minute {minute}, must be 0-59")


def next_run_time(now: datetime, target: ScheduleTarget) -> datetime:
    """
    Next instant the wall clock shows the target time, strictly after now.

    The result carries now's tzinfo (or none, for a naive now).

    Raises:
        ConfigError: If the target hour or minute is out of range
    """
    validate_wall_clock(target.hour, target.minute)

    candidate = now.replace(
        hour=target.hour, minute=target.minute, second=0, microsecond=0
    )
    if candidate <= now:
        next_day = candidate.date() + timedelta(days=1)
        candidate = datetime.combine(next_day, candidate.timetz())
    return candidate


def seconds_until_next_run(now: datetime, target: ScheduleTarget) -> int:
    """
    Seconds to sleep until the next run, including the post-target delay.

    Any sub-second remainder is truncated. For aware datetimes the difference
    is measured in UTC so that a DST change between now and the next run is
    counted correctly.

    Raises:
        ConfigError: If the target hour or minute is out of range
    """
    candidate = next_run_time(now, target)

    if now.tzinfo is not None:
        delta = candidate.astimezone(timezone.utc) - now.astimezone(timezone.utc)
    else:
        delta = candidate - now

    return int(delta.total_seconds()) + target.post_delay_seconds


def format_duration(seconds: int) -> str:
    """Format a duration as HH:MM:SS for log output."""
    hours, remainder = divmod(max(seconds, 0), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
