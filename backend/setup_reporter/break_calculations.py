# backend/setup_reporter/break_calculations.py

from datetime import time
from typing import List, NamedTuple

from .constants import DEFAULT_BREAK_SCHEDULE, SECONDS_PER_DAY, SECONDS_PER_MINUTE
from .enums import BreakAttribution
from .models.shift_break_model import BreakSchedule, ShiftBreak, time_to_seconds

__all__ = [
    "BreakBoundary",
    "compute_break_minutes",
    "compute_break_minutes_on_timeline",
    "place_break_boundaries",
    "time_to_seconds",
]


class BreakBoundary(NamedTuple):
    """A break placed on the continuous timeline of one setup interval"""

    seconds: int
    shift_break: ShiftBreak


def place_break_boundaries(
    start_seconds: int,
    end_seconds: int,
    attribution: BreakAttribution,
    schedule: BreakSchedule = DEFAULT_BREAK_SCHEDULE,
) -> List[BreakBoundary]:
    """
    Position every break of the schedule on the interval's timeline.

    Boundaries move earlier by their start adjustment in AT_START mode. When
    the interval reaches into the next day, boundaries at or before the start
    are moved forward one day so that every comparison happens on a single
    monotonic timeline. All offsets are applied before any break is evaluated.

    Returns:
        Boundaries in the schedule's table order (day_1 .. night_3)
    """
    reaches_next_day = end_seconds >= SECONDS_PER_DAY
    boundaries = []

    for shift_break in schedule.breaks:
        seconds = shift_break.boundary_seconds
        if attribution is BreakAttribution.AT_START:
            seconds -= shift_break.start_adjustment_minutes * SECONDS_PER_MINUTE
        if reaches_next_day and seconds <= start_seconds:
            seconds += SECONDS_PER_DAY
        boundaries.append(BreakBoundary(seconds, shift_break))

    return boundaries


def compute_break_minutes_on_timeline(
    start_seconds: int,
    end_seconds: int,
    attribution: BreakAttribution,
    schedule: BreakSchedule = DEFAULT_BREAK_SCHEDULE,
) -> int:
    """
    Total break minutes inside (start, end] on a continuous timeline.

    ``end_seconds`` may exceed one day when the interval crosses midnight.
    Breaks are checked in the schedule's fixed table order, not by time. In
    AT_START mode every counted break extends the interval end by its own
    duration before the next break in the table is checked, so a later
    table entry can be reached only because an earlier one pushed the end
    out. AT_END mode never extends.

    Args:
        start_seconds: Interval start, seconds since midnight of the start day
        end_seconds: Interval end on the same timeline
        attribution: Where break consumption is charged
        schedule: Break table to use

    Returns:
        Break minutes attributable to the interval
    """
    total_minutes = 0
    effective_end = end_seconds

    for boundary in place_break_boundaries(
        start_seconds, end_seconds, attribution, schedule
    ):
        if start_seconds < boundary.seconds <= effective_end:
            duration = boundary.shift_break.duration_minutes
            total_minutes += duration
            if attribution is BreakAttribution.AT_START:
                effective_end += duration * SECONDS_PER_MINUTE

    return total_minutes


def compute_break_minutes(
    start: time,
    end: time,
    attribution: BreakAttribution,
    schedule: BreakSchedule = DEFAULT_BREAK_SCHEDULE,
) -> int:
    """
    Break minutes overlapping a setup interval given as two times of day.

    An ``end`` earlier than ``start`` means the interval crossed midnight;
    it is evaluated exactly like the pair (start, end + 24h).
    """
    start_seconds = time_to_seconds(start)
    end_seconds = time_to_seconds(end)
    if end_seconds < start_seconds:
        end_seconds += SECONDS_PER_DAY

    return compute_break_minutes_on_timeline(
        start_seconds, end_seconds, attribution, schedule
    )
