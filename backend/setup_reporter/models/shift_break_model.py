# backend/setup_reporter/models/shift_break_model.py
"""
Shift Break Pydantic Models

The break table is versioned configuration data: the calculator only reads a
BreakSchedule, so a changed table can be reviewed and tested on its own.
"""

from datetime import time
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..enums import ShiftKind

BREAKS_PER_SHIFT = 3


def time_to_seconds(value: time) -> int:
    """Seconds since midnight, ignoring microseconds."""
    return value.hour * 3600 + value.minute * 60 + value.second


class ShiftBreak(BaseModel):
    """One scheduled, fixed-duration pause within a shift."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique break name, e.g. day_1")
    shift: ShiftKind = Field(description="Shift the break belongs to")
    starts_at: time = Field(description="Canonical time of day the break begins")
    duration_minutes: int = Field(gt=0, description="Length of the break")
    start_adjustment_minutes: int = Field(
        default=0,
        ge=0,
        description="How far the boundary moves earlier when breaks are "
        "attributed at the start of the setup interval",
    )

    @property
    def boundary_seconds(self) -> int:
        """Canonical boundary as seconds since midnight."""
        return time_to_seconds(self.starts_at)


class BreakSchedule(BaseModel):
    """
    Ordered set of six shift breaks: three day-shift then three night-shift.

    The order of ``breaks`` is the fixed order in which the calculator
    checks them.
    """

    model_config = ConfigDict(frozen=True)

    version: str = Field(description="Label identifying this revision of the table")
    breaks: Tuple[ShiftBreak, ...] = Field(description="Day breaks first, then night")

    @field_validator("breaks")
    @classmethod
    def validate_breaks(cls, v: Tuple[ShiftBreak, ...]) -> Tuple[ShiftBreak, ...]:
        """Require three day breaks followed by three night breaks, uniquely named"""
        names = [b.name for b in v]
        if len(set(names)) != len(names):
            raise ValueError(f"Break names must be unique, got {names}")

        shifts = [b.shift for b in v]
        expected = [ShiftKind.DAY] * BREAKS_PER_SHIFT + [ShiftKind.NIGHT] * BREAKS_PER_SHIFT
        if shifts != expected:
            raise ValueError(
                "Break schedule must list exactly three day-shift breaks "
                "followed by three night-shift breaks"
            )
        return v

    def describe(self) -> str:
        """Single-line summary for log output."""
        parts = [
            f"{b.name}@{b.starts_at.strftime('%H:%M')}/{b.duration_minutes}m"
            for b in self.breaks
        ]
        return f"{self.version}: " + ", ".join(parts)
