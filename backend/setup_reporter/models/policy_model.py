# backend/setup_reporter/models/policy_model.py
"""
Policy Models - limits, retry and schedule values read from settings.

All of these are immutable snapshots built from the current settings at the
start of each cycle.
"""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LimitTable(BaseModel):
    """Per-machine allowed productive setup minutes with a fallback default."""

    model_config = ConfigDict(frozen=True)

    limits: Dict[str, int] = Field(
        default_factory=dict, description="Machine id (lower case) to minutes"
    )
    default_limit: int = Field(description="Limit for machines not in the table")

    @field_validator("limits")
    @classmethod
    def normalize_machine_ids(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Store machine ids lower-cased so lookups are case-insensitive"""
        return {machine.lower(): limit for machine, limit in v.items()}

    def get_limit(self, machine_id: str) -> int:
        """Return the machine's limit, or the default when it is not listed."""
        return self.limits.get(machine_id.lower(), self.default_limit)


class RetryPolicy(BaseModel):
    """Bounded retry settings: attempts and a fixed delay between them."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(ge=1, description="Total attempts including the first")
    delay_seconds: float = Field(ge=0, description="Pause between attempts")


class ScheduleTarget(BaseModel):
    """
    Daily wall-clock run time plus a delay added after reaching it.

    Hour and minute are not range-checked here; the scheduler validates them
    and raises ConfigError instead of clamping.
    """

    model_config = ConfigDict(frozen=True)

    hour: int
    minute: int
    post_delay_seconds: int = Field(default=0, ge=0)
