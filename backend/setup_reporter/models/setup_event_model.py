# backend/setup_reporter/models/setup_event_model.py
"""
Setup Event Models

SetupEvent is built from one database row and is immutable afterwards.
SetupEvaluation carries the limit decision for one event; CycleResult
summarises one successful report cycle.
"""

from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..enums import CycleOutcome
from ..exceptions import ParseError

ROW_FIELDS = (
    "part_name",
    "setup_id",
    "order_id",
    "machine_id",
    "operator",
    "start_setup_time",
    "end_setup_time",
    "operator_comment",
    "downtime_minutes",
)


class SetupEvent(BaseModel):
    """One recorded machine changeover interval."""

    model_config = ConfigDict(frozen=True)

    part_name: str
    setup_id: int
    order_id: str
    machine_id: str
    operator: str
    start_setup_time: datetime = Field(description="Naive local timestamp")
    end_setup_time: datetime = Field(
        description="Naive local timestamp at which machining started"
    )
    operator_comment: str
    downtime_minutes: float = Field(description="Reported stoppages during setup")

    @field_validator("start_setup_time", "end_setup_time")
    @classmethod
    def ensure_naive_local(cls, v: datetime) -> datetime:
        """Convert aware timestamps to naive local time"""
        if v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SetupEvent":
        """
        Build an event from a database row.

        Args:
            row: Mapping with the keys listed in ROW_FIELDS

        Returns:
            Parsed SetupEvent

        Raises:
            ParseError: If a field is missing, null or of the wrong type
        """
        missing = [name for name in ROW_FIELDS if row.get(name) is None]
        if missing:
            raise ParseError(f"Missing fields: {', '.join(missing)}")

        try:
            return cls.model_validate({name: row[name] for name in ROW_FIELDS})
        except ValidationError as e:
            raise ParseError(f"Invalid row: {e}") from e

    @property
    def raw_minutes(self) -> int:
        """Elapsed setup time in whole minutes, truncated toward zero."""
        delta = self.end_setup_time - self.start_setup_time
        return int(delta.total_seconds() / 60)


class SetupEvaluation(BaseModel):
    """Limit decision for one setup event."""

    model_config = ConfigDict(frozen=True)

    event: SetupEvent
    included: bool = Field(description="Productive minutes exceed the limit")
    raw_minutes: int
    break_minutes: int = Field(description="Breaks attributed at setup start")
    productive_minutes: int = Field(description="Used for the limit comparison")
    reported_minutes: int = Field(
        description="Raw minutes minus breaks attributed at setup end, for display"
    )
    limit: int


class CycleResult(BaseModel):
    """Summary of one successful report cycle."""

    fetched_rows: int = 0
    skipped_rows: int = 0
    reported_events: int = 0
    sent: bool = False

    @property
    def outcome(self) -> CycleOutcome:
        return CycleOutcome.SENT if self.sent else CycleOutcome.NOTHING_TO_REPORT
