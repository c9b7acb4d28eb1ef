"""
Setup Reporter Pydantic Models Package

Models are organized by domain:
    - setup_event_model: setup events, per-event evaluations, cycle results
    - shift_break_model: the versioned shift break table
    - policy_model: limit table, retry policy and schedule target snapshots
"""

from .policy_model import LimitTable, RetryPolicy, ScheduleTarget
from .setup_event_model import CycleResult, SetupEvaluation, SetupEvent
from .shift_break_model import BreakSchedule, ShiftBreak

__all__ = [
    "LimitTable",
    "RetryPolicy",
    "ScheduleTarget",
    "CycleResult",
    "SetupEvaluation",
    "SetupEvent",
    "BreakSchedule",
    "ShiftBreak",
]
