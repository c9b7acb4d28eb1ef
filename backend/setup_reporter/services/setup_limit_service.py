# backend/setup_reporter/services/setup_limit_service.py
"""
Setup Limit Service - decides which setups took abnormally long.

A setup is reported when its productive minutes (elapsed time minus breaks
attributed at the start of the interval) exceed the machine's limit.
Machines missing from the limit table are compared against the default
limit; that fallback is policy, not an error.
"""

from typing import Iterable, List

from ..break_calculations import compute_break_minutes
from ..constants import DEFAULT_BREAK_SCHEDULE
from ..enums import BreakAttribution
from ..models.policy_model import LimitTable
from ..models.setup_event_model import SetupEvaluation, SetupEvent
from ..models.shift_break_model import BreakSchedule


class SetupLimitEvaluator:
    """
    Evaluates setup events against a limit table.

    The limit table is passed on every call and never cached, so a reloaded
    table takes effect on the next cycle.
    """

    def __init__(self, schedule: BreakSchedule = DEFAULT_BREAK_SCHEDULE):
        self.schedule = schedule

    def evaluate(self, event: SetupEvent, limits: LimitTable) -> SetupEvaluation:
        """
        Evaluate one event.

        Args:
            event: Parsed setup event
            limits: Current limit table snapshot

        Returns:
            SetupEvaluation with the inclusion decision and minute figures
        """
        start = event.start_setup_time.time()
        end = event.end_setup_time.time()
        raw_minutes = event.raw_minutes

        break_minutes = compute_break_minutes(
            start, end, BreakAttribution.AT_START, self.schedule
        )
        display_break_minutes = compute_break_minutes(
            start, end, BreakAttribution.AT_END, self.schedule
        )

        productive_minutes = raw_minutes - break_minutes
        limit = limits.get_limit(event.machine_id)

        return SetupEvaluation(
            event=event,
            included=productive_minutes > limit,
            raw_minutes=raw_minutes,
            break_minutes=break_minutes,
            productive_minutes=productive_minutes,
            reported_minutes=raw_minutes - display_break_minutes,
            limit=limit,
        )

    def filter_long_setups(
        self, events: Iterable[SetupEvent], limits: LimitTable
    ) -> List[SetupEvaluation]:
        """Evaluate events and keep the included ones in input order."""
        evaluations = (self.evaluate(event, limits) for event in events)
        return [evaluation for evaluation in evaluations if evaluation.included]
