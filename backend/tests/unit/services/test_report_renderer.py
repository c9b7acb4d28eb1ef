#!/usr/bin/env python3
"""
Unit tests for the HTML report renderer.
"""

from datetime import datetime

import pytest

from setup_reporter.models.policy_model import LimitTable
from setup_reporter.services.report_renderer import group_by_machine, render_report
from setup_reporter.services.setup_limit_service import SetupLimitEvaluator


@pytest.fixture
def evaluate(make_event):
    evaluator = SetupLimitEvaluator()
    table = LimitTable(limits={"mill-01": 60}, default_limit=240)

    def _evaluate(machine_id, setup_id, **kwargs):
        event = make_event(
            datetime(2024, 5, 14, 8, 50),
            datetime(2024, 5, 14, 11, 40),
            machine_id=machine_id,
            setup_id=setup_id,
            **kwargs,
        )
        return evaluator.evaluate(event, table)

    return _evaluate


@pytest.mark.unit
class TestReportRenderer:
    def test_groups_by_machine_in_first_appearance_order(self, evaluate):
        evaluations = [
            evaluate("LATHE-02", 1),
            evaluate("MILL-01", 2),
            evaluate("LATHE-02", 3),
        ]

        groups = group_by_machine(evaluations)

        assert [machine for machine, _ in groups] == ["LATHE-02", "MILL-01"]
        assert [e.event.setup_id for e in groups[0][1]] == [1, 3]

    def test_report_contains_event_details(self, evaluate):
        html = render_report([evaluate("MILL-01", 17)])

        assert "<h3>MILL-01</h3>" in html
        assert "Bracket A" in html
        assert "ORD-1001" in html
        assert "08:50:00 - 11:40:00" in html
        assert "155 min. excluding breaks, limit 60 min." in html

    def test_comment_is_escaped(self, evaluate):
        html = render_report(
            [evaluate("MILL-01", 1, operator_comment="<b>clamp</b> & jaws")]
        )

        assert "&lt;b&gt;clamp&lt;/b&gt; &amp; jaws" in html
        assert "<b>clamp</b>" not in html

    def test_empty_report_has_no_machine_blocks(self):
        assert "<h3>" not in render_report([])
