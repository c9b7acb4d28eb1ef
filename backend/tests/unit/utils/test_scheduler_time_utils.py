#!/usr/bin/env python3
"""
Unit tests for the report scheduler time helpers.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from setup_reporter.exceptions import ConfigError
from setup_reporter.models.policy_model import ScheduleTarget
from setup_reporter.workers.utils.scheduler_time_utils import (
    format_duration,
    next_run_time,
    parse_send_time,
    seconds_until_next_run,
)

SECONDS_PER_DAY = 86400


@pytest.mark.unit
class TestParseSendTime:
    def test_valid_time(self):
        assert parse_send_time("08:00") == (8, 0)
        assert parse_send_time(" 23:59 ") == (23, 59)
        assert parse_send_time("0:05") == (0, 5)

    @pytest.mark.parametrize("value", ["8", "08:00:00", "ab:cd", "", "24:00", "12:60", "-1:00"])
    def test_invalid_time_raises_config_error(self, value):
        with pytest.raises(ConfigError):
            parse_send_time(value)


@pytest.mark.unit
class TestSecondsUntilNextRun:
    def test_target_later_today(self):
        now = datetime(2024, 5, 14, 7, 59, 30)
        target = ScheduleTarget(hour=8, minute=0, post_delay_seconds=3600)

        assert seconds_until_next_run(now, target) == 3630

    def test_one_hour_ahead_with_post_delay(self):
        now = datetime(2024, 1, 1, 7, 0)
        target = ScheduleTarget(hour=8, minute=0, post_delay_seconds=30)

        assert seconds_until_next_run(now, target) == 3630

    def test_target_already_passed_runs_tomorrow(self):
        now = datetime(2024, 5, 14, 10, 0)
        target = ScheduleTarget(hour=8, minute=0)

        assert seconds_until_next_run(now, target) == 22 * 3600
        assert next_run_time(now, target) == datetime(2024, 5, 15, 8, 0)

    def test_now_equal_to_target_waits_a_full_day(self):
        now = datetime(2024, 5, 14, 8, 0)
        target = ScheduleTarget(hour=8, minute=0, post_delay_seconds=5)

        assert seconds_until_next_run(now, target) == SECONDS_PER_DAY + 5

    def test_sub_second_remainder_is_truncated(self):
        now = datetime(2024, 5, 14, 7, 59, 59, 500000)
        target = ScheduleTarget(hour=8, minute=0)

        assert seconds_until_next_run(now, target) == 0

    def test_month_end_rolls_over(self):
        now = datetime(2024, 5, 31, 23, 0)
        target = ScheduleTarget(hour=6, minute=30)

        assert next_run_time(now, target) == datetime(2024, 6, 1, 6, 30)

    @pytest.mark.parametrize("hour", range(0, 24, 5))
    @pytest.mark.parametrize("delay", [0, 90, 3600])
    def test_result_is_within_one_day_plus_delay(self, hour, delay):
        now = datetime(2024, 5, 14, hour, 17, 3)
        target = ScheduleTarget(hour=8, minute=15, post_delay_seconds=delay)

        seconds = seconds_until_next_run(now, target)

        assert delay <= seconds <= SECONDS_PER_DAY + delay

    @pytest.mark.parametrize("hour,minute", [(24, 0), (25, 0), (-1, 0), (8, 60)])
    def test_invalid_target_raises_config_error(self, hour, minute):
        target = ScheduleTarget(hour=hour, minute=minute)

        with pytest.raises(ConfigError):
            seconds_until_next_run(datetime(2024, 5, 14, 10, 0), target)

    def test_spring_forward_day_is_shorter(self):
        zone = ZoneInfo("Europe/Berlin")
        now = datetime(2024, 3, 30, 10, 0, tzinfo=zone)
        target = ScheduleTarget(hour=8, minute=0)

        assert next_run_time(now, target) == datetime(2024, 3, 31, 8, 0, tzinfo=zone)
        assert seconds_until_next_run(now, target) == 21 * 3600

    def test_fall_back_day_is_longer(self):
        zone = ZoneInfo("Europe/Berlin")
        now = datetime(2024, 10, 26, 10, 0, tzinfo=zone)
        target = ScheduleTarget(hour=8, minute=0)

        assert seconds_until_next_run(now, target) == 23 * 3600


@pytest.mark.unit
class TestFormatDuration:
    def test_format(self):
        assert format_duration(0) == "00:00:00"
        assert format_duration(3630) == "01:00:30"
        assert format_duration(86405) == "24:00:05"
