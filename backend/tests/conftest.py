#!/usr/bin/env python3
# backend/tests/conftest.py
"""
Pytest configuration and shared fixtures for setup reporter tests.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest

from setup_reporter.config import Settings
from setup_reporter.exceptions import ReporterConnectionError, TransportError
from setup_reporter.models.policy_model import LimitTable
from setup_reporter.models.setup_event_model import SetupEvent


@pytest.fixture(autouse=True)
def isolated_config_file(tmp_path, monkeypatch):
    """Point the settings loader at an empty location so no real config leaks in."""
    monkeypatch.setenv("SETUP_REPORTER_CONFIG", str(tmp_path / "missing.toml"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings_factory():
    """Build Settings from keyword overrides on top of a minimal valid config."""

    def _build(**overrides: Any) -> Settings:
        values: Dict[str, Any] = {
            "database": {
                "host": "db.local",
                "username": "reporter",
                "password": "db-secret",
                "database": "production",
            },
            "smtp": {
                "server": "mail.local",
                "from_address": "reporter@example.com",
                "to": ["lead@example.com"],
            },
            "retry": {"max_attempts": 3, "delay_seconds": 0},
        }
        values.update(overrides)
        return Settings(**values)

    return _build


@pytest.fixture
def settings(settings_factory) -> Settings:
    return settings_factory()


@pytest.fixture
def limit_table() -> LimitTable:
    return LimitTable(limits={"MILL-01": 120, "lathe-02": 300}, default_limit=240)


@pytest.fixture
def make_row():
    """Build a raw database row as returned by the event source."""

    def _make_row(
        start: datetime,
        end: datetime,
        machine_id: str = "MILL-01",
        setup_id: int = 1,
        **overrides: Any,
    ) -> Dict[str, Any]:
        row = {
            "part_name": "Bracket A",
            "setup_id": setup_id,
            "order_id": "ORD-1001",
            "machine_id": machine_id,
            "operator": "J. Doe",
            "start_setup_time": start,
            "end_setup_time": end,
            "operator_comment": "Fixture swap",
            "downtime_minutes": 0.0,
        }
        row.update(overrides)
        return row

    return _make_row


@pytest.fixture
def make_event(make_row):
    """Build a parsed SetupEvent."""

    def _make_event(start: datetime, end: datetime, **kwargs: Any) -> SetupEvent:
        return SetupEvent.from_row(make_row(start, end, **kwargs))

    return _make_event


class FakeEventSource:
    """In-memory database collaborator recording calls."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.rows = rows or []
        self.calls: List[str] = []
        self.settings = None
        self.reconnect_errors: List[Exception] = []
        self.fetch_errors: List[Exception] = []

    def update_settings(self, settings) -> None:
        self.settings = settings

    async def reconnect(self) -> None:
        self.calls.append("db.reconnect")
        if self.reconnect_errors:
            raise self.reconnect_errors.pop(0)

    async def fetch_recent_events(self) -> List[Dict[str, Any]]:
        self.calls.append("db.fetch")
        if self.fetch_errors:
            raise self.fetch_errors.pop(0)
        return list(self.rows)

    async def close(self) -> None:
        self.calls.append("db.close")


class FakeMailer:
    """In-memory mail collaborator recording sent reports."""

    def __init__(self, calls: Optional[List[str]] = None):
        self.calls = calls if calls is not None else []
        self.settings = None
        self.sent: List[Dict[str, Any]] = []
        self.reconnect_errors: List[Exception] = []
        self.send_errors: List[Exception] = []

    def update_settings(self, settings) -> None:
        self.settings = settings

    async def reconnect(self) -> None:
        self.calls.append("mail.reconnect")
        if self.reconnect_errors:
            raise self.reconnect_errors.pop(0)

    async def send_report(self, subject, evaluations, sender_display_name) -> None:
        self.calls.append("mail.send")
        if self.send_errors:
            raise self.send_errors.pop(0)
        self.sent.append(
            {"subject": subject, "evaluations": list(evaluations), "sender_display_name": sender_display_name}
        )

    async def close(self) -> None:
        self.calls.append("mail.close")


@pytest.fixture
def fake_event_source() -> FakeEventSource:
    return FakeEventSource()


@pytest.fixture
def fake_mailer(fake_event_source) -> FakeMailer:
    """Mailer sharing the event source's call log so ordering can be checked."""
    return FakeMailer(calls=fake_event_source.calls)


@pytest.fixture
def connection_error() -> ReporterConnectionError:
    return ReporterConnectionError("server unreachable")


@pytest.fixture
def transport_error() -> TransportError:
    return TransportError("connection reset")
