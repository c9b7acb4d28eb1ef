#!/usr/bin/env python3
"""
Unit tests for SetupEventSource with a mocked psycopg connection.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import psycopg
import pytest

from setup_reporter.config import DatabaseSettings
from setup_reporter.database.event_source import (
    FETCH_RECENT_EVENTS_QUERY,
    SetupEventSource,
)
from setup_reporter.exceptions import ReporterConnectionError, TransportError

CONNECT_PATH = "setup_reporter.database.event_source.psycopg.AsyncConnection.connect"


@pytest.fixture
def db_settings():
    return DatabaseSettings(
        host="db.local", username="reporter", password="secret", database="production"
    )


def mock_connection(rows=None, execute_error=None):
    """Async connection whose cursor returns ``rows``."""
    cursor = MagicMock()
    cursor.execute = AsyncMock(side_effect=execute_error)
    cursor.fetchall = AsyncMock(return_value=rows or [])

    connection = MagicMock()
    connection.closed = False
    connection.close = AsyncMock()
    connection.cursor.return_value.__aenter__ = AsyncMock(return_value=cursor)
    connection.cursor.return_value.__aexit__ = AsyncMock(return_value=False)
    return connection, cursor


@pytest.mark.unit
@pytest.mark.database
class TestSetupEventSource:
    """Test suite for the PostgreSQL event source."""

    @pytest.mark.asyncio
    async def test_connect_uses_settings(self, db_settings):
        connection, _ = mock_connection()
        source = SetupEventSource(db_settings)

        with patch(CONNECT_PATH, new_callable=AsyncMock, return_value=connection) as connect:
            await source.connect()

        kwargs = connect.call_args.kwargs
        assert kwargs["host"] == "db.local"
        assert kwargs["port"] == 5432
        assert kwargs["dbname"] == "production"
        assert kwargs["user"] == "reporter"
        assert kwargs["autocommit"] is True
        assert source.is_connected

    @pytest.mark.asyncio
    async def test_connect_failure_raises_connection_error(self, db_settings):
        source = SetupEventSource(db_settings)

        with patch(CONNECT_PATH, new_callable=AsyncMock, side_effect=psycopg.OperationalError("refused")):
            with pytest.raises(ReporterConnectionError, match="db.local"):
                await source.connect()

        assert not source.is_connected

    @pytest.mark.asyncio
    async def test_reconnect_replaces_and_closes_previous(self, db_settings):
        first, _ = mock_connection()
        second, _ = mock_connection()
        source = SetupEventSource(db_settings)

        with patch(CONNECT_PATH, new_callable=AsyncMock, side_effect=[first, second]):
            await source.connect()
            await source.reconnect()

        first.close.assert_awaited_once()
        assert source._connection is second

    @pytest.mark.asyncio
    async def test_failed_reconnect_keeps_previous_connection(self, db_settings):
        first, _ = mock_connection()
        source = SetupEventSource(db_settings)

        with patch(CONNECT_PATH, new_callable=AsyncMock, side_effect=[first, OSError("no route")]):
            await source.connect()
            with pytest.raises(ReporterConnectionError):
                await source.reconnect()

        first.close.assert_not_awaited()
        assert source._connection is first

    @pytest.mark.asyncio
    async def test_fetch_returns_rows(self, db_settings):
        rows = [{"part_name": "Bracket A"}, {"part_name": "Bracket B"}]
        connection, cursor = mock_connection(rows=rows)
        source = SetupEventSource(db_settings)

        with patch(CONNECT_PATH, new_callable=AsyncMock, return_value=connection):
            await source.connect()
            result = await source.fetch_recent_events()

        assert result == rows
        cursor.execute.assert_awaited_once_with(FETCH_RECENT_EVENTS_QUERY)

    @pytest.mark.asyncio
    async def test_fetch_without_connection_raises(self, db_settings):
        source = SetupEventSource(db_settings)

        with pytest.raises(TransportError):
            await source.fetch_recent_events()

    @pytest.mark.asyncio
    async def test_query_error_raises_transport_error(self, db_settings):
        connection, _ = mock_connection(execute_error=psycopg.OperationalError("lost"))
        source = SetupEventSource(db_settings)

        with patch(CONNECT_PATH, new_callable=AsyncMock, return_value=connection):
            await source.connect()
            with pytest.raises(TransportError):
                await source.fetch_recent_events()

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, db_settings):
        connection, _ = mock_connection()
        source = SetupEventSource(db_settings)

        with patch(CONNECT_PATH, new_callable=AsyncMock, return_value=connection):
            await source.connect()

        await source.close()
        await source.close()

        connection.close.assert_awaited_once()
        assert not source.is_connected
