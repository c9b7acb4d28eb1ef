# backend/setup_reporter/database/event_source.py

"""
Setup event source backed by PostgreSQL.

Holds one long-lived async connection to the production database. The report
cycle reconnects before every fetch; callers serialise access through the
pipeline's resource lock.
"""

from typing import Any, Dict, List, Optional

import psycopg
from psycopg.rows import dict_row

from ..config import DatabaseSettings
from ..constants import DB_CONNECT_TIMEOUT_SECONDS
from ..enums import LogEmoji, LoggerName
from ..exceptions import ReporterConnectionError, TransportError
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.EVENT_SOURCE, default_emoji=LogEmoji.DATABASE)

# Previous day's shift, newest setups first
FETCH_RECENT_EVENTS_QUERY = """
SELECT
    part_name,
    setup AS setup_id,
    order_number AS order_id,
    machine AS machine_id,
    operator,
    start_setup_time,
    start_machining_time AS end_setup_time,
    operator_comment,
    setup_downtimes AS downtime_minutes
FROM
    parts
WHERE
    shift_date = CURRENT_DATE - INTERVAL '1 day'
ORDER BY
    start_setup_time DESC
"""


class SetupEventSource:
    """
    Database collaborator that yields raw setup-event rows.

    Rows are returned as dicts (psycopg ``dict_row``); turning them into
    SetupEvent objects is left to the pipeline so that one bad row cannot
    fail the whole fetch.
    """

    def __init__(self, settings: DatabaseSettings):
        self.settings = settings
        self._connection: Optional[psycopg.AsyncConnection] = None

    @property
    def is_connected(self) -> bool:
        return self._connection is not None and not self._connection.closed

    def update_settings(self, settings: DatabaseSettings) -> None:
        """Use new connection settings from the next (re)connect on."""
        self.settings = settings

    async def connect(self) -> None:
        """
        Open a new connection.

        Raises:
            ReporterConnectionError: If the server cannot be reached or rejects us
        """
        try:
            self._connection = await psycopg.AsyncConnection.connect(
                host=self.settings.host,
                port=self.settings.port,
                dbname=self.settings.database,
                user=self.settings.username,
                password=self.settings.password,
                connect_timeout=DB_CONNECT_TIMEOUT_SECONDS,
                autocommit=True,
                row_factory=dict_row,
            )
        except (psycopg.Error, OSError) as e:
            raise ReporterConnectionError(
                f"Failed to connect to database {self.settings.database} "
                f"on {self.settings.host}:{self.settings.port}: {e}"
            ) from e

        logger.debug(
            f"Connected to database {self.settings.database} on {self.settings.host}",
            emoji=LogEmoji.CONNECTION,
        )

    async def reconnect(self) -> None:
        """
        Open a fresh connection and close the previous one.

        The previous connection is only replaced once the new one is open, so
        after a failed reconnect a still-usable old connection keeps working.

        Raises:
            ReporterConnectionError: If the new connection cannot be opened
        """
        previous = self._connection
        await self.connect()

        if previous is not None:
            try:
                await previous.close()
            except psycopg.Error as e:
                logger.warning(f"Error closing previous database connection: {e}")

    async def fetch_recent_events(self) -> List[Dict[str, Any]]:
        """
        Fetch the previous day's setup rows, newest first.

        Raises:
            TransportError: If there is no usable connection or the query fails
        """
        if not self.is_connected:
            raise TransportError("No open database connection")

        try:
            async with self._connection.cursor() as cur:
                await cur.execute(FETCH_RECENT_EVENTS_QUERY)
                rows = await cur.fetchall()
        except psycopg.Error as e:
            raise TransportError(f"Failed to fetch setup events: {e}") from e

        logger.debug(f"Fetched {len(rows)} setup rows")
        return list(rows)

    async def close(self) -> None:
        """Close the connection if one is open."""
        if self._connection is None:
            return

        connection, self._connection = self._connection, None
        try:
            await connection.close()
        except psycopg.Error as e:
            logger.warning(f"Error closing database connection: {e}")
