"""
SQLite storage for run state.

Persists the time of the last completed run, which is the watermark
for the next one.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

LAST_RUN_AT_KEY = "last_run_at"


class Storage:
    """
    Async SQLite storage for run state.

    Stores key/value pairs with the time they were last updated.
    """

    def __init__(self, database_path: str | Path):
        """
        Initialize storage with database path.

        Parameters
        ----------
        database_path : str | Path
            Path to the SQLite database file.
        """
        self.database_path = Path(database_path)
        self._connection: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """
        Initialize the database connection and create tables.

        Creates the database file and parent directories if they don't exist.
        """
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info("Initializing database at %s", self.database_path)

        self._connection = await aiosqlite.connect(self.database_path)
        await self._create_tables()

    async def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        if self._connection is None:
            raise RuntimeError("Database not initialized")

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS run_state (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        await self._connection.commit()
        logger.debug("Database tables created/verified")

    async def get_value(self, key: str) -> str | None:
        """
        Read a stored value.

        Parameters
        ----------
        key : str
            Name of the value.

        Returns
        -------
        str | None
            The stored value, or None if it was never set.
        """
        if self._connection is None:
            raise RuntimeError("Database not initialized")

        cursor = await self._connection.execute(
            "SELECT value FROM run_state WHERE key = ?",
            (key,),
        )
        result = await cursor.fetchone()
        return result[0] if result else None

    async def set_value(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Parameters
        ----------
        key : str
            Name of the value.
        value : str
            Value to store.
        """
        if self._connection is None:
            raise RuntimeError("Database not initialized")

        now = datetime.now(timezone.utc).isoformat()

        await self._connection.execute(
            """
            INSERT INTO run_state (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value, now),
        )
        await self._connection.commit()

    async def get_last_run_at(self) -> datetime | None:
        """
        Get the time of the last completed run.

        Returns
        -------
        datetime | None
            Last run time in UTC, or None before the first run.
        """
        value = await self.get_value(LAST_RUN_AT_KEY)
        if value is None:
            return None

        last_run_at = datetime.fromisoformat(value)
        if last_run_at.tzinfo is None:
            last_run_at = last_run_at.replace(tzinfo=timezone.utc)
        return last_run_at.astimezone(timezone.utc)

    async def touch_last_run_at(self, when: datetime | None = None) -> None:
        """
        Record the time of a completed run.

        Parameters
        ----------
        when : datetime | None
            Run time. Defaults to now.
        """
        when = when or datetime.now(timezone.utc)
        await self.set_value(LAST_RUN_AT_KEY, when.astimezone(timezone.utc).isoformat())
        logger.debug("Stored last run time: %s", when.isoformat())

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
            logger.debug("Database connection closed")

    async def __aenter__(self) -> "Storage":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
