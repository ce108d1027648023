"""SQLite storage handle shared by the Job-Trail repositories.

The entry point constructs a single :class:`Database`, initializes it and
passes it to each repository. Closing it is the entry point's job as well.
"""

import sqlite3
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import date, datetime
from pathlib import Path

import aiosqlite

from jobtrail.errors import StoreUnavailable
from jobtrail.utils.dates import to_utc

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS applications (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    company TEXT NOT NULL,
    role TEXT NOT NULL,
    status TEXT NOT NULL,
    source TEXT NOT NULL,
    date_applied TEXT NOT NULL,
    last_updated TEXT NOT NULL,
    salary_range TEXT,
    contacts TEXT NOT NULL DEFAULT '[]',
    notes TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (user_id, company, role, date_applied)
);
CREATE INDEX IF NOT EXISTS idx_applications_user ON applications(user_id);
CREATE INDEX IF NOT EXISTS idx_applications_status ON applications(status);
CREATE INDEX IF NOT EXISTS idx_applications_source ON applications(source);
CREATE INDEX IF NOT EXISTS idx_applications_date ON applications(date_applied);

CREATE TABLE IF NOT EXISTS network (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    email TEXT NOT NULL DEFAULT '',
    company TEXT NOT NULL DEFAULT '',
    role TEXT NOT NULL DEFAULT '',
    met_at TEXT NOT NULL,
    met_date TEXT NOT NULL,
    follow_up_date TEXT,
    last_contacted_date TEXT,
    notes TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_network_user ON network(user_id);
CREATE INDEX IF NOT EXISTS idx_network_company ON network(company);
CREATE INDEX IF NOT EXISTS idx_network_met_at ON network(met_at);

CREATE TABLE IF NOT EXISTS activity_logs (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    entity_type TEXT NOT NULL,
    entity_id TEXT NOT NULL,
    entity_name TEXT NOT NULL,
    action TEXT NOT NULL,
    changes TEXT,
    summary TEXT NOT NULL,
    user_note TEXT NOT NULL DEFAULT '',
    timestamp TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_activity_user_ts ON activity_logs(user_id, timestamp);
CREATE INDEX IF NOT EXISTS idx_activity_type_ts ON activity_logs(entity_type, timestamp);
CREATE INDEX IF NOT EXISTS idx_activity_entity ON activity_logs(entity_id);
"""


def format_timestamp(value: datetime | date | str | None) -> str | None:
    """Serialize a date-like value in the fixed-width form stored in SQLite.

    A fixed width keeps lexicographic ordering equal to chronological order.
    """
    normalized = to_utc(value)
    if normalized is None:
        return None
    return normalized.isoformat(timespec="microseconds")


class Database:
    """Async SQLite handle owning one aiosqlite connection."""

    def __init__(self, db_path: Path | str):
        """Initialize the handle.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open the connection and create tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            if self._connection is None:
                self._connection = await aiosqlite.connect(self.db_path)
                self._connection.row_factory = aiosqlite.Row
            await self._connection.executescript(SCHEMA_SQL)
            await self._connection.commit()
        except sqlite3.OperationalError as e:
            raise StoreUnavailable(
                f"Cannot open database at {self.db_path}: {e}", original_error=e
            ) from e

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Yield the open connection.

        Operational failures (locked or unreadable database, closed handle)
        surface as StoreUnavailable. Integrity errors pass through so that
        repositories can translate them.

        Yields:
            The aiosqlite connection.

        Raises:
            StoreUnavailable: If the handle is not initialized or the
                database cannot serve the request.
        """
        if self._connection is None:
            raise StoreUnavailable("Database is not initialized")
        try:
            yield self._connection
        except sqlite3.OperationalError as e:
            raise StoreUnavailable(f"Database error: {e}", original_error=e) from e
