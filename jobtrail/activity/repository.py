"""Append-only store for activity log entries."""

import json
from datetime import date, datetime

import aiosqlite

from jobtrail.activity.models import ActivityLogEntry, EntityType, FieldChange, LogAction
from jobtrail.storage import Database, format_timestamp
from jobtrail.utils.dates import to_utc

DEFAULT_LIST_LIMIT = 50


def _json_default(value: object) -> object:
    if isinstance(value, (datetime, date)):
        return format_timestamp(value)
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return str(value)


class ActivityLogRepository:
    """Async SQLite store of activity log entries.

    Entries are never deleted and only ``user_note`` may change. Listings
    are newest first; entries written within the same instant keep their
    insertion order reversed.
    """

    def __init__(self, database: Database):
        """Initialize the repository.

        Args:
            database: The shared, initialized storage handle.
        """
        self.database = database

    async def append(self, entry: ActivityLogEntry) -> None:
        """Insert one entry.

        Raises:
            StoreUnavailable: If the store cannot accept the write.
        """
        changes = (
            json.dumps(entry.changes.to_dict(), default=_json_default)
            if entry.changes
            else None
        )
        async with self.database.connection() as conn:
            await conn.execute(
                """
                INSERT INTO activity_logs (
                    id, user_id, entity_type, entity_id, entity_name,
                    action, changes, summary, user_note, timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    str(entry.user_id),
                    entry.entity_type.value,
                    str(entry.entity_id),
                    entry.entity_name,
                    entry.action.value,
                    changes,
                    entry.summary,
                    entry.user_note,
                    format_timestamp(entry.timestamp),
                ),
            )
            await conn.commit()

    async def get(self, entry_id: str) -> ActivityLogEntry | None:
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM activity_logs WHERE id = ?", (entry_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_entry(row) if row is not None else None

    async def list_by_user(
        self, user_id: str, limit: int = DEFAULT_LIST_LIMIT
    ) -> list[ActivityLogEntry]:
        """List a user's most recent entries.

        Args:
            user_id: Owner of the entries.
            limit: Maximum number of entries to return.
        """
        return await self._select(
            "WHERE user_id = ? ORDER BY timestamp DESC, rowid DESC LIMIT ?",
            (str(user_id), limit),
        )

    async def list_by_entity_type(
        self, user_id: str, entity_type: EntityType
    ) -> list[ActivityLogEntry]:
        """List every entry of a user for one entity type."""
        return await self._select(
            "WHERE user_id = ? AND entity_type = ? ORDER BY timestamp DESC, rowid DESC",
            (str(user_id), EntityType(entity_type).value),
        )

    async def list_by_entity_id(self, entity_id: str) -> list[ActivityLogEntry]:
        """List every entry for one entity.

        No owner filter is applied; callers check entity ownership first.
        """
        return await self._select(
            "WHERE entity_id = ? ORDER BY timestamp DESC, rowid DESC",
            (str(entity_id),),
        )

    async def update_note(
        self, entry_id: str, user_id: str, note: str
    ) -> ActivityLogEntry | None:
        """Set ``user_note`` on an entry owned by ``user_id``.

        Returns:
            The updated entry, or None if it does not exist or belongs to
            another user.
        """
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "UPDATE activity_logs SET user_note = ? WHERE id = ? AND user_id = ?",
                (note, entry_id, str(user_id)),
            )
            await conn.commit()
            matched = cursor.rowcount

        if matched == 0:
            return None
        return await self.get(entry_id)

    async def _select(self, where: str, params: tuple) -> list[ActivityLogEntry]:
        async with self.database.connection() as conn:
            cursor = await conn.execute(f"SELECT * FROM activity_logs {where}", params)
            rows = await cursor.fetchall()
        return [self._row_to_entry(row) for row in rows]

    def _row_to_entry(self, row: aiosqlite.Row) -> ActivityLogEntry:
        changes = json.loads(row["changes"]) if row["changes"] else None
        return ActivityLogEntry(
            id=row["id"],
            user_id=row["user_id"],
            entity_type=EntityType(row["entity_type"]),
            entity_id=row["entity_id"],
            entity_name=row["entity_name"],
            action=LogAction(row["action"]),
            summary=row["summary"],
            timestamp=to_utc(row["timestamp"]),
            changes=FieldChange.from_dict(changes) if changes else None,
            user_note=row["user_note"] or "",
        )
