"""Database repositories for applications and networking contacts.

Every query is scoped by ``user_id``; a record owned by another user is
indistinguishable from a missing one.
"""

import json
import sqlite3
from datetime import date, datetime

import aiosqlite

from jobtrail.errors import DuplicateApplicationError
from jobtrail.storage import Database, format_timestamp
from jobtrail.tracker.models import (
    Application,
    ApplicationStatus,
    MetAt,
    NetworkContact,
    SalaryRange,
)
from jobtrail.utils.dates import to_utc, utcnow

APPLICATION_COLUMNS = (
    "id",
    "user_id",
    "company",
    "role",
    "status",
    "source",
    "date_applied",
    "last_updated",
    "salary_range",
    "contacts",
    "notes",
    "created_at",
    "updated_at",
)

CONTACT_COLUMNS = (
    "id",
    "user_id",
    "name",
    "email",
    "company",
    "role",
    "met_at",
    "met_date",
    "follow_up_date",
    "last_contacted_date",
    "notes",
    "created_at",
    "updated_at",
)

# Columns an update may touch; identity and ownership columns are excluded.
APPLICATION_UPDATABLE = frozenset(APPLICATION_COLUMNS) - {"id", "user_id", "created_at"}
CONTACT_UPDATABLE = frozenset(CONTACT_COLUMNS) - {"id", "user_id", "created_at"}


def _to_column(name: str, value: object) -> object:
    if name == "salary_range":
        if isinstance(value, SalaryRange):
            value = value.to_dict()
        return json.dumps(value) if value is not None else None
    if name == "contacts":
        return json.dumps(list(value or []))
    if isinstance(value, (datetime, date)):
        return format_timestamp(value)
    if isinstance(value, (ApplicationStatus, MetAt)):
        return value.value
    return value


class ApplicationRepository:
    """Async SQLite repository for job applications."""

    def __init__(self, database: Database):
        """Initialize the repository.

        Args:
            database: The shared, initialized storage handle.
        """
        self.database = database

    async def insert(self, application: Application) -> None:
        """Insert a new application.

        Args:
            application: The application to store.

        Raises:
            DuplicateApplicationError: If the user already has an application
                for the same company, role and date.
        """
        values = application.snapshot()
        placeholders = ", ".join("?" for _ in APPLICATION_COLUMNS)
        async with self.database.connection() as conn:
            try:
                await conn.execute(
                    f"INSERT INTO applications ({', '.join(APPLICATION_COLUMNS)}) "
                    f"VALUES ({placeholders})",
                    tuple(_to_column(col, values[col]) for col in APPLICATION_COLUMNS),
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateApplicationError() from e
            await conn.commit()

    async def get(self, application_id: str, user_id: str) -> Application | None:
        """Get an application owned by ``user_id``.

        Returns:
            The application if found, None otherwise.
        """
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM applications WHERE id = ? AND user_id = ?",
                (application_id, str(user_id)),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return self._row_to_application(row)

    async def list_for_user(
        self,
        user_id: str,
        status: ApplicationStatus | None = None,
        company: str | None = None,
        source: str | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
    ) -> list[Application]:
        """List a user's applications, newest ``date_applied`` first.

        Args:
            user_id: Owner of the applications.
            status: Optional exact status filter.
            company: Optional case-insensitive substring of the company name.
            source: Optional exact source filter.
            from_date: Optional inclusive lower bound on ``date_applied``.
            to_date: Optional inclusive upper bound on ``date_applied``.
        """
        clauses = ["user_id = ?"]
        params: list[object] = [str(user_id)]
        if status is not None:
            clauses.append("status = ?")
            params.append(ApplicationStatus(status).value)
        if company:
            clauses.append("instr(lower(company), lower(?)) > 0")
            params.append(company)
        if source:
            clauses.append("source = ?")
            params.append(source)
        if from_date is not None:
            clauses.append("date_applied >= ?")
            params.append(format_timestamp(from_date))
        if to_date is not None:
            clauses.append("date_applied <= ?")
            params.append(format_timestamp(to_date))

        async with self.database.connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM applications WHERE {' AND '.join(clauses)} "
                "ORDER BY date_applied DESC",
                tuple(params),
            )
            rows = await cursor.fetchall()

        return [self._row_to_application(row) for row in rows]

    async def update(
        self, application_id: str, user_id: str, fields: dict
    ) -> Application | None:
        """Apply ``fields`` to an application and refresh its timestamps.

        Args:
            application_id: The application to update.
            user_id: Owner of the application.
            fields: Column values to set.

        Returns:
            The updated application, or None if not found for this user.

        Raises:
            DuplicateApplicationError: If the update collides with another
                application on company, role and date.
        """
        unknown = set(fields) - APPLICATION_UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update columns: {sorted(unknown)}")

        now = utcnow()
        values = {**fields, "last_updated": now, "updated_at": now}
        assignments = ", ".join(f"{col} = ?" for col in values)
        params = [_to_column(col, value) for col, value in values.items()]

        async with self.database.connection() as conn:
            try:
                cursor = await conn.execute(
                    f"UPDATE applications SET {assignments} WHERE id = ? AND user_id = ?",
                    (*params, application_id, str(user_id)),
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateApplicationError() from e
            await conn.commit()
            matched = cursor.rowcount

        if matched == 0:
            return None
        return await self.get(application_id, user_id)

    async def delete(self, application_id: str, user_id: str) -> bool:
        """Delete an application.

        Returns:
            True if a record was deleted.
        """
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "DELETE FROM applications WHERE id = ? AND user_id = ?",
                (application_id, str(user_id)),
            )
            await conn.commit()
            return cursor.rowcount > 0

    async def count(self, user_id: str) -> int:
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) AS count FROM applications WHERE user_id = ?",
                (str(user_id),),
            )
            row = await cursor.fetchone()
        return int(row["count"]) if row is not None else 0

    async def get_status_counts(self, user_id: str) -> dict[str, int]:
        """Return application counts grouped by status (non-zero groups only)."""
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "SELECT status, COUNT(*) AS count FROM applications "
                "WHERE user_id = ? GROUP BY status ORDER BY status",
                (str(user_id),),
            )
            rows = await cursor.fetchall()
        return {row["status"]: int(row["count"]) for row in rows}

    async def get_source_counts(
        self, user_id: str, responded_statuses: frozenset[str]
    ) -> list[tuple[str, int, int]]:
        """Return ``(source, total, responded)`` per distinct source.

        Args:
            user_id: Owner of the applications.
            responded_statuses: Status values that count as a response.
        """
        statuses = sorted(responded_statuses)
        if statuses:
            responded_expr = (
                "SUM(CASE WHEN status IN "
                f"({', '.join('?' for _ in statuses)}) THEN 1 ELSE 0 END)"
            )
        else:
            responded_expr = "0"

        async with self.database.connection() as conn:
            cursor = await conn.execute(
                f"SELECT source, COUNT(*) AS total, {responded_expr} AS responded "
                "FROM applications WHERE user_id = ? GROUP BY source ORDER BY source",
                (*statuses, str(user_id)),
            )
            rows = await cursor.fetchall()
        return [
            (row["source"], int(row["total"]), int(row["responded"] or 0))
            for row in rows
        ]

    async def get_average_days_by_status(
        self, user_id: str, exclude_status: ApplicationStatus = ApplicationStatus.APPLIED
    ) -> dict[str, float]:
        """Average ``last_updated - date_applied`` in days, grouped by status."""
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "SELECT status, "
                "AVG(julianday(last_updated) - julianday(date_applied)) AS avg_days "
                "FROM applications WHERE user_id = ? AND status != ? "
                "GROUP BY status ORDER BY status",
                (str(user_id), exclude_status.value),
            )
            rows = await cursor.fetchall()
        return {
            row["status"]: float(row["avg_days"])
            for row in rows
            if row["avg_days"] is not None
        }

    async def list_dates_applied(self, user_id: str) -> list[datetime]:
        """Return every ``date_applied`` of the user, newest first."""
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "SELECT date_applied FROM applications WHERE user_id = ? "
                "ORDER BY date_applied DESC",
                (str(user_id),),
            )
            rows = await cursor.fetchall()
        return [to_utc(row["date_applied"]) for row in rows]

    def _row_to_application(self, row: aiosqlite.Row) -> Application:
        salary = json.loads(row["salary_range"]) if row["salary_range"] else None
        return Application(
            id=row["id"],
            user_id=row["user_id"],
            company=row["company"],
            role=row["role"],
            status=ApplicationStatus(row["status"]),
            source=row["source"],
            date_applied=to_utc(row["date_applied"]),
            last_updated=to_utc(row["last_updated"]),
            salary_range=SalaryRange.from_dict(salary),
            contacts=json.loads(row["contacts"] or "[]"),
            notes=row["notes"] or "",
            created_at=to_utc(row["created_at"]),
            updated_at=to_utc(row["updated_at"]),
        )


class ContactRepository:
    """Async SQLite repository for networking contacts."""

    def __init__(self, database: Database):
        """Initialize the repository.

        Args:
            database: The shared, initialized storage handle.
        """
        self.database = database

    async def insert(self, contact: NetworkContact) -> None:
        """Insert a new contact."""
        values = contact.snapshot()
        placeholders = ", ".join("?" for _ in CONTACT_COLUMNS)
        async with self.database.connection() as conn:
            await conn.execute(
                f"INSERT INTO network ({', '.join(CONTACT_COLUMNS)}) "
                f"VALUES ({placeholders})",
                tuple(_to_column(col, values[col]) for col in CONTACT_COLUMNS),
            )
            await conn.commit()

    async def get(self, contact_id: str, user_id: str) -> NetworkContact | None:
        """Get a contact owned by ``user_id``."""
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM network WHERE id = ? AND user_id = ?",
                (contact_id, str(user_id)),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return self._row_to_contact(row)

    async def list_for_user(
        self,
        user_id: str,
        company: str | None = None,
        name: str | None = None,
        met_at: MetAt | None = None,
    ) -> list[NetworkContact]:
        """List a user's contacts, most recently updated first."""
        clauses = ["user_id = ?"]
        params: list[object] = [str(user_id)]
        if company:
            clauses.append("instr(lower(company), lower(?)) > 0")
            params.append(company)
        if name:
            clauses.append("instr(lower(name), lower(?)) > 0")
            params.append(name)
        if met_at is not None:
            clauses.append("met_at = ?")
            params.append(MetAt(met_at).value)

        async with self.database.connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM network WHERE {' AND '.join(clauses)} "
                "ORDER BY updated_at DESC",
                tuple(params),
            )
            rows = await cursor.fetchall()

        return [self._row_to_contact(row) for row in rows]

    async def update(
        self, contact_id: str, user_id: str, fields: dict
    ) -> NetworkContact | None:
        """Apply ``fields`` to a contact.

        Returns:
            The updated contact, or None if not found for this user.
        """
        unknown = set(fields) - CONTACT_UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update columns: {sorted(unknown)}")

        values = {**fields, "updated_at": utcnow()}
        assignments = ", ".join(f"{col} = ?" for col in values)
        params = [_to_column(col, value) for col, value in values.items()]

        async with self.database.connection() as conn:
            cursor = await conn.execute(
                f"UPDATE network SET {assignments} WHERE id = ? AND user_id = ?",
                (*params, contact_id, str(user_id)),
            )
            await conn.commit()
            matched = cursor.rowcount

        if matched == 0:
            return None
        return await self.get(contact_id, user_id)

    async def delete(self, contact_id: str, user_id: str) -> bool:
        """Delete a contact.

        Returns:
            True if a record was deleted.
        """
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "DELETE FROM network WHERE id = ? AND user_id = ?",
                (contact_id, str(user_id)),
            )
            await conn.commit()
            return cursor.rowcount > 0

    async def count(self, user_id: str) -> int:
        async with self.database.connection() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) AS count FROM network WHERE user_id = ?",
                (str(user_id),),
            )
            row = await cursor.fetchone()
        return int(row["count"]) if row is not None else 0

    async def get_grouped_counts(self, user_id: str, column: str) -> list[tuple[str, int]]:
        """Return ``(value, count)`` pairs for ``company`` or ``met_at``, largest first."""
        if column not in ("company", "met_at"):
            raise ValueError(f"Cannot group contacts by {column!r}")

        async with self.database.connection() as conn:
            cursor = await conn.execute(
                f"SELECT {column} AS value, COUNT(*) AS count FROM network "
                f"WHERE user_id = ? GROUP BY {column} ORDER BY count DESC, value",
                (str(user_id),),
            )
            rows = await cursor.fetchall()
        return [(row["value"], int(row["count"])) for row in rows]

    def _row_to_contact(self, row: aiosqlite.Row) -> NetworkContact:
        return NetworkContact(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            email=row["email"] or "",
            company=row["company"] or "",
            role=row["role"] or "",
            met_at=MetAt(row["met_at"]),
            met_date=to_utc(row["met_date"]),
            follow_up_date=to_utc(row["follow_up_date"]),
            last_contacted_date=to_utc(row["last_contacted_date"]),
            notes=row["notes"] or "",
            created_at=to_utc(row["created_at"]),
            updated_at=to_utc(row["updated_at"]),
        )
