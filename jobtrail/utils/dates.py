"""Datetime helpers shared by the storage boundary and the activity log.

All instants are handled as timezone-aware UTC datetimes. Naive values are
assumed to already be in UTC.
"""

from datetime import UTC, date, datetime


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_utc(value: datetime | date | str | None) -> datetime | None:
    """Normalize a datetime, date or ISO-8601 string to an aware UTC datetime.

    Args:
        value: The value to normalize. Plain dates map to midnight UTC.

    Returns:
        The normalized datetime, or None for None/empty input.

    Raises:
        ValueError: If a string cannot be parsed as ISO-8601.
        TypeError: If the value has an unsupported type.
    """
    if value is None:
        return None
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        value = datetime.fromisoformat(raw)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    raise TypeError(f"Unsupported date value: {value!r}")


def to_iso(value: datetime | date | str | None) -> str | None:
    """Serialize a date-like value as a UTC ISO-8601 string."""
    normalized = to_utc(value)
    return normalized.isoformat() if normalized is not None else None
