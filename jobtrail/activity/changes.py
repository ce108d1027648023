"""Change detection between two snapshots of the same entity.

A snapshot is a plain attribute mapping. Only tracked fields are compared;
everything else is invisible to the activity log.
"""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum

from jobtrail.activity.models import EntityType, FieldChange
from jobtrail.errors import ValidationError
from jobtrail.utils.dates import to_utc

APPLICATION_TRACKED_FIELDS = (
    "status",
    "company",
    "role",
    "notes",
    "source",
    "salary_range",
)

CONTACT_TRACKED_FIELDS = (
    "name",
    "email",
    "company",
    "role",
    "met_at",
    "notes",
    "met_date",
    "follow_up_date",
    "last_contacted_date",
)

CONTACT_DATE_FIELDS = frozenset({"met_date", "follow_up_date", "last_contacted_date"})

TRACKED_FIELDS: dict[EntityType, tuple[str, ...]] = {
    EntityType.APPLICATION: APPLICATION_TRACKED_FIELDS,
    EntityType.NETWORK: CONTACT_TRACKED_FIELDS,
}

DATE_FIELDS: dict[EntityType, frozenset[str]] = {
    EntityType.APPLICATION: frozenset(),
    EntityType.NETWORK: CONTACT_DATE_FIELDS,
}


def _plain(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return value


def normalize_value(value: object, is_date: bool = False) -> object:
    """Reduce a field value to a canonical form for equality checks.

    Dates become aware UTC datetimes, enums their values, dataclasses and
    mappings plain dicts without None entries, and anything empty None.

    Args:
        value: The raw field value.
        is_date: Parse strings as ISO-8601 dates.

    Raises:
        ValidationError: If ``is_date`` is set and the value is not a date.
    """
    if is_date:
        try:
            return to_utc(value)  # type: ignore[arg-type]
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid date: {value!r}") from e

    value = _plain(value)
    if isinstance(value, (datetime, date)):
        return to_utc(value)
    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        items = {
            key: normalize_value(item)
            for key, item in value.items()
        }
        items = {key: item for key, item in items.items() if item is not None}
        return items or None
    if isinstance(value, (list, tuple)):
        return [normalize_value(item) for item in value] or None
    return value


def detect_changes(
    old_state: Mapping[str, object],
    new_state: Mapping[str, object],
    tracked_fields: Iterable[str],
    date_fields: frozenset[str] = frozenset(),
) -> list[FieldChange]:
    """Compare two snapshots field by field.

    Args:
        old_state: Snapshot before the mutation.
        new_state: Snapshot after the mutation.
        tracked_fields: Fields to compare, in output order.
        date_fields: Tracked fields holding dates (ISO strings allowed).

    Returns:
        One FieldChange per tracked field whose normalized values differ.
        An empty list means nothing worth logging happened.
    """
    changes: list[FieldChange] = []
    for field in tracked_fields:
        old_value = old_state.get(field)
        new_value = new_state.get(field)
        is_date = field in date_fields
        if normalize_value(old_value, is_date) == normalize_value(new_value, is_date):
            continue
        changes.append(
            FieldChange(
                field=field,
                old_value=_empty_to_none(_plain(old_value)),
                new_value=_empty_to_none(_plain(new_value)),
            )
        )
    return changes


def _empty_to_none(value: object) -> object:
    if value == "" or value == [] or value == {}:
        return None
    return value
