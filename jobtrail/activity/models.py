"""Data models for the activity log."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from jobtrail.utils.dates import to_iso, to_utc


class EntityType(str, Enum):
    """Kind of entity an activity log entry refers to."""

    APPLICATION = "application"
    NETWORK = "network"


class LogAction(str, Enum):
    """What happened to the entity."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class FieldChange:
    """A single tracked field that differs between two snapshots."""

    field: str
    old_value: object
    new_value: object

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "old_value": self.old_value,
            "new_value": self.new_value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FieldChange":
        return cls(
            field=data["field"],
            old_value=data.get("old_value"),
            new_value=data.get("new_value"),
        )


@dataclass(frozen=True)
class ActivityLogEntry:
    """An immutable record of one change to an application or contact.

    Attributes:
        id: Unique identifier of the entry.
        user_id: Owner of the entity and of the entry.
        entity_type: Whether the entry refers to an application or a contact.
        entity_id: Identifier of the entity.
        entity_name: Display name of the entity at the time of the change.
        action: created, updated or deleted.
        summary: Human-readable description of the change.
        timestamp: When the entry was recorded.
        changes: The changed field for update entries, None otherwise.
        user_note: Free-form annotation; the only editable attribute.
    """

    id: str
    user_id: str
    entity_type: EntityType
    entity_id: str
    entity_name: str
    action: LogAction
    summary: str
    timestamp: datetime
    changes: FieldChange | None = None
    user_note: str = ""

    def to_dict(self) -> dict:
        """Serialize the entry to a dictionary.

        Returns:
            Dictionary representation of the entry.
        """
        return {
            "id": self.id,
            "user_id": self.user_id,
            "entity_type": self.entity_type.value,
            "entity_id": self.entity_id,
            "entity_name": self.entity_name,
            "action": self.action.value,
            "changes": self.changes.to_dict() if self.changes else None,
            "summary": self.summary,
            "user_note": self.user_note,
            "timestamp": to_iso(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ActivityLogEntry":
        """Deserialize an entry from a dictionary."""
        changes = data.get("changes")
        return cls(
            id=data["id"],
            user_id=str(data["user_id"]),
            entity_type=EntityType(data["entity_type"]),
            entity_id=str(data["entity_id"]),
            entity_name=data["entity_name"],
            action=LogAction(data["action"]),
            summary=data["summary"],
            timestamp=to_utc(data["timestamp"]),
            changes=FieldChange.from_dict(changes) if changes else None,
            user_note=data.get("user_note") or "",
        )
