"""Activity logging for application and contact mutations.

This module provides the ActivityLogger class which handles:
- Turning create/update/delete mutations into activity log entries
- Fanning out one entry per changed tracked field on update
- Listing entries and editing the user note
"""

import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime

from jobtrail.activity.changes import DATE_FIELDS, TRACKED_FIELDS, detect_changes
from jobtrail.activity.models import ActivityLogEntry, EntityType, FieldChange, LogAction
from jobtrail.activity.repository import DEFAULT_LIST_LIMIT, ActivityLogRepository
from jobtrail.activity.summary import (
    change_summary,
    created_summary,
    deleted_summary,
    display_name,
)
from jobtrail.errors import ValidationError
from jobtrail.utils.dates import utcnow

logger = logging.getLogger(__name__)


class ActivityLogger:
    """Records activity for applications and contacts.

    The logger only ever appends entries. It receives already authorized
    entity snapshots and never reads the entities itself.
    """

    def __init__(
        self,
        repository: ActivityLogRepository,
        default_limit: int = DEFAULT_LIST_LIMIT,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the logger.

        Args:
            repository: Store the entries are appended to.
            default_limit: Number of entries returned by the recent feed.
            clock: Source of entry timestamps.
        """
        self.repository = repository
        self.default_limit = default_limit
        self._clock = clock

    async def record_create(
        self,
        user_id: str,
        entity_type: EntityType,
        entity: Mapping[str, object],
        from_application: bool = False,
    ) -> ActivityLogEntry:
        """Append a "created" entry for a new entity.

        Args:
            user_id: Owner of the entity.
            entity_type: Kind of entity.
            entity: Snapshot of the created entity (must include ``id``).
            from_application: Contact was added from an application view.

        Returns:
            The appended entry.
        """
        entity_type = EntityType(entity_type)
        name = display_name(entity_type, entity)
        entry = self._build_entry(
            user_id,
            entity_type,
            entity,
            LogAction.CREATED,
            created_summary(entity_type, name, from_application=from_application),
        )
        await self.repository.append(entry)
        return entry

    async def record_update(
        self,
        user_id: str,
        entity_type: EntityType,
        old_state: Mapping[str, object],
        new_state: Mapping[str, object],
    ) -> list[ActivityLogEntry]:
        """Append one "updated" entry per changed tracked field.

        Args:
            user_id: Owner of the entity.
            entity_type: Kind of entity.
            old_state: Snapshot before the update.
            new_state: Snapshot after the update (must include ``id``).

        Returns:
            The appended entries; empty when no tracked field changed.
        """
        entity_type = EntityType(entity_type)
        changes = detect_changes(
            old_state,
            new_state,
            TRACKED_FIELDS[entity_type],
            date_fields=DATE_FIELDS[entity_type],
        )
        if not changes:
            logger.debug(
                "No tracked changes for %s %s", entity_type.value, new_state.get("id")
            )
            return []

        entries = [
            self._build_entry(
                user_id,
                entity_type,
                new_state,
                LogAction.UPDATED,
                change_summary(entity_type, change, new_state),
                change=change,
            )
            for change in changes
        ]
        for entry in entries:
            await self.repository.append(entry)

        logger.info(
            "Logged %d change(s) for %s %s",
            len(entries),
            entity_type.value,
            new_state.get("id"),
        )
        return entries

    async def record_delete(
        self,
        user_id: str,
        entity_type: EntityType,
        entity: Mapping[str, object],
    ) -> ActivityLogEntry:
        """Append a "deleted" entry using the entity's last snapshot."""
        entity_type = EntityType(entity_type)
        name = display_name(entity_type, entity)
        entry = self._build_entry(
            user_id,
            entity_type,
            entity,
            LogAction.DELETED,
            deleted_summary(entity_type, name),
        )
        await self.repository.append(entry)
        return entry

    async def list_logs(
        self,
        user_id: str,
        entity_type: EntityType | None = None,
        entity_id: str | None = None,
        limit: int | None = None,
    ) -> list[ActivityLogEntry]:
        """List activity log entries, newest first.

        Args:
            user_id: Owner of the entries.
            entity_type: Only entries for this entity type (unlimited).
            entity_id: Only entries for this entity (unlimited).
            limit: Cap for the unfiltered feed; defaults to ``default_limit``.

        Raises:
            ValidationError: If ``entity_type`` or ``limit`` is invalid.
        """
        if entity_id is not None:
            entries = await self.repository.list_by_entity_id(entity_id)
            return [entry for entry in entries if entry.user_id == str(user_id)]

        if entity_type is not None:
            try:
                entity_type = EntityType(entity_type)
            except ValueError as e:
                raise ValidationError(f"Invalid entity type: {entity_type}") from e
            return await self.repository.list_by_entity_type(user_id, entity_type)

        if limit is None:
            limit = self.default_limit
        if limit <= 0:
            raise ValidationError("limit must be a positive integer")
        return await self.repository.list_by_user(user_id, limit)

    async def update_log_note(
        self, entry_id: str, user_id: str, note: str | None
    ) -> ActivityLogEntry | None:
        """Replace the user note on an entry the user owns.

        Returns:
            The updated entry, or None when the entry is missing or owned
            by someone else.

        Raises:
            ValidationError: If no note is given.
        """
        if note is None:
            raise ValidationError("user_note is required")
        entry = await self.repository.update_note(entry_id, user_id, str(note))
        if entry is None:
            logger.info("Activity log %s not found for user %s", entry_id, user_id)
        return entry

    def _build_entry(
        self,
        user_id: str,
        entity_type: EntityType,
        state: Mapping[str, object],
        action: LogAction,
        summary: str,
        change: FieldChange | None = None,
    ) -> ActivityLogEntry:
        return ActivityLogEntry(
            id=uuid.uuid4().hex,
            user_id=str(user_id),
            entity_type=entity_type,
            entity_id=str(state["id"]),
            entity_name=display_name(entity_type, state),
            action=action,
            summary=summary,
            timestamp=self._clock(),
            changes=change,
        )
