"""Human-readable summaries for activity log entries."""

from collections.abc import Mapping

from jobtrail.activity.models import EntityType, FieldChange

# Plural collection label used in "Added ... to ..." summaries.
COLLECTION_LABELS = {
    EntityType.APPLICATION: "applications",
    EntityType.NETWORK: "network",
}


def display_name(entity_type: EntityType, state: Mapping[str, object]) -> str:
    """Return the display name of an application or contact snapshot.

    Applications read ``"{company} - {role}"``; contacts read ``"{name}"``
    with ``" ({company})"`` appended when the company is set.
    """
    if entity_type == EntityType.APPLICATION:
        return f"{state.get('company') or ''} - {state.get('role') or ''}"
    name = str(state.get("name") or "")
    company = state.get("company")
    return f"{name} ({company})" if company else name


def created_summary(
    entity_type: EntityType, name: str, from_application: bool = False
) -> str:
    summary = f"Added {name} to {COLLECTION_LABELS[entity_type]}"
    if from_application:
        summary += " (from application)"
    return summary


def deleted_summary(entity_type: EntityType, name: str) -> str:
    if entity_type == EntityType.APPLICATION:
        return f"Deleted {name} application"
    return f"Deleted {name} from network"


def change_summary(
    entity_type: EntityType, change: FieldChange, state: Mapping[str, object]
) -> str:
    """Describe a single field change.

    Args:
        entity_type: Kind of entity that changed.
        change: The detected change.
        state: Snapshot after the change, used for the contact's name.
    """
    if entity_type == EntityType.NETWORK:
        return f"Updated {state.get('name') or ''}'s {change.field}"
    if change.field == "status":
        return f"Status changed from {change.old_value} to {change.new_value}"
    if change.field == "salary_range":
        return "Updated salary range"
    return f"Updated {change.field}"
