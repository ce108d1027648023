"""Change-tracking activity log.

Public API:
- ActivityLogger: Records create/update/delete activity and serves the log
- ActivityLogRepository: Append-only store of log entries
- ActivityLogEntry: A single log entry
- detect_changes: Field-by-field diff of two entity snapshots
"""

from jobtrail.activity.changes import detect_changes
from jobtrail.activity.models import ActivityLogEntry, EntityType, FieldChange, LogAction
from jobtrail.activity.repository import ActivityLogRepository
from jobtrail.activity.service import ActivityLogger

__all__ = [
    "ActivityLogger",
    "ActivityLogRepository",
    "ActivityLogEntry",
    "EntityType",
    "FieldChange",
    "LogAction",
    "detect_changes",
]
