"""Applications and networking contacts.

Public API:
- TrackerService: Validated create/update/delete with activity logging
- ApplicationRepository / ContactRepository: Database repositories
- Application / NetworkContact: Entity models
- ApplicationStatus / MetAt: Enums for status and contact origin
"""

from jobtrail.tracker.models import (
    Application,
    ApplicationStatus,
    MetAt,
    NetworkContact,
    SalaryRange,
)
from jobtrail.tracker.repository import ApplicationRepository, ContactRepository
from jobtrail.tracker.service import TrackerService

__all__ = [
    "TrackerService",
    "ApplicationRepository",
    "ContactRepository",
    "Application",
    "NetworkContact",
    "SalaryRange",
    "ApplicationStatus",
    "MetAt",
]
