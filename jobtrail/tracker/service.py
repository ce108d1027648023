"""Business logic service for applications and networking contacts.

This module provides the TrackerService class which handles:
- Validating create/update payloads
- Writing applications and contacts through their repositories
- Feeding before/after snapshots to the activity log
"""

import logging
import uuid
from collections.abc import Awaitable
from datetime import datetime

from jobtrail.activity.models import EntityType
from jobtrail.activity.service import ActivityLogger
from jobtrail.errors import StoreUnavailable, ValidationError
from jobtrail.tracker.models import (
    Application,
    ApplicationStatus,
    MetAt,
    NetworkContact,
    SalaryRange,
)
from jobtrail.tracker.repository import ApplicationRepository, ContactRepository
from jobtrail.tracker.schemas import (
    ApplicationCreate,
    ApplicationUpdate,
    ContactCreate,
    ContactUpdate,
    parse_payload,
)
from jobtrail.utils.dates import to_utc, utcnow

logger = logging.getLogger(__name__)

# Fields that cannot be cleared; an explicit None in an update is ignored.
APPLICATION_REQUIRED = frozenset(
    {"company", "role", "status", "source", "date_applied", "contacts"}
)
CONTACT_REQUIRED = frozenset({"name", "email", "company", "role", "met_at", "met_date"})


def _new_id() -> str:
    return uuid.uuid4().hex


def _clean_updates(updates: dict, required: frozenset[str]) -> dict:
    cleaned = {}
    for key, value in updates.items():
        if value is None and key in required:
            continue
        if value is None and key == "notes":
            value = ""
        cleaned[key] = value
    return cleaned


class TrackerService:
    """Business logic service for tracked applications and contacts.

    Entity writes happen first. The activity log is a best-effort side
    record: if it cannot be written, the mutation still stands and the
    failure is logged.
    """

    def __init__(
        self,
        applications: ApplicationRepository,
        contacts: ContactRepository,
        activity: ActivityLogger,
    ):
        """Initialize the service.

        Args:
            applications: Repository of applications.
            contacts: Repository of networking contacts.
            activity: Activity logger fed with every mutation.
        """
        self.applications = applications
        self.contacts = contacts
        self.activity = activity

    # Applications

    async def create_application(self, user_id: str, data: dict) -> Application:
        """Create an application and log it.

        Args:
            user_id: Owner of the new application.
            data: Raw attribute mapping (company, role, date_applied, ...).

        Returns:
            The stored application.

        Raises:
            ValidationError: If the payload is invalid.
            DuplicateApplicationError: If the same company, role and date
                already exist for this user.
        """
        payload = parse_payload(ApplicationCreate, data)
        now = utcnow()
        application = Application(
            id=_new_id(),
            user_id=str(user_id),
            company=payload.company,
            role=payload.role,
            status=payload.status,
            source=payload.source,
            date_applied=payload.date_applied,
            last_updated=now,
            salary_range=SalaryRange(
                min=payload.salary_range.min, max=payload.salary_range.max
            ),
            contacts=list(payload.contacts),
            notes=payload.notes,
            created_at=now,
            updated_at=now,
        )
        await self.applications.insert(application)
        logger.info("Created application %s (%s)", application.id, application.display_name)

        await self._log(
            self.activity.record_create(
                user_id, EntityType.APPLICATION, application.snapshot()
            )
        )
        return application

    async def update_application(
        self, user_id: str, application_id: str, data: dict
    ) -> Application | None:
        """Apply an update and log one entry per changed tracked field.

        Returns:
            The updated application, or None if it was not found for this user.

        Raises:
            ValidationError: If the payload is invalid or updates nothing.
        """
        payload = parse_payload(ApplicationUpdate, data)
        updates = _clean_updates(
            payload.model_dump(exclude_unset=True), APPLICATION_REQUIRED
        )
        if not updates:
            raise ValidationError("No valid fields to update")

        existing = await self.applications.get(application_id, user_id)
        if existing is None:
            return None

        updated = await self.applications.update(application_id, user_id, updates)
        if updated is None:
            return None

        await self._log(
            self.activity.record_update(
                user_id,
                EntityType.APPLICATION,
                existing.snapshot(),
                updated.snapshot(),
            )
        )
        return updated

    async def delete_application(self, user_id: str, application_id: str) -> bool:
        """Delete an application and log it.

        Returns:
            True if the application existed and was deleted.
        """
        existing = await self.applications.get(application_id, user_id)
        if existing is None:
            return False

        if not await self.applications.delete(application_id, user_id):
            return False
        logger.info("Deleted application %s", application_id)

        await self._log(
            self.activity.record_delete(
                user_id, EntityType.APPLICATION, existing.snapshot()
            )
        )
        return True

    async def get_application(
        self, user_id: str, application_id: str
    ) -> Application | None:
        return await self.applications.get(application_id, user_id)

    async def list_applications(
        self,
        user_id: str,
        status: str | None = None,
        company: str | None = None,
        source: str | None = None,
        from_date: datetime | str | None = None,
        to_date: datetime | str | None = None,
    ) -> list[Application]:
        """List a user's applications with optional filters.

        Raises:
            ValidationError: If the status or a date bound is invalid.
        """
        status_filter = None
        if status:
            try:
                status_filter = ApplicationStatus(str(status).strip().lower())
            except ValueError as e:
                raise ValidationError(f"Invalid status: {status}") from e

        try:
            lower = to_utc(from_date)
            upper = to_utc(to_date)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid date filter: {e}") from e

        return await self.applications.list_for_user(
            user_id,
            status=status_filter,
            company=company,
            source=source,
            from_date=lower,
            to_date=upper,
        )

    # Contacts

    async def create_contact(
        self, user_id: str, data: dict, from_application: bool = False
    ) -> NetworkContact:
        """Create a networking contact and log it.

        Args:
            user_id: Owner of the new contact.
            data: Raw attribute mapping (name, email, company, ...).
            from_application: The contact was added from an application.

        Raises:
            ValidationError: If the payload is invalid.
        """
        payload = parse_payload(ContactCreate, data)
        now = utcnow()
        contact = NetworkContact(
            id=_new_id(),
            user_id=str(user_id),
            name=payload.name,
            email=payload.email,
            company=payload.company,
            role=payload.role,
            met_at=payload.met_at,
            met_date=payload.met_date or now,
            follow_up_date=payload.follow_up_date,
            last_contacted_date=payload.last_contacted_date,
            notes=payload.notes,
            created_at=now,
            updated_at=now,
        )
        await self.contacts.insert(contact)
        logger.info("Created contact %s (%s)", contact.id, contact.display_name)

        await self._log(
            self.activity.record_create(
                user_id,
                EntityType.NETWORK,
                contact.snapshot(),
                from_application=from_application,
            )
        )
        return contact

    async def update_contact(
        self, user_id: str, contact_id: str, data: dict
    ) -> NetworkContact | None:
        """Apply an update to a contact and log each changed field.

        Returns:
            The updated contact, or None if it was not found for this user.
        """
        payload = parse_payload(ContactUpdate, data)
        updates = _clean_updates(payload.model_dump(exclude_unset=True), CONTACT_REQUIRED)
        if not updates:
            raise ValidationError("No valid fields to update")

        existing = await self.contacts.get(contact_id, user_id)
        if existing is None:
            return None

        updated = await self.contacts.update(contact_id, user_id, updates)
        if updated is None:
            return None

        await self._log(
            self.activity.record_update(
                user_id, EntityType.NETWORK, existing.snapshot(), updated.snapshot()
            )
        )
        return updated

    async def delete_contact(self, user_id: str, contact_id: str) -> bool:
        """Delete a contact and log it.

        Returns:
            True if the contact existed and was deleted.
        """
        existing = await self.contacts.get(contact_id, user_id)
        if existing is None:
            return False

        if not await self.contacts.delete(contact_id, user_id):
            return False
        logger.info("Deleted contact %s", contact_id)

        await self._log(
            self.activity.record_delete(user_id, EntityType.NETWORK, existing.snapshot())
        )
        return True

    async def get_contact(self, user_id: str, contact_id: str) -> NetworkContact | None:
        return await self.contacts.get(contact_id, user_id)

    async def list_contacts(
        self,
        user_id: str,
        company: str | None = None,
        name: str | None = None,
        met_at: str | None = None,
    ) -> list[NetworkContact]:
        """List a user's contacts with optional filters.

        Raises:
            ValidationError: If ``met_at`` is not a known value.
        """
        met_at_filter = None
        if met_at:
            try:
                met_at_filter = MetAt(str(met_at).strip().lower())
            except ValueError as e:
                raise ValidationError(f"Invalid met_at: {met_at}") from e

        return await self.contacts.list_for_user(
            user_id, company=company, name=name, met_at=met_at_filter
        )

    async def _log(self, pending: Awaitable[object]) -> None:
        try:
            await pending
        except StoreUnavailable as e:
            logger.warning("Activity log write failed, mutation kept: %s", e)
