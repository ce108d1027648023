"""Tests for the ActivityLogger service."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from jobtrail.activity.models import EntityType, LogAction
from jobtrail.activity.service import ActivityLogger
from jobtrail.errors import StoreUnavailable, ValidationError


class TickingClock:
    """Clock that advances one second per call."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock(datetime(2025, 3, 1, tzinfo=UTC))


@pytest.fixture
def logger_service(log_repo, clock) -> ActivityLogger:
    return ActivityLogger(log_repo, clock=clock)


@pytest.fixture
def app_state() -> dict:
    return {
        "id": "app-1",
        "company": "Acme",
        "role": "Engineer",
        "status": "applied",
        "source": "linkedin",
        "notes": "",
        "salary_range": {"min": None, "max": None},
    }


@pytest.fixture
def contact_state() -> dict:
    return {
        "id": "c-1",
        "name": "Ann Lee",
        "email": "ann@example.com",
        "company": "Acme",
        "role": "Recruiter",
        "met_at": "linkedin",
        "notes": "",
        "met_date": datetime(2025, 1, 1, tzinfo=UTC),
        "follow_up_date": None,
        "last_contacted_date": None,
    }


class TestRecordCreateDelete:
    """Test create and delete entries."""

    @pytest.mark.asyncio
    async def test_record_create_application(self, logger_service, log_repo, app_state):
        """Creating an application appends one 'created' entry."""
        entry = await logger_service.record_create(
            "user-1", EntityType.APPLICATION, app_state
        )

        assert entry.action == LogAction.CREATED
        assert entry.summary == "Added Acme - Engineer to applications"
        assert entry.entity_name == "Acme - Engineer"
        assert entry.entity_id == "app-1"
        assert entry.changes is None

        stored = await log_repo.list_by_user("user-1")
        assert [e.id for e in stored] == [entry.id]

    @pytest.mark.asyncio
    async def test_record_create_contact_from_application(
        self, logger_service, contact_state
    ):
        entry = await logger_service.record_create(
            "user-1", EntityType.NETWORK, contact_state, from_application=True
        )
        assert entry.summary == "Added Ann Lee (Acme) to network (from application)"

    @pytest.mark.asyncio
    async def test_record_delete_contact(self, logger_service, contact_state):
        entry = await logger_service.record_delete(
            "user-1", EntityType.NETWORK, contact_state
        )
        assert entry.action == LogAction.DELETED
        assert entry.summary == "Deleted Ann Lee (Acme) from network"

    @pytest.mark.asyncio
    async def test_record_delete_application(self, logger_service, app_state):
        entry = await logger_service.record_delete(
            "user-1", EntityType.APPLICATION, app_state
        )
        assert entry.summary == "Deleted Acme - Engineer application"


class TestRecordUpdate:
    """Test per-field fan-out on update."""

    @pytest.mark.asyncio
    async def test_no_change_no_entry(self, logger_service, log_repo, app_state):
        """A no-op update should not produce any entry."""
        entries = await logger_service.record_update(
            "user-1", EntityType.APPLICATION, app_state, dict(app_state)
        )
        assert entries == []
        assert await log_repo.list_by_user("user-1") == []

    @pytest.mark.asyncio
    async def test_single_field_change_one_entry(self, logger_service, log_repo, app_state):
        """One changed field yields exactly one entry for that field."""
        new_state = {**app_state, "notes": "Phone screen next week"}
        entries = await logger_service.record_update(
            "user-1", EntityType.APPLICATION, app_state, new_state
        )

        assert len(entries) == 1
        assert entries[0].changes.field == "notes"
        assert entries[0].summary == "Updated notes"
        assert len(await log_repo.list_by_user("user-1")) == 1

    @pytest.mark.asyncio
    async def test_status_summary_with_other_changes(self, logger_service, app_state):
        """The status entry keeps its own summary when several fields change."""
        new_state = {
            **app_state,
            "status": "interviewing",
            "company": "Acme Inc",
            "salary_range": {"min": 90000, "max": 110000},
        }
        entries = await logger_service.record_update(
            "user-1", EntityType.APPLICATION, app_state, new_state
        )

        summaries = {e.changes.field: e.summary for e in entries}
        assert summaries == {
            "status": "Status changed from applied to interviewing",
            "company": "Updated company",
            "salary_range": "Updated salary range",
        }
        assert all(e.action == LogAction.UPDATED for e in entries)
        assert all(e.entity_name == "Acme Inc - Engineer" for e in entries)

    @pytest.mark.asyncio
    async def test_contact_update_summary(self, logger_service, contact_state):
        new_state = {**contact_state, "role": "Hiring Manager", "name": "Ann Smith"}
        entries = await logger_service.record_update(
            "user-1", EntityType.NETWORK, contact_state, new_state
        )

        assert [e.summary for e in entries] == [
            "Updated Ann Smith's name",
            "Updated Ann Smith's role",
        ]

    @pytest.mark.asyncio
    async def test_contact_date_string_equal_to_datetime(
        self, logger_service, contact_state
    ):
        """An ISO string for the same met_date is not a change."""
        new_state = {**contact_state, "met_date": "2025-01-01T00:00:00Z"}
        entries = await logger_service.record_update(
            "user-1", EntityType.NETWORK, contact_state, new_state
        )
        assert entries == []

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, app_state):
        """append failures are surfaced to the caller."""
        repo = AsyncMock()
        repo.append.side_effect = StoreUnavailable("down")
        service = ActivityLogger(repo)

        with pytest.raises(StoreUnavailable):
            await service.record_update(
                "user-1",
                EntityType.APPLICATION,
                app_state,
                {**app_state, "status": "offer"},
            )


class TestListAndNotes:
    """Test listing and note editing through the facade."""

    @pytest.mark.asyncio
    async def test_list_logs_dispatch(self, logger_service, app_state, contact_state):
        await logger_service.record_create("user-1", EntityType.APPLICATION, app_state)
        await logger_service.record_create("user-1", EntityType.NETWORK, contact_state)
        await logger_service.record_update(
            "user-1",
            EntityType.APPLICATION,
            app_state,
            {**app_state, "status": "screening"},
        )

        feed = await logger_service.list_logs("user-1")
        assert len(feed) == 3
        assert feed[0].summary == "Status changed from applied to screening"

        network = await logger_service.list_logs("user-1", entity_type="network")
        assert [e.entity_id for e in network] == ["c-1"]

        by_entity = await logger_service.list_logs("user-1", entity_id="app-1")
        assert len(by_entity) == 2

        limited = await logger_service.list_logs("user-1", limit=1)
        assert len(limited) == 1

    @pytest.mark.asyncio
    async def test_list_logs_by_entity_hides_other_users(self, logger_service, app_state):
        await logger_service.record_create("user-1", EntityType.APPLICATION, app_state)
        assert await logger_service.list_logs("user-2", entity_id="app-1") == []

    @pytest.mark.asyncio
    async def test_list_logs_invalid_entity_type(self, logger_service):
        with pytest.raises(ValidationError):
            await logger_service.list_logs("user-1", entity_type="jobs")

    @pytest.mark.asyncio
    async def test_list_logs_invalid_limit(self, logger_service):
        with pytest.raises(ValidationError):
            await logger_service.list_logs("user-1", limit=0)

    @pytest.mark.asyncio
    async def test_update_log_note(self, logger_service, app_state):
        entry = await logger_service.record_create(
            "user-1", EntityType.APPLICATION, app_state
        )

        updated = await logger_service.update_log_note(entry.id, "user-1", "Great team")
        assert updated.user_note == "Great team"

        assert await logger_service.update_log_note(entry.id, "user-2", "x") is None

    @pytest.mark.asyncio
    async def test_update_log_note_requires_note(self, logger_service):
        with pytest.raises(ValidationError):
            await logger_service.update_log_note("e1", "user-1", None)
