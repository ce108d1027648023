"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime

import pytest

from jobtrail.activity.repository import ActivityLogRepository
from jobtrail.activity.service import ActivityLogger
from jobtrail.analytics.service import AnalyticsService
from jobtrail.config.settings import reset_settings
from jobtrail.storage import Database
from jobtrail.tracker.repository import ApplicationRepository, ContactRepository
from jobtrail.tracker.service import TrackerService
from jobtrail.utils.logging import reset_logging


@pytest.fixture(autouse=True)
def reset_global_state():
    """Undo logging and settings singletons between tests."""
    yield
    reset_logging()
    reset_settings()


@pytest.fixture
def user_id() -> str:
    """Owner used by most tests."""
    return "user-1"


@pytest.fixture
def fixed_now() -> datetime:
    """A fixed evaluation time."""
    return datetime(2025, 3, 10, 15, 30, tzinfo=UTC)


@pytest.fixture
async def database(tmp_path):
    """An initialized database in a temporary directory."""
    db = Database(tmp_path / "jobtrail.db")
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def log_repo(database) -> ActivityLogRepository:
    return ActivityLogRepository(database)


@pytest.fixture
def activity(log_repo) -> ActivityLogger:
    return ActivityLogger(log_repo)


@pytest.fixture
def applications(database) -> ApplicationRepository:
    return ApplicationRepository(database)


@pytest.fixture
def contacts(database) -> ContactRepository:
    return ContactRepository(database)


@pytest.fixture
def tracker(applications, contacts, activity) -> TrackerService:
    return TrackerService(applications, contacts, activity)


@pytest.fixture
def analytics(applications, contacts) -> AnalyticsService:
    return AnalyticsService(applications, contacts)
