"""Tests for application and contact models."""

from datetime import UTC, datetime

from jobtrail.tracker.models import (
    Application,
    ApplicationStatus,
    MetAt,
    NetworkContact,
    SalaryRange,
)


class TestApplication:
    """Test the Application model."""

    def make(self) -> Application:
        return Application(
            id="app-1",
            user_id="user-1",
            company="Acme",
            role="Engineer",
            status=ApplicationStatus.SCREENING,
            source="referral",
            date_applied=datetime(2025, 1, 2, tzinfo=UTC),
            last_updated=datetime(2025, 1, 5, tzinfo=UTC),
            salary_range=SalaryRange(min=100, max=200),
        )

    def test_display_name(self):
        assert self.make().display_name == "Acme - Engineer"

    def test_snapshot_uses_plain_values(self):
        """Snapshots hold enum values and dict salary ranges."""
        snapshot = self.make().snapshot()
        assert snapshot["status"] == "screening"
        assert snapshot["salary_range"] == {"min": 100, "max": 200}
        assert snapshot["date_applied"] == datetime(2025, 1, 2, tzinfo=UTC)

    def test_dict_round_trip(self):
        application = self.make()
        data = application.to_dict()

        assert data["date_applied"] == "2025-01-02T00:00:00+00:00"
        assert Application.from_dict(data) == application

    def test_from_dict_defaults(self):
        """Missing optional fields fall back to defaults."""
        application = Application.from_dict(
            {
                "id": "a",
                "user_id": 42,
                "company": "Acme",
                "role": "Engineer",
                "status": "applied",
                "date_applied": "2025-01-02",
                "last_updated": "2025-01-02",
            }
        )
        assert application.user_id == "42"
        assert application.source == "other"
        assert application.salary_range == SalaryRange()
        assert application.contacts == []


class TestNetworkContact:
    """Test the NetworkContact model."""

    def make(self, company: str = "Acme") -> NetworkContact:
        return NetworkContact(
            id="c-1",
            user_id="user-1",
            name="Ann Lee",
            company=company,
            met_at=MetAt.CAREER_FAIR,
            met_date=datetime(2025, 1, 2, tzinfo=UTC),
        )

    def test_display_name_with_company(self):
        assert self.make().display_name == "Ann Lee (Acme)"

    def test_display_name_without_company(self):
        assert self.make(company="").display_name == "Ann Lee"

    def test_dict_round_trip(self):
        contact = self.make()
        data = contact.to_dict()

        assert data["met_at"] == "career_fair"
        assert data["follow_up_date"] is None
        assert NetworkContact.from_dict(data) == contact
