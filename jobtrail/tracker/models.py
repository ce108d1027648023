"""Data models for tracked applications and networking contacts."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from jobtrail.utils.dates import to_iso, to_utc


class ApplicationStatus(str, Enum):
    """Status of a job application."""

    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEWING = "interviewing"
    OFFER = "offer"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class MetAt(str, Enum):
    """Where a networking contact was met."""

    LINKEDIN = "linkedin"
    CAREER_FAIR = "career_fair"
    MEETUP = "meetup"
    REFERRAL = "referral"
    COLD_OUTREACH = "cold_outreach"
    OTHER = "other"


@dataclass
class SalaryRange:
    """Advertised or negotiated salary bounds."""

    min: float | None = None
    max: float | None = None

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max}

    @classmethod
    def from_dict(cls, data: dict | None) -> "SalaryRange":
        if not data:
            return cls()
        return cls(min=data.get("min"), max=data.get("max"))


@dataclass
class Application:
    """A job application owned by one user.

    Attributes:
        id: Unique identifier of the application.
        user_id: Owner of the application.
        company: Company applied to.
        role: Role applied for.
        status: Current pipeline status.
        source: Where the posting was found (linkedin, referral, ...).
        date_applied: When the application was submitted.
        last_updated: When the application was last modified.
        salary_range: Salary bounds, both optional.
        contacts: Names or ids of people linked to the application.
        notes: Free-form notes.
        created_at: Creation timestamp.
        updated_at: Last write timestamp.
    """

    id: str
    user_id: str
    company: str
    role: str
    status: ApplicationStatus
    source: str
    date_applied: datetime
    last_updated: datetime
    salary_range: SalaryRange = field(default_factory=SalaryRange)
    contacts: list[str] = field(default_factory=list)
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return f"{self.company} - {self.role}"

    def snapshot(self) -> dict:
        """Return the attribute mapping used for change detection."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "company": self.company,
            "role": self.role,
            "status": self.status.value,
            "source": self.source,
            "date_applied": self.date_applied,
            "last_updated": self.last_updated,
            "salary_range": self.salary_range.to_dict(),
            "contacts": list(self.contacts),
            "notes": self.notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_dict(self) -> dict:
        """Serialize the application to a JSON-friendly dictionary."""
        data = self.snapshot()
        for key in ("date_applied", "last_updated", "created_at", "updated_at"):
            data[key] = to_iso(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Application":
        """Deserialize an application from a dictionary."""
        return cls(
            id=data["id"],
            user_id=str(data["user_id"]),
            company=data["company"],
            role=data["role"],
            status=ApplicationStatus(data["status"]),
            source=data.get("source") or "other",
            date_applied=to_utc(data["date_applied"]),
            last_updated=to_utc(data["last_updated"]),
            salary_range=SalaryRange.from_dict(data.get("salary_range")),
            contacts=list(data.get("contacts") or []),
            notes=data.get("notes") or "",
            created_at=to_utc(data.get("created_at")),
            updated_at=to_utc(data.get("updated_at")),
        )


@dataclass
class NetworkContact:
    """A networking contact owned by one user."""

    id: str
    user_id: str
    name: str
    met_at: MetAt
    met_date: datetime
    email: str = ""
    company: str = ""
    role: str = ""
    follow_up_date: datetime | None = None
    last_contacted_date: datetime | None = None
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        if self.company:
            return f"{self.name} ({self.company})"
        return self.name

    def snapshot(self) -> dict:
        """Return the attribute mapping used for change detection."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "company": self.company,
            "role": self.role,
            "met_at": self.met_at.value,
            "met_date": self.met_date,
            "follow_up_date": self.follow_up_date,
            "last_contacted_date": self.last_contacted_date,
            "notes": self.notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_dict(self) -> dict:
        """Serialize the contact to a JSON-friendly dictionary."""
        data = self.snapshot()
        for key in (
            "met_date",
            "follow_up_date",
            "last_contacted_date",
            "created_at",
            "updated_at",
        ):
            data[key] = to_iso(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "NetworkContact":
        """Deserialize a contact from a dictionary."""
        return cls(
            id=data["id"],
            user_id=str(data["user_id"]),
            name=data["name"],
            met_at=MetAt(data.get("met_at") or MetAt.OTHER.value),
            met_date=to_utc(data["met_date"]),
            email=data.get("email") or "",
            company=data.get("company") or "",
            role=data.get("role") or "",
            follow_up_date=to_utc(data.get("follow_up_date")),
            last_contacted_date=to_utc(data.get("last_contacted_date")),
            notes=data.get("notes") or "",
            created_at=to_utc(data.get("created_at")),
            updated_at=to_utc(data.get("updated_at")),
        )
