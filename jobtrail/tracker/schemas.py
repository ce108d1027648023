"""Input payload models for application and contact mutations.

These validate what the outer layer hands in before anything reaches the
store. Pydantic errors are re-raised as :class:`jobtrail.errors.ValidationError`
by :func:`parse_payload`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, TypeVar

import pydantic
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from jobtrail.errors import ValidationError
from jobtrail.tracker.models import ApplicationStatus, MetAt
from jobtrail.utils.dates import to_utc


def _coerce_datetime(value: object) -> datetime | None:
    try:
        return to_utc(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid date: {value!r}") from e


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


UTCDateTime = Annotated[datetime | None, BeforeValidator(_coerce_datetime)]
Trimmed = Annotated[str, BeforeValidator(_strip)]


class SalaryRangeInput(BaseModel):
    """Salary bounds as supplied by the caller."""

    min: float | None = None
    max: float | None = None


class ApplicationCreate(BaseModel):
    """Payload for creating an application."""

    model_config = ConfigDict(extra="ignore")

    company: Trimmed = Field(..., min_length=1)
    role: Trimmed = Field(..., min_length=1)
    date_applied: UTCDateTime
    status: ApplicationStatus = ApplicationStatus.APPLIED
    source: Trimmed = "other"
    notes: str = ""
    salary_range: SalaryRangeInput = Field(default_factory=SalaryRangeInput)
    contacts: list[str] = Field(default_factory=list)

    @field_validator("date_applied")
    @classmethod
    def require_date_applied(cls, v: datetime | None) -> datetime:
        if v is None:
            raise ValueError("date_applied is required")
        return v

    @field_validator("source", mode="before")
    @classmethod
    def default_source(cls, v: object) -> object:
        return v or "other"


class ApplicationUpdate(BaseModel):
    """Payload for updating an application; only set fields are applied."""

    model_config = ConfigDict(extra="ignore")

    company: Trimmed | None = Field(default=None, min_length=1)
    role: Trimmed | None = Field(default=None, min_length=1)
    status: ApplicationStatus | None = None
    source: Trimmed | None = None
    date_applied: UTCDateTime = None
    notes: str | None = None
    salary_range: SalaryRangeInput | None = None
    contacts: list[str] | None = None

    @field_validator("source")
    @classmethod
    def default_source(cls, v: str | None) -> str | None:
        if v is not None and not v:
            return "other"
        return v


class ContactCreate(BaseModel):
    """Payload for creating a networking contact."""

    model_config = ConfigDict(extra="ignore")

    name: Trimmed = Field(..., min_length=2)
    email: Trimmed = ""
    company: Trimmed = ""
    role: Trimmed = ""
    met_at: MetAt = MetAt.OTHER
    met_date: UTCDateTime = None
    follow_up_date: UTCDateTime = None
    last_contacted_date: UTCDateTime = None
    notes: str = ""

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("met_at", mode="before")
    @classmethod
    def default_met_at(cls, v: object) -> object:
        return v or MetAt.OTHER


class ContactUpdate(BaseModel):
    """Payload for updating a networking contact."""

    model_config = ConfigDict(extra="ignore")

    name: Trimmed | None = Field(default=None, min_length=2)
    email: Trimmed | None = None
    company: Trimmed | None = None
    role: Trimmed | None = None
    met_at: MetAt | None = None
    met_date: UTCDateTime = None
    follow_up_date: UTCDateTime = None
    last_contacted_date: UTCDateTime = None
    notes: str | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return v.lower() if v is not None else None


PayloadT = TypeVar("PayloadT", bound=BaseModel)


def parse_payload(model: type[PayloadT], data: dict) -> PayloadT:
    """Validate a raw mapping against a payload model.

    Args:
        model: The payload model class.
        data: Raw attribute mapping from the caller.

    Returns:
        The validated payload.

    Raises:
        ValidationError: If any field is invalid.
    """
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(f"Invalid {model.__name__}: {details}") from e
