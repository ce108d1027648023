"""Result models for analytics. None of these are persisted."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceBreakdown:
    """Application totals and response rate for one source."""

    source: str
    total: int
    responded: int
    response_rate: float

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "total": self.total,
            "responded": self.responded,
            "response_rate": self.response_rate,
        }


@dataclass(frozen=True)
class StatsSnapshot:
    """Aggregate statistics over a user's applications.

    Attributes:
        total: Number of applications.
        by_status: Count per status; statuses without applications are absent.
        by_source: Totals and response rate per source.
        avg_days_per_stage: Rounded average days from applying to the last
            update, per current status (``applied`` excluded).
    """

    total: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    by_source: list[SourceBreakdown] = field(default_factory=list)
    avg_days_per_stage: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "by_status": dict(self.by_status),
            "by_source": [item.to_dict() for item in self.by_source],
            "avg_days_per_stage": dict(self.avg_days_per_stage),
        }


@dataclass(frozen=True)
class NetworkStats:
    """Contact counts by company and by where they were met."""

    total: int = 0
    by_company: dict[str, int] = field(default_factory=dict)
    by_met_at: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "by_company": dict(self.by_company),
            "by_met_at": dict(self.by_met_at),
        }


@dataclass(frozen=True)
class StreakResult:
    """Current and longest runs of consecutive application days."""

    current_streak: int = 0
    longest_streak: int = 0

    def to_dict(self) -> dict:
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
        }
