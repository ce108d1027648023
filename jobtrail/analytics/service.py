"""Analytics over a user's applications and networking contacts."""

import logging
import math
from datetime import datetime

from jobtrail.analytics.models import (
    NetworkStats,
    SourceBreakdown,
    StatsSnapshot,
    StreakResult,
)
from jobtrail.analytics.streak import compute_streak
from jobtrail.tracker.models import ApplicationStatus
from jobtrail.tracker.repository import ApplicationRepository, ContactRepository
from jobtrail.utils.dates import to_utc, utcnow

logger = logging.getLogger(__name__)

# Statuses that mean the employer reacted to the application.
RESPONSE_STATUSES = frozenset(
    {
        ApplicationStatus.SCREENING.value,
        ApplicationStatus.INTERVIEWING.value,
        ApplicationStatus.OFFER.value,
        ApplicationStatus.REJECTED.value,
    }
)

ALL_STATUSES = frozenset(status.value for status in ApplicationStatus)


def response_rate(responded: int, total: int) -> float:
    """Percentage of ``total`` that responded; 0 when there is nothing to divide."""
    if total == 0:
        return 0
    return responded / total * 100


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AnalyticsService:
    """Read-only statistics for one user at a time.

    Every method tolerates a user with no data and returns zero-valued
    results instead of raising.
    """

    def __init__(
        self,
        applications: ApplicationRepository,
        contacts: ContactRepository,
        count_applied_as_response: bool = False,
    ):
        """Initialize the service.

        Args:
            applications: Repository of applications.
            contacts: Repository of networking contacts.
            count_applied_as_response: Count every recognized status,
                including ``applied``, as a response.
        """
        self.applications = applications
        self.contacts = contacts
        self.responded_statuses = (
            ALL_STATUSES if count_applied_as_response else RESPONSE_STATUSES
        )

    async def status_breakdown(self, user_id: str) -> dict[str, int]:
        return await self.applications.get_status_counts(user_id)

    async def source_breakdown(self, user_id: str) -> list[SourceBreakdown]:
        rows = await self.applications.get_source_counts(
            user_id, self.responded_statuses
        )
        return [
            SourceBreakdown(
                source=source,
                total=total,
                responded=responded,
                response_rate=response_rate(responded, total),
            )
            for source, total, responded in rows
        ]

    async def avg_days_per_stage(self, user_id: str) -> dict[str, int]:
        averages = await self.applications.get_average_days_by_status(user_id)
        return {status: round_half_up(days) for status, days in averages.items()}

    async def get_stats(self, user_id: str) -> StatsSnapshot:
        """Compute the full statistics snapshot for a user."""
        stats = StatsSnapshot(
            total=await self.applications.count(user_id),
            by_status=await self.status_breakdown(user_id),
            by_source=await self.source_breakdown(user_id),
            avg_days_per_stage=await self.avg_days_per_stage(user_id),
        )
        logger.debug("Computed stats for user %s: %d applications", user_id, stats.total)
        return stats

    async def get_network_stats(self, user_id: str) -> NetworkStats:
        """Count a user's contacts by company and by where they were met."""
        by_company = await self.contacts.get_grouped_counts(user_id, "company")
        by_met_at = await self.contacts.get_grouped_counts(user_id, "met_at")

        companies: dict[str, int] = {}
        for company, count in by_company:
            key = company or "unknown"
            companies[key] = companies.get(key, 0) + count

        met_at: dict[str, int] = {}
        for value, count in by_met_at:
            key = value or "other"
            met_at[key] = met_at.get(key, 0) + count

        return NetworkStats(
            total=await self.contacts.count(user_id),
            by_company=companies,
            by_met_at=met_at,
        )

    async def get_streak(
        self, user_id: str, now: datetime | None = None
    ) -> StreakResult:
        """Compute application streaks as of ``now`` (UTC day boundaries).

        Args:
            user_id: Owner of the applications.
            now: Evaluation time; defaults to the current time.
        """
        today = to_utc(now or utcnow()).date()
        dates = await self.applications.list_dates_applied(user_id)
        return compute_streak(dates, today)
