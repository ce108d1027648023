"""Derived statistics over a user's applications and contacts.

Public API:
- AnalyticsService: Stats, network stats and streaks for one user
- compute_streak: Pure current/longest streak calculation
"""

from jobtrail.analytics.models import (
    NetworkStats,
    SourceBreakdown,
    StatsSnapshot,
    StreakResult,
)
from jobtrail.analytics.service import AnalyticsService
from jobtrail.analytics.streak import compute_streak

__all__ = [
    "AnalyticsService",
    "NetworkStats",
    "SourceBreakdown",
    "StatsSnapshot",
    "StreakResult",
    "compute_streak",
]
