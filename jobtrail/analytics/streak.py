"""Consecutive-day application streaks."""

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from jobtrail.analytics.models import StreakResult

ONE_DAY = timedelta(days=1)


def _calendar_day(value: date | datetime) -> date:
    # datetime is a subclass of date; use the value's own day boundary
    if isinstance(value, datetime):
        return value.date()
    return value


def compute_streak(dates: Iterable[date | datetime], today: date) -> StreakResult:
    """Compute the current and longest streaks from application dates.

    Args:
        dates: Dates of every application, duplicates allowed.
        today: The evaluation day.

    Returns:
        The current streak (0 unless the latest day is today or yesterday)
        and the longest run of consecutive days anywhere in the history.
    """
    days = sorted({_calendar_day(value) for value in dates}, reverse=True)
    if not days:
        return StreakResult(current_streak=0, longest_streak=0)

    current = 0
    if days[0] in (today, today - ONE_DAY):
        current = 1
        for newer, older in zip(days, days[1:]):
            if newer - older != ONE_DAY:
                break
            current += 1

    longest = run = 1
    for newer, older in zip(days, days[1:]):
        run = run + 1 if newer - older == ONE_DAY else 1
        longest = max(longest, run)

    return StreakResult(current_streak=current, longest_streak=longest)
