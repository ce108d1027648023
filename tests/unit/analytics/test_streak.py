"""Tests for the streak calculator."""

from datetime import UTC, date, datetime, timedelta

from jobtrail.analytics.models import StreakResult
from jobtrail.analytics.streak import compute_streak

TODAY = date(2025, 3, 10)


def days_ago(n: int) -> date:
    return TODAY - timedelta(days=n)


class TestCurrentStreak:
    """Test the current streak."""

    def test_no_dates(self):
        """No history gives zero streaks."""
        assert compute_streak([], TODAY) == StreakResult(0, 0)

    def test_three_consecutive_days_ending_today(self):
        result = compute_streak([TODAY, days_ago(1), days_ago(2)], TODAY)
        assert result == StreakResult(current_streak=3, longest_streak=3)

    def test_gap_after_today(self):
        result = compute_streak([TODAY, days_ago(5)], TODAY)
        assert result == StreakResult(current_streak=1, longest_streak=1)

    def test_streak_ending_yesterday_is_current(self):
        result = compute_streak([days_ago(1), days_ago(2)], TODAY)
        assert result.current_streak == 2

    def test_stale_history_has_no_current_streak(self):
        """Latest activity two days ago breaks the current streak."""
        result = compute_streak([days_ago(2), days_ago(3), days_ago(4)], TODAY)
        assert result == StreakResult(current_streak=0, longest_streak=3)

    def test_duplicate_days_collapse(self):
        """Several applications on one day count once."""
        dates = [
            datetime(2025, 3, 10, 9, 0, tzinfo=UTC),
            datetime(2025, 3, 10, 17, 45, tzinfo=UTC),
            datetime(2025, 3, 9, 23, 59, tzinfo=UTC),
        ]
        assert compute_streak(dates, TODAY) == StreakResult(2, 2)

    def test_unsorted_input(self):
        result = compute_streak([days_ago(2), TODAY, days_ago(1)], TODAY)
        assert result == StreakResult(3, 3)


class TestLongestStreak:
    """Test the longest streak."""

    def test_longest_run_independent_of_recency(self):
        """A long old run beats a short recent one."""
        dates = [TODAY, days_ago(1)] + [days_ago(n) for n in range(5, 9)]
        result = compute_streak(dates, TODAY)
        assert result == StreakResult(current_streak=2, longest_streak=4)

    def test_one_day_gap_then_three_day_gap(self):
        """Runs split by gaps are measured separately."""
        # run of 2, gap of 3 days, run of 2
        dates = [days_ago(10), days_ago(11), days_ago(14), days_ago(15)]
        result = compute_streak(dates, TODAY)
        assert result == StreakResult(current_streak=0, longest_streak=2)

    def test_single_old_day(self):
        """Any history gives a longest streak of at least one."""
        result = compute_streak([days_ago(30)], TODAY)
        assert result == StreakResult(current_streak=0, longest_streak=1)
