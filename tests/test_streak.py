"""Tests for the streak calculator and the daily log it is derived from."""

from datetime import date, datetime, timedelta

import pytest

from daily_log import minutes_on, normalize_day, record_minutes, sum_range
from errors import ValidationFailure
from models import DailyLogEntry, UserStudyStats
from streak import advance_streak, consecutive_days_ending, is_streak_active

START = date(2024, 1, 1)


class TestDailyLog:
    def test_normalize_truncates_time_of_day(self):
        assert normalize_day(datetime(2024, 1, 10, 23, 59)) == date(2024, 1, 10)
        assert normalize_day(date(2024, 1, 10)) == date(2024, 1, 10)

    def test_first_activity_creates_entry(self):
        log: dict = {}
        entry = record_minutes(log, datetime(2024, 1, 10, 9, 30), 30)
        assert list(log) == [date(2024, 1, 10)]
        assert entry.minutes == 30
        assert entry.sessions == 1

    def test_same_day_activity_accumulates(self):
        log: dict = {}
        record_minutes(log, datetime(2024, 1, 10, 8, 0), 30)
        record_minutes(log, datetime(2024, 1, 10, 22, 0), 45, session_completed=False)
        assert len(log) == 1
        assert log[date(2024, 1, 10)].minutes == 75
        assert log[date(2024, 1, 10)].sessions == 1

    def test_contiguous_days_stay_separate(self):
        log: dict = {}
        record_minutes(log, datetime(2024, 1, 10, 23, 59), 10)
        record_minutes(log, datetime(2024, 1, 11, 0, 1), 20)
        assert minutes_on(log, date(2024, 1, 10)) == 10
        assert minutes_on(log, date(2024, 1, 11)) == 20

    @pytest.mark.parametrize("minutes", [0, -5])
    def test_non_positive_minutes_rejected(self, minutes):
        log: dict = {}
        with pytest.raises(ValidationFailure):
            record_minutes(log, START, minutes)
        assert log == {}

    def test_sum_range_is_inclusive(self):
        log = {
            date(2024, 1, 1): DailyLogEntry(minutes=10, sessions=1),
            date(2024, 1, 3): DailyLogEntry(minutes=20, sessions=2),
            date(2024, 1, 4): DailyLogEntry(minutes=40, sessions=1),
        }
        assert sum_range(log, date(2024, 1, 1), date(2024, 1, 3)) == (30, 3)


class TestAdvanceStreak:
    def test_first_ever_session_starts_at_one(self):
        stats = advance_streak(UserStudyStats(), START)
        assert stats.current_streak == 1
        assert stats.longest_streak == 1
        assert stats.last_study_date == START

    @pytest.mark.parametrize("days", [1, 2, 7, 30])
    def test_consecutive_days_count_up(self, days):
        stats = UserStudyStats()
        for i in range(days):
            advance_streak(stats, START + timedelta(days=i))
        assert stats.current_streak == days
        assert stats.longest_streak == days

    @pytest.mark.parametrize("gap", [2, 3, 40])
    def test_gap_of_two_or_more_days_resets(self, gap):
        stats = UserStudyStats(current_streak=12, longest_streak=12, last_study_date=START)
        advance_streak(stats, START + timedelta(days=gap))
        assert stats.current_streak == 1
        assert stats.longest_streak == 12

    def test_same_day_does_not_double_count(self):
        stats = UserStudyStats()
        advance_streak(stats, START)
        advance_streak(stats, START)
        advance_streak(stats, START)
        assert stats.current_streak == 1

    def test_reset_keeps_longest(self):
        today = date(2024, 3, 10)
        stats = UserStudyStats(
            current_streak=4,
            longest_streak=50,
            last_study_date=today - timedelta(days=3),
        )
        advance_streak(stats, today)
        assert stats.current_streak == 1
        assert stats.longest_streak == 50

    def test_longest_never_decreases(self):
        # study pattern: 3 days on, 2 off, 5 on, 4 off, 1 on
        pattern = [1, 1, 1, 0, 0, 1, 1, 1, 1, 1, 0, 0, 0, 0, 1]
        stats = UserStudyStats()
        longest_seen = []
        for i, studied in enumerate(pattern):
            if studied:
                advance_streak(stats, START + timedelta(days=i))
            longest_seen.append(stats.longest_streak)
            assert stats.longest_streak >= stats.current_streak

        assert longest_seen == sorted(longest_seen)
        assert stats.longest_streak == 5
        assert stats.current_streak == 1


class TestStreakHelpers:
    def test_active_when_last_studied_yesterday(self):
        stats = UserStudyStats(current_streak=3, longest_streak=3, last_study_date=START)
        assert is_streak_active(stats, START + timedelta(days=1))
        assert not is_streak_active(stats, START + timedelta(days=2))

    def test_inactive_without_history(self):
        assert not is_streak_active(UserStudyStats(), START)

    def test_consecutive_days_ending(self):
        log = {START + timedelta(days=i): DailyLogEntry(minutes=15) for i in range(5)}
        log[START + timedelta(days=2)] = DailyLogEntry(minutes=0)
        assert consecutive_days_ending(log, START + timedelta(days=4)) == 2
        assert consecutive_days_ending(log, START + timedelta(days=1)) == 2
        assert consecutive_days_ending(log, START + timedelta(days=9)) == 0
