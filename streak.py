"""
Streak calculator — consecutive calendar days with logged study.

A streak is alive while the last study day is today or yesterday. The
transition on each activity event depends only on the gap between
``last_study_date`` and today:

  gap ≥ 2 days (or never studied) → reset to 1
  gap = 1 day                     → +1
  gap = 0 (already counted today) → unchanged
"""

from __future__ import annotations

from datetime import date, timedelta

from daily_log import normalize_day
from models import DailyLogEntry, UserStudyStats


def advance_streak(stats: UserStudyStats, today: date) -> UserStudyStats:
    """Apply one activity event to the streak counters (mutates ``stats``)."""
    today = normalize_day(today)
    last_day = normalize_day(stats.last_study_date) if stats.last_study_date else None
    yesterday = today - timedelta(days=1)

    if last_day is None or last_day < yesterday:
        stats.current_streak = 1
    elif last_day == yesterday:
        stats.current_streak += 1

    stats.last_study_date = today
    stats.longest_streak = max(stats.longest_streak, stats.current_streak)
    return stats


def is_streak_active(stats: UserStudyStats, today: date) -> bool:
    """True while studying today would still continue the current streak."""
    if not stats.last_study_date or stats.current_streak <= 0:
        return False
    return normalize_day(stats.last_study_date) >= normalize_day(today) - timedelta(days=1)


def consecutive_days_ending(log: dict[date, DailyLogEntry], day: date) -> int:
    """Number of consecutive studied days ending on ``day`` (inclusive)."""
    count = 0
    cursor = normalize_day(day)
    while True:
        entry = log.get(cursor)
        if entry is None or entry.minutes <= 0:
            return count
        count += 1
        cursor -= timedelta(days=1)
