"""
Stats aggregator — daily / weekly / monthly / lifetime views.

Pure functions over a ``UserStudyRecord``; nothing here mutates state.
Weeks start on Sunday (server-local), months on the 1st.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from daily_log import normalize_day, sum_range
from models import (
    LifetimeStats,
    PeriodStats,
    StatsSummary,
    StreakOut,
    UserStudyRecord,
)
from streak import is_streak_active


def week_start(day: date) -> date:
    """Most recent Sunday at or before ``day``."""
    # date.weekday(): Monday = 0 … Sunday = 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def month_start(day: date) -> date:
    return day.replace(day=1)


def _progress(minutes: int, goal: int) -> float:
    if goal <= 0:
        return 0.0
    return round(min(100.0, minutes / goal * 100), 1)


def _period(record: UserStudyRecord, start: date, end: date, goal: int | None = None) -> PeriodStats:
    minutes, sessions = sum_range(record.daily_log, start, end)
    return PeriodStats(
        minutes=minutes,
        sessions=sessions,
        goal=goal,
        progress=_progress(minutes, goal) if goal is not None else None,
    )


def summarize(record: UserStudyRecord, now: datetime | date) -> StatsSummary:
    today = normalize_day(now)
    stats = record.stats

    return StatsSummary(
        daily=_period(record, today, today, stats.daily_goal),
        weekly=_period(record, week_start(today), today, stats.weekly_goal),
        monthly=_period(record, month_start(today), today),
        lifetime=LifetimeStats(
            minutes=stats.total_minutes,
            sessions=stats.total_sessions,
            total_hours=round(stats.total_minutes / 60, 1),
        ),
        streak=StreakOut(
            current=stats.current_streak,
            longest=stats.longest_streak,
            last_study_date=stats.last_study_date,
            active=is_streak_active(stats, today),
        ),
    )
