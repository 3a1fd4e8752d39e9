"""Calendar heatmap: a fixed-length trailing window of daily minutes."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from daily_log import normalize_day
from errors import ValidationFailure
from models import CalendarDay, DailyLogEntry


def build_calendar(
    log: dict[date, DailyLogEntry],
    now: datetime | date,
    window_days: int = 365,
) -> list[CalendarDay]:
    """
    One entry per day from ``now - (window_days - 1)`` to ``now``, oldest first.

    Days without a log entry report 0 minutes; the list is always
    ``window_days`` long.
    """
    if window_days < 1:
        raise ValidationFailure(f"window_days must be at least 1, got {window_days}")

    today = normalize_day(now)
    first = today - timedelta(days=window_days - 1)

    calendar: list[CalendarDay] = []
    for offset in range(window_days):
        day = first + timedelta(days=offset)
        entry = log.get(day)
        minutes = entry.minutes if entry else 0
        calendar.append(CalendarDay(date=day, minutes=minutes, studied=minutes > 0))
    return calendar
