"""
Daily log — calendar day → accumulated minutes / sessions.

All day boundaries are server-local midnight; there is no per-user time zone.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from errors import ValidationFailure
from models import DailyLogEntry


def normalize_day(value: date | datetime) -> date:
    """Truncate a timestamp to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def record_minutes(
    log: dict[date, DailyLogEntry],
    day: date | datetime,
    minutes: int,
    session_completed: bool = True,
) -> DailyLogEntry:
    """
    Add ``minutes`` to the entry for ``day``, creating it on first activity.

    Mutates ``log`` in place and returns the day's entry.
    """
    if minutes <= 0:
        raise ValidationFailure(f"minutes must be a positive integer, got {minutes}")

    key = normalize_day(day)
    entry = log.get(key)
    if entry is None:
        entry = DailyLogEntry()
        log[key] = entry

    entry.minutes += minutes
    if session_completed:
        entry.sessions += 1
    return entry


def minutes_on(log: dict[date, DailyLogEntry], day: date | datetime) -> int:
    entry = log.get(normalize_day(day))
    return entry.minutes if entry else 0


def sum_range(
    log: dict[date, DailyLogEntry],
    start: date,
    end: date,
) -> tuple[int, int]:
    """(minutes, sessions) over ``[start, end]`` inclusive."""
    minutes = 0
    sessions = 0
    day = start
    while day <= end:
        entry = log.get(day)
        if entry is not None:
            minutes += entry.minutes
            sessions += entry.sessions
        day += timedelta(days=1)
    return minutes, sessions
