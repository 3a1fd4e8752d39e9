"""
Study tracker service — the seam between the HTTP layer and the engine.

Every write is one read-modify-write against a single user's record:
load → authorize → run the activity pipeline on a copy → CAS save.
A ConflictError from the save means nothing was applied; callers retry the
whole event.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from pydantic import ValidationError

import supabase_client as store
from activity_graph import apply_activity
from calendar_view import build_calendar
from config import StatsConfig
from errors import UnauthorizedError, ValidationFailure
from gamification import badge_statuses
from models import (
    ActivityEvent,
    BadgeListResponse,
    CalendarResponse,
    CompletedSession,
    SessionMeta,
    StatsSummary,
    UpdateStatsResponse,
    UserStudyRecord,
    UserStudyStats,
)
from stats import summarize

logger = logging.getLogger(__name__)


def _authorize(record: UserStudyRecord, actor_id: Optional[str]) -> None:
    if not actor_id:
        raise UnauthorizedError("Not authenticated")
    if record.owner_id != actor_id:
        raise UnauthorizedError(f"Not authorized to access stats of user {record.user_id}")


def _load_owned(user_id: str, actor_id: Optional[str]) -> UserStudyRecord:
    if not actor_id:
        raise UnauthorizedError("Not authenticated")
    record = store.load_user_record(user_id)
    _authorize(record, actor_id)
    return record


def _validation_message(err: ValidationError) -> str:
    first = err.errors()[0]
    field = ".".join(str(p) for p in first.get("loc", ()))
    return f"{field}: {first.get('msg')}" if field else first.get("msg", "invalid input")


# ──────────────────────────────────────────────────────────────
# Record lifecycle
# ──────────────────────────────────────────────────────────────

def register(user_id: str, actor_id: Optional[str], cfg: StatsConfig | None = None) -> UserStudyRecord:
    """Create the stats record for ``user_id``; only the user themself may do it."""
    if not actor_id:
        raise UnauthorizedError("Not authenticated")
    if actor_id != user_id:
        raise UnauthorizedError(f"Not authorized to create stats for user {user_id}")
    cfg = cfg or StatsConfig()
    return store.create_user_record(
        user_id,
        owner_id=actor_id,
        daily_goal=cfg.default_daily_goal,
        weekly_goal=cfg.default_weekly_goal,
    )


# ──────────────────────────────────────────────────────────────
# Read paths
# ──────────────────────────────────────────────────────────────

def get_summary(user_id: str, actor_id: Optional[str], now: datetime | None = None) -> StatsSummary:
    record = _load_owned(user_id, actor_id)
    return summarize(record, now or datetime.now())


def get_badges(user_id: str, actor_id: Optional[str]) -> BadgeListResponse:
    record = _load_owned(user_id, actor_id)
    return badge_statuses(record)


def get_calendar(
    user_id: str,
    actor_id: Optional[str],
    now: datetime | None = None,
    window_days: int | None = None,
    cfg: StatsConfig | None = None,
) -> CalendarResponse:
    cfg = cfg or StatsConfig()
    days = window_days if window_days is not None else cfg.calendar_window_days
    if days > cfg.max_calendar_window_days:
        raise ValidationFailure(
            f"days must be at most {cfg.max_calendar_window_days}, got {days}"
        )

    record = _load_owned(user_id, actor_id)
    return CalendarResponse(
        calendar=build_calendar(record.daily_log, now or datetime.now(), days),
        current_streak=record.stats.current_streak,
        longest_streak=record.stats.longest_streak,
    )


# ──────────────────────────────────────────────────────────────
# Write paths
# ──────────────────────────────────────────────────────────────

def record_activity(
    user_id: str,
    actor_id: Optional[str],
    minutes: int,
    session_completed: bool = True,
    session_meta: SessionMeta | dict | None = None,
    now: datetime | None = None,
    cfg: StatsConfig | None = None,
) -> UpdateStatsResponse:
    """Apply one study-activity event: log → streak → badges → save."""
    try:
        event = ActivityEvent(
            user_id=user_id,
            minutes_studied=minutes,
            occurred_at=now or datetime.now(),
            session_completed=session_completed,
            session_meta=session_meta,
        )
    except ValidationError as e:
        raise ValidationFailure(_validation_message(e)) from e

    record = _load_owned(user_id, actor_id)
    updated, new_badges, message = apply_activity(record, event, cfg)
    saved = store.save_user_record(updated, expected_version=record.version)

    logger.info(
        f"User {user_id} logged {event.minutes_studied} min "
        f"(streak {saved.stats.current_streak}, {len(new_badges)} new badge(s))"
    )
    return UpdateStatsResponse(stats=saved.stats, new_badges=new_badges, message=message)


def record_session(
    user_id: str,
    actor_id: Optional[str],
    session: CompletedSession | dict,
    now: datetime | None = None,
    cfg: StatsConfig | None = None,
) -> UpdateStatsResponse:
    """
    Turn a finished session into an activity event (minutes exclude breaks).

    The minutes are credited to the day the session is submitted (``now``),
    like any other activity event, so the streak only ever moves forward.
    ``start_time`` supplies the hour/weekday for the time-of-day badges.
    """
    if isinstance(session, dict):
        try:
            session = CompletedSession.model_validate(session)
        except ValidationError as e:
            raise ValidationFailure(_validation_message(e)) from e

    return record_activity(
        user_id,
        actor_id,
        minutes=session.minutes_studied,
        session_completed=True,
        session_meta=SessionMeta.from_datetime(session.start_time),
        now=now,
        cfg=cfg,
    )


def update_preferences(
    user_id: str,
    actor_id: Optional[str],
    daily_goal: int | None = None,
    weekly_goal: int | None = None,
) -> UserStudyStats:
    """Change goal thresholds only; streak and badge state are left alone."""
    if daily_goal is None and weekly_goal is None:
        raise ValidationFailure("Provide daily_goal and/or weekly_goal")
    for name, value in (("daily_goal", daily_goal), ("weekly_goal", weekly_goal)):
        if value is not None and value <= 0:
            raise ValidationFailure(f"{name} must be a positive number of minutes, got {value}")

    record = _load_owned(user_id, actor_id)
    updated = record.model_copy(deep=True)
    if daily_goal is not None:
        updated.stats.daily_goal = daily_goal
    if weekly_goal is not None:
        updated.stats.weekly_goal = weekly_goal

    saved = store.save_user_record(updated, expected_version=record.version)
    return saved.stats
