"""
Badge evaluator — awards catalog badges exactly once per user.

Eligibility is a category → predicate table:
  - streak:   current OR longest streak ≥ requirement
  - hours:    lifetime minutes ≥ requirement
  - sessions: lifetime completed sessions ≥ requirement
  - special:  per-badge rules checked against the event that just happened
              (hour of day, weekday, daily log around the event day)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable

from badges import BADGES
from config import StatsConfig
from models import (
    Badge,
    BadgeCategory,
    BadgeListResponse,
    BadgeStatus,
    EarnedBadge,
    SessionMeta,
    UserStudyRecord,
)
from streak import consecutive_days_ending

logger = logging.getLogger(__name__)

SATURDAY = 5
SUNDAY = 6


@dataclass
class EvaluationContext:
    """What was known at the moment the activity event was applied."""

    now: datetime
    day: date
    meta: SessionMeta | None = None
    cfg: StatsConfig | None = None

    def config(self) -> StatsConfig:
        return self.cfg or StatsConfig()


Rule = Callable[[Badge, UserStudyRecord, EvaluationContext], bool]


# ── Special rules (keyed by badge id) ─────────────────────────

def _early_bird(badge: Badge, record: UserStudyRecord, ctx: EvaluationContext) -> bool:
    return ctx.meta is not None and ctx.meta.hour < ctx.config().early_bird_before_hour


def _night_owl(badge: Badge, record: UserStudyRecord, ctx: EvaluationContext) -> bool:
    return ctx.meta is not None and ctx.meta.hour >= ctx.config().night_owl_from_hour


def _weekend_warrior(badge: Badge, record: UserStudyRecord, ctx: EvaluationContext) -> bool:
    # weekday of the logged day, not of the session start
    weekday = ctx.day.weekday()
    if weekday == SATURDAY:
        partner = ctx.day + timedelta(days=1)
    elif weekday == SUNDAY:
        partner = ctx.day - timedelta(days=1)
    else:
        return False

    for day in (ctx.day, partner):
        entry = record.daily_log.get(day)
        if entry is None or entry.minutes <= 0:
            return False
    return True


def _perfect_week(badge: Badge, record: UserStudyRecord, ctx: EvaluationContext) -> bool:
    return consecutive_days_ending(record.daily_log, ctx.day) >= badge.requirement


SPECIAL_RULES: dict[str, Rule] = {
    "early_bird": _early_bird,
    "night_owl": _night_owl,
    "weekend_warrior": _weekend_warrior,
    "perfect_week": _perfect_week,
}


def _special(badge: Badge, record: UserStudyRecord, ctx: EvaluationContext) -> bool:
    rule = SPECIAL_RULES.get(badge.id)
    return rule(badge, record, ctx) if rule else False


# ── Category rules ────────────────────────────────────────────

def _streak(badge: Badge, record: UserStudyRecord, ctx: EvaluationContext) -> bool:
    s = record.stats
    return s.current_streak >= badge.requirement or s.longest_streak >= badge.requirement


def _hours(badge: Badge, record: UserStudyRecord, ctx: EvaluationContext) -> bool:
    return record.stats.total_minutes >= badge.requirement


def _sessions(badge: Badge, record: UserStudyRecord, ctx: EvaluationContext) -> bool:
    return record.stats.total_sessions >= badge.requirement


ELIGIBILITY: dict[BadgeCategory, Rule] = {
    BadgeCategory.STREAK: _streak,
    BadgeCategory.HOURS: _hours,
    BadgeCategory.SESSIONS: _sessions,
    BadgeCategory.SPECIAL: _special,
}


def is_eligible(badge: Badge, record: UserStudyRecord, ctx: EvaluationContext) -> bool:
    return ELIGIBILITY[badge.category](badge, record, ctx)


# ── Main evaluation function ──────────────────────────────────

def evaluate(
    record: UserStudyRecord,
    ctx: EvaluationContext,
    catalog: tuple[Badge, ...] = BADGES,
) -> list[EarnedBadge]:
    """
    Append every newly qualifying badge to ``record.badges`` and return them.

    Badges already on the record are skipped, so re-evaluation never re-awards.
    """
    owned = record.earned_badge_ids()
    new_badges: list[EarnedBadge] = []

    for badge in catalog:
        if badge.id in owned or not is_eligible(badge, record, ctx):
            continue
        earned = EarnedBadge(
            badge_id=badge.id,
            name=badge.name,
            icon=badge.icon,
            description=badge.description,
            earned_at=ctx.now,
        )
        record.badges.append(earned)
        owned.add(badge.id)
        new_badges.append(earned)
        logger.info(f"User {record.user_id} earned badge {badge.id}")

    return new_badges


def all_badges_earned(record: UserStudyRecord, catalog: tuple[Badge, ...] = BADGES) -> bool:
    owned = record.earned_badge_ids()
    return all(b.id in owned for b in catalog)


def badge_statuses(
    record: UserStudyRecord,
    catalog: tuple[Badge, ...] = BADGES,
) -> BadgeListResponse:
    """Full catalog annotated with earned / earned_at for this user."""
    earned_at = {b.badge_id: b.earned_at for b in record.badges}

    statuses = [
        BadgeStatus(
            **badge.model_dump(),
            earned=badge.id in earned_at,
            earned_at=earned_at.get(badge.id),
        )
        for badge in catalog
    ]
    return BadgeListResponse(
        badges=statuses,
        earned_count=sum(1 for s in statuses if s.earned),
        total_count=len(catalog),
    )
