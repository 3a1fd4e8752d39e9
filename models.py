"""
Pydantic schemas for the study stats engine.

Three groups:
  A. Badge catalog types (Badge, EarnedBadge)
  B. Internal data (UserStudyStats, DailyLogEntry, UserStudyRecord, ActivityEvent)
  C. User-facing I/O (request bodies and read views)
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ──────────────────────────────────────────────────────────────
# A. Badge catalog
# ──────────────────────────────────────────────────────────────


class BadgeCategory(str, Enum):
    STREAK = "streak"
    HOURS = "hours"
    SESSIONS = "sessions"
    SPECIAL = "special"


class Badge(BaseModel):
    """Static catalog entry. ``requirement`` is minutes for ``hours`` badges."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str
    description: str
    category: BadgeCategory
    requirement: int = Field(..., ge=1)


class EarnedBadge(BaseModel):
    badge_id: str
    name: str
    icon: str
    description: str
    earned_at: datetime


# ──────────────────────────────────────────────────────────────
# B. Internal data
# ──────────────────────────────────────────────────────────────


class UserStudyStats(BaseModel):
    """Derived per-user counters. ``longest_streak`` never drops below ``current_streak``."""

    total_minutes: int = Field(default=0, ge=0)
    total_sessions: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_study_date: Optional[date] = None
    daily_goal: int = Field(default=240, ge=1)
    weekly_goal: int = Field(default=600, ge=1)


class DailyLogEntry(BaseModel):
    """Accumulated activity for one calendar day."""

    minutes: int = Field(default=0, ge=0)
    sessions: int = Field(default=0, ge=0)


class UserStudyRecord(BaseModel):
    """Aggregate root persisted as one row; ``version`` is the CAS token."""

    user_id: str
    owner_id: str
    version: int = Field(default=0, ge=0)
    stats: UserStudyStats = Field(default_factory=UserStudyStats)
    daily_log: dict[date, DailyLogEntry] = Field(default_factory=dict)
    badges: list[EarnedBadge] = Field(default_factory=list)

    def earned_badge_ids(self) -> set[str]:
        return {b.badge_id for b in self.badges}


class SessionMeta(BaseModel):
    """When in the day/week a session happened. ``weekday``: Monday = 0."""

    hour: int = Field(..., ge=0, le=23)
    weekday: int = Field(..., ge=0, le=6)

    @classmethod
    def from_datetime(cls, moment: datetime) -> "SessionMeta":
        return cls(hour=moment.hour, weekday=moment.weekday())


class ActivityEvent(BaseModel):
    """One "study activity completed" event."""

    user_id: str
    minutes_studied: int = Field(..., gt=0)
    occurred_at: datetime
    session_completed: bool = True
    session_meta: Optional[SessionMeta] = None

    def meta(self) -> SessionMeta:
        return self.session_meta or SessionMeta.from_datetime(self.occurred_at)


class SessionBreak(BaseModel):
    duration: int = Field(default=0, ge=0, description="Break length in minutes")


class CompletedSession(BaseModel):
    """A finished study session; studied minutes exclude breaks."""

    start_time: datetime
    end_time: datetime
    breaks: list[SessionBreak] = Field(default_factory=list)

    @field_validator("start_time", "end_time")
    @classmethod
    def _to_server_local(cls, v: datetime) -> datetime:
        # day bucketing and special-badge hours use naive server-local time
        if v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v

    @model_validator(mode="after")
    def _end_after_start(self) -> "CompletedSession":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def minutes_studied(self) -> int:
        elapsed = int((self.end_time - self.start_time).total_seconds() // 60)
        return elapsed - sum(b.duration for b in self.breaks)


# ──────────────────────────────────────────────────────────────
# C. User-facing I/O
# ──────────────────────────────────────────────────────────────


class UpdateStatsRequest(BaseModel):
    """Payload for POST /update. Range checks happen in the tracker."""

    minutes: int
    session_completed: bool = True
    session_meta: Optional[SessionMeta] = None


class PreferencesRequest(BaseModel):
    daily_goal: Optional[int] = None
    weekly_goal: Optional[int] = None


class PeriodStats(BaseModel):
    minutes: int = 0
    sessions: int = 0
    goal: Optional[int] = None
    progress: Optional[float] = Field(default=None, description="Percent of goal, capped at 100")


class LifetimeStats(BaseModel):
    minutes: int = 0
    sessions: int = 0
    total_hours: float = 0.0


class StreakOut(BaseModel):
    current: int = 0
    longest: int = 0
    last_study_date: Optional[date] = None
    active: bool = False


class StatsSummary(BaseModel):
    daily: PeriodStats
    weekly: PeriodStats
    monthly: PeriodStats
    lifetime: LifetimeStats
    streak: StreakOut


class BadgeStatus(BaseModel):
    id: str
    name: str
    icon: str
    description: str
    category: BadgeCategory
    requirement: int
    earned: bool = False
    earned_at: Optional[datetime] = None


class BadgeListResponse(BaseModel):
    success: bool = True
    badges: list[BadgeStatus] = Field(default_factory=list)
    earned_count: int = 0
    total_count: int = 0


class CalendarDay(BaseModel):
    date: date
    minutes: int = 0
    studied: bool = False


class CalendarResponse(BaseModel):
    success: bool = True
    calendar: list[CalendarDay] = Field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0


class SummaryResponse(BaseModel):
    success: bool = True
    stats: StatsSummary


class UpdateStatsResponse(BaseModel):
    success: bool = True
    stats: UserStudyStats
    new_badges: list[EarnedBadge] = Field(default_factory=list)
    message: str = "Stats updated"
