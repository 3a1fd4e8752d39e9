"""
FastAPI server for the study stats engine.

Endpoints (acting user in the X-User-Id header):
  POST /api/stats/{user_id}              — Create the user's stats record
  GET  /api/stats/{user_id}/summary      — Daily / weekly / monthly / lifetime + streak
  GET  /api/stats/{user_id}/badges       — Badge catalog with earned status
  GET  /api/stats/{user_id}/calendar     — Trailing daily-minutes heatmap
  POST /api/stats/{user_id}/update       — Log study minutes → streak → badges
  POST /api/stats/{user_id}/sessions     — Log a finished session (breaks excluded)
  POST /api/stats/{user_id}/preferences  — Update daily / weekly goals
  GET  /api/stats/catalog                — Static badge catalog
  GET  /api/health                       — Health check
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import tracker
from badges import BADGES
from config import LOG_LEVEL, StatsConfig
from errors import StudyStatsError
from models import (
    Badge,
    BadgeListResponse,
    CalendarResponse,
    CompletedSession,
    PreferencesRequest,
    SummaryResponse,
    UpdateStatsRequest,
    UpdateStatsResponse,
)

logger = logging.getLogger(__name__)


# ── Global config ─────────────────────────────────────────────

_config = StatsConfig()


# ── Lifespan ──────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Study stats API starting with {len(BADGES)} badges in catalog")
    yield
    logger.info("Study stats API shutting down")


# ── App ───────────────────────────────────────────────────────

app = FastAPI(
    title="Study Stats API",
    description="Study streaks, period totals and achievement badges",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StudyStatsError)
async def study_stats_error_handler(request: Request, exc: StudyStatsError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


# ──────────────────────────────────────────────────────────────
# Catalog / health (no user context)
# ──────────────────────────────────────────────────────────────

@app.get("/api/stats/catalog", response_model=list[Badge])
async def get_catalog():
    return list(BADGES)


@app.get("/api/health")
async def health():
    return {"success": True, "status": "healthy", "service": "study-stats"}


# ──────────────────────────────────────────────────────────────
# Record lifecycle
# ──────────────────────────────────────────────────────────────

@app.post("/api/stats/{user_id}", status_code=201)
async def create_stats(user_id: str, x_user_id: Optional[str] = Header(default=None)):
    """Create a stats record with default goals for the calling user."""
    record = tracker.register(user_id, x_user_id, _config)
    return {"success": True, "stats": record.stats.model_dump(mode="json")}


# ──────────────────────────────────────────────────────────────
# Read paths
# ──────────────────────────────────────────────────────────────

@app.get("/api/stats/{user_id}/summary", response_model=SummaryResponse)
async def get_summary(user_id: str, x_user_id: Optional[str] = Header(default=None)):
    return SummaryResponse(stats=tracker.get_summary(user_id, x_user_id))


@app.get("/api/stats/{user_id}/badges", response_model=BadgeListResponse)
async def get_badges(user_id: str, x_user_id: Optional[str] = Header(default=None)):
    return tracker.get_badges(user_id, x_user_id)


@app.get("/api/stats/{user_id}/calendar", response_model=CalendarResponse)
async def get_calendar(
    user_id: str,
    days: int = Query(default=_config.calendar_window_days, ge=1),
    x_user_id: Optional[str] = Header(default=None),
):
    return tracker.get_calendar(user_id, x_user_id, window_days=days, cfg=_config)


# ──────────────────────────────────────────────────────────────
# Write paths
# ──────────────────────────────────────────────────────────────

@app.post("/api/stats/{user_id}/update", response_model=UpdateStatsResponse)
async def update_stats(
    user_id: str,
    req: UpdateStatsRequest,
    x_user_id: Optional[str] = Header(default=None),
):
    """Log studied minutes: daily log → streak → badge scan → save."""
    return tracker.record_activity(
        user_id,
        x_user_id,
        minutes=req.minutes,
        session_completed=req.session_completed,
        session_meta=req.session_meta,
        cfg=_config,
    )


@app.post("/api/stats/{user_id}/sessions", response_model=UpdateStatsResponse)
async def log_session(
    user_id: str,
    session: CompletedSession,
    x_user_id: Optional[str] = Header(default=None),
):
    """Log a finished session; minutes = end - start - breaks."""
    return tracker.record_session(user_id, x_user_id, session, cfg=_config)


@app.post("/api/stats/{user_id}/preferences")
async def update_preferences(
    user_id: str,
    prefs: PreferencesRequest,
    x_user_id: Optional[str] = Header(default=None),
):
    stats = tracker.update_preferences(
        user_id,
        x_user_id,
        daily_goal=prefs.daily_goal,
        weekly_goal=prefs.weekly_goal,
    )
    return {
        "success": True,
        "preferences": {"daily_goal": stats.daily_goal, "weekly_goal": stats.weekly_goal},
    }
