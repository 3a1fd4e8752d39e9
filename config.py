"""
StatsConfig — every tunable for the stats / streak / badge engine.

Goal defaults match what new users get on sign-up (4 h a day, 10 h a week).
Environment settings (Supabase credentials, log level) are read from ``.env``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass
class StatsConfig:
    # ── Goals (minutes) ────────────────────────────────────
    default_daily_goal: int = 240
    default_weekly_goal: int = 600

    # ── Calendar heatmap ───────────────────────────────────
    calendar_window_days: int = 365
    max_calendar_window_days: int = 3660

    # ── Special badge windows (server-local hours) ─────────
    early_bird_before_hour: int = 6   # studied before 06:00
    night_owl_from_hour: int = 23     # studied at/after 23:00

    def to_dict(self) -> dict:
        return dict(self.__dict__)


# ── Environment ───────────────────────────────────────────────

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SUPABASE_STATS_TABLE = os.getenv("SUPABASE_STATS_TABLE", "study_stats")
