"""Shared fixtures: every test runs against a fresh local-only store."""

from datetime import date, datetime

import pytest

import supabase_client
from models import DailyLogEntry, UserStudyRecord, UserStudyStats


@pytest.fixture(autouse=True)
def local_store(monkeypatch):
    monkeypatch.setattr(supabase_client, "SUPABASE_URL", "")
    monkeypatch.setattr(supabase_client, "_client", None)
    supabase_client.reset_local_store()
    yield
    supabase_client.reset_local_store()


@pytest.fixture
def wednesday():
    """2024-01-10 is a Wednesday; the week started on Sunday 2024-01-07."""
    return datetime(2024, 1, 10, 14, 0)


def make_record(log: dict[date, int] | None = None, **stats) -> UserStudyRecord:
    return UserStudyRecord(
        user_id="alice",
        owner_id="alice",
        stats=UserStudyStats(**stats),
        daily_log={d: DailyLogEntry(minutes=m, sessions=1) for d, m in (log or {}).items()},
    )
