"""HTTP-level tests for the FastAPI app."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from badges import BADGES
from main import app

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def registered(client):
    res = client.post("/api/stats/alice", headers=ALICE)
    assert res.status_code == 201
    return client


class TestPublicEndpoints:
    def test_health(self, client):
        res = client.get("/api/health")
        assert res.status_code == 200
        assert res.json()["status"] == "healthy"

    def test_catalog(self, client):
        res = client.get("/api/stats/catalog")
        assert res.status_code == 200
        assert len(res.json()) == len(BADGES)


class TestRegistration:
    def test_defaults(self, registered):
        res = registered.get("/api/stats/alice/summary", headers=ALICE)
        body = res.json()
        assert body["success"] is True
        assert body["stats"]["daily"]["goal"] == 240
        assert body["stats"]["weekly"]["goal"] == 600

    def test_duplicate(self, registered):
        res = registered.post("/api/stats/alice", headers=ALICE)
        assert res.status_code == 409
        assert res.json()["success"] is False


class TestUpdate:
    def test_first_update(self, registered):
        res = registered.post("/api/stats/alice/update", json={"minutes": 30}, headers=ALICE)
        assert res.status_code == 200
        body = res.json()
        assert body["stats"]["current_streak"] == 1
        assert body["stats"]["total_minutes"] == 30
        assert "first_session" in [b["badge_id"] for b in body["new_badges"]]
        assert body["message"].startswith("You earned")

    def test_negative_minutes(self, registered):
        res = registered.post("/api/stats/alice/update", json={"minutes": -5}, headers=ALICE)
        assert res.status_code == 400
        assert res.json()["success"] is False

        summary = registered.get("/api/stats/alice/summary", headers=ALICE).json()
        assert summary["stats"]["lifetime"]["minutes"] == 0

    def test_session_endpoint(self, registered):
        res = registered.post(
            "/api/stats/alice/sessions",
            json={
                "start_time": "2024-01-10T14:00:00",
                "end_time": "2024-01-10T15:00:00",
                "breaks": [{"duration": 15}],
            },
            headers=ALICE,
        )
        assert res.status_code == 200
        assert res.json()["stats"]["total_minutes"] == 45

    def test_session_with_utc_start_and_local_end(self, registered):
        start = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
        local_end = start.astimezone().replace(tzinfo=None) + timedelta(hours=1)
        res = registered.post(
            "/api/stats/alice/sessions",
            json={"start_time": "2024-01-10T09:00:00Z", "end_time": local_end.isoformat()},
            headers=ALICE,
        )
        assert res.status_code == 200
        assert res.json()["stats"]["total_minutes"] == 60

    def test_session_ending_before_start(self, registered):
        res = registered.post(
            "/api/stats/alice/sessions",
            json={"start_time": "2024-01-10T10:00:00", "end_time": "2024-01-10T09:00:00"},
            headers=ALICE,
        )
        assert res.status_code == 422


class TestReads:
    def test_badges(self, registered):
        registered.post("/api/stats/alice/update", json={"minutes": 30}, headers=ALICE)
        body = registered.get("/api/stats/alice/badges", headers=ALICE).json()
        assert body["total_count"] == len(BADGES)
        assert body["earned_count"] >= 1
        first = next(b for b in body["badges"] if b["id"] == "first_session")
        assert first["earned"] is True
        assert first["earned_at"] is not None

    def test_calendar_default_year(self, registered):
        body = registered.get("/api/stats/alice/calendar", headers=ALICE).json()
        assert len(body["calendar"]) == 365
        assert all(day["minutes"] == 0 for day in body["calendar"])

    def test_calendar_custom_window(self, registered):
        body = registered.get("/api/stats/alice/calendar?days=30", headers=ALICE).json()
        assert len(body["calendar"]) == 30

    def test_calendar_window_too_large(self, registered):
        res = registered.get("/api/stats/alice/calendar?days=100000", headers=ALICE)
        assert res.status_code == 400


class TestPreferences:
    def test_update_goals(self, registered):
        res = registered.post(
            "/api/stats/alice/preferences", json={"daily_goal": 120}, headers=ALICE
        )
        assert res.status_code == 200
        assert res.json()["preferences"] == {"daily_goal": 120, "weekly_goal": 600}

    def test_invalid_goal(self, registered):
        res = registered.post(
            "/api/stats/alice/preferences", json={"weekly_goal": 0}, headers=ALICE
        )
        assert res.status_code == 400


class TestErrors:
    def test_unknown_user(self, client):
        res = client.get("/api/stats/ghost/summary", headers={"X-User-Id": "ghost"})
        assert res.status_code == 404

    def test_missing_header(self, registered):
        res = registered.get("/api/stats/alice/summary")
        assert res.status_code == 401

    def test_not_owner(self, registered):
        res = registered.post("/api/stats/alice/update", json={"minutes": 30}, headers=BOB)
        assert res.status_code == 401
