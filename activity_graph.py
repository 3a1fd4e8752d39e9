"""
LangGraph pipeline for one "study activity completed" event.

4 nodes, all deterministic and in-memory:
  1. record_log       — add minutes to today's log entry + lifetime totals
  2. advance_streak   — 3-state streak transition
  3. evaluate_badges  — award newly qualifying badges
  4. finalize         — build the user-facing message

Graph wiring:
  START → record_log → advance_streak
  advance_streak → [every badge already earned? no  → evaluate_badges → finalize]
  advance_streak → [every badge already earned? yes → finalize]
  finalize → END

The graph works on a private deep copy of the record. Persisting it is the
caller's job, so a failure in any node leaves the stored record untouched.
"""

from __future__ import annotations

from datetime import date
from typing import TypedDict

from langgraph.graph import END, START, StateGraph

from config import StatsConfig
from daily_log import normalize_day, record_minutes
from gamification import EvaluationContext, all_badges_earned, evaluate
from models import ActivityEvent, EarnedBadge, UserStudyRecord
from streak import advance_streak


# ──────────────────────────────────────────────────────────────
# Activity State
# ──────────────────────────────────────────────────────────────

class ActivityState(TypedDict, total=False):
    # Inputs
    record: UserStudyRecord     # working copy, mutated by the nodes
    event: ActivityEvent
    config: dict                # serialized StatsConfig overrides

    # Node outputs
    today: date
    new_badges: list            # list[EarnedBadge]
    message: str


def _cfg(state: ActivityState) -> StatsConfig:
    cfg_dict = state.get("config", {})
    return StatsConfig(**{k: v for k, v in cfg_dict.items() if hasattr(StatsConfig, k)})


# ──────────────────────────────────────────────────────────────
# Node 1 — record_log
# ──────────────────────────────────────────────────────────────

def record_log_node(state: ActivityState) -> dict:
    record = state["record"]
    event = state["event"]
    today = normalize_day(event.occurred_at)

    record_minutes(record.daily_log, today, event.minutes_studied, event.session_completed)

    record.stats.total_minutes += event.minutes_studied
    if event.session_completed:
        record.stats.total_sessions += 1

    return {"record": record, "today": today, "new_badges": []}


# ──────────────────────────────────────────────────────────────
# Node 2 — advance_streak
# ──────────────────────────────────────────────────────────────

def advance_streak_node(state: ActivityState) -> dict:
    record = state["record"]
    advance_streak(record.stats, state["today"])
    return {"record": record}


def _route_after_streak(state: ActivityState) -> str:
    if all_badges_earned(state["record"]):
        return "finalize"
    return "evaluate_badges"


# ──────────────────────────────────────────────────────────────
# Node 3 — evaluate_badges
# ──────────────────────────────────────────────────────────────

def evaluate_badges_node(state: ActivityState) -> dict:
    record = state["record"]
    event = state["event"]
    ctx = EvaluationContext(
        now=event.occurred_at,
        day=state["today"],
        meta=event.meta(),
        cfg=_cfg(state),
    )
    new_badges = evaluate(record, ctx)
    return {"record": record, "new_badges": new_badges}


# ──────────────────────────────────────────────────────────────
# Node 4 — finalize
# ──────────────────────────────────────────────────────────────

def finalize_node(state: ActivityState) -> dict:
    count = len(state.get("new_badges", []))
    if count:
        message = f"You earned {count} new badge(s)!"
    else:
        message = "Stats updated"
    return {"message": message}


# ──────────────────────────────────────────────────────────────
# Build graph
# ──────────────────────────────────────────────────────────────

def build_activity_graph():
    graph = StateGraph(ActivityState)

    graph.add_node("record_log", record_log_node)
    graph.add_node("advance_streak", advance_streak_node)
    graph.add_node("evaluate_badges", evaluate_badges_node)
    graph.add_node("finalize", finalize_node)

    graph.add_edge(START, "record_log")
    graph.add_edge("record_log", "advance_streak")
    graph.add_conditional_edges(
        "advance_streak",
        _route_after_streak,
        {"evaluate_badges": "evaluate_badges", "finalize": "finalize"},
    )
    graph.add_edge("evaluate_badges", "finalize")
    graph.add_edge("finalize", END)

    return graph.compile()


# Singleton compiled graph
activity_graph = build_activity_graph()


def apply_activity(
    record: UserStudyRecord,
    event: ActivityEvent,
    cfg: StatsConfig | None = None,
) -> tuple[UserStudyRecord, list[EarnedBadge], str]:
    """Run the pipeline on a copy of ``record``; the input is never mutated."""
    working = record.model_copy(deep=True)
    result = activity_graph.invoke({
        "record": working,
        "event": event,
        "config": (cfg or StatsConfig()).to_dict(),
    })
    return result["record"], result.get("new_badges", []), result["message"]
