"""
Supabase client for per-user study stats persistence.

Table expected in Supabase (name from SUPABASE_STATS_TABLE, default study_stats):
  - study_stats: user_id (text, PK), owner_id (text), version (int),
                 stats (jsonb), daily_log (jsonb), badges (jsonb), updated_at

Writes are compare-and-swap on ``version``: a save only lands if the stored
version still equals the one the caller loaded, and bumps it by one.

Without SUPABASE_URL / SUPABASE_KEY the module runs in local-only mode with an
in-memory store (same CAS semantics, guarded by a lock).
"""

from __future__ import annotations

import os
import logging
import threading
from datetime import datetime, timezone

from dotenv import load_dotenv
from postgrest.exceptions import APIError

from config import SUPABASE_STATS_TABLE
from errors import ConflictError, NotFoundError
from models import UserStudyRecord

load_dotenv()

logger = logging.getLogger(__name__)

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")  # service-role key

UNIQUE_VIOLATION = "23505"  # Postgres SQLSTATE

_client = None
_warned_local = False

# Local-only mode: {user_id: row dict}
_local_rows: dict[str, dict] = {}
_local_lock = threading.Lock()


def get_supabase():
    """Lazy-init Supabase client. Returns None if not configured."""
    global _client, _warned_local
    if _client is not None:
        return _client
    if not SUPABASE_URL or not SUPABASE_KEY:
        if not _warned_local:
            logger.warning("Supabase not configured — running in local-only mode")
            _warned_local = True
        return None
    from supabase import create_client
    try:
        _client = create_client(SUPABASE_URL, SUPABASE_KEY)
    except Exception as e:
        logger.error(f"Failed to init Supabase: {e}")
        raise
    logger.info("Supabase client initialised")
    return _client


def reset_local_store() -> None:
    """Drop every record held in local-only mode."""
    with _local_lock:
        _local_rows.clear()


# ──────────────────────────────────────────────────────────────
# Row mapping
# ──────────────────────────────────────────────────────────────

def _record_to_row(record: UserStudyRecord) -> dict:
    row = record.model_dump(mode="json")
    row["updated_at"] = datetime.now(timezone.utc).isoformat()
    return row


def _row_to_record(row: dict) -> UserStudyRecord:
    return UserStudyRecord.model_validate(
        {k: v for k, v in row.items() if k != "updated_at"}
    )


# ──────────────────────────────────────────────────────────────
# Stats record CRUD
# ──────────────────────────────────────────────────────────────

def create_user_record(user_id: str, owner_id: str | None = None,
                       daily_goal: int = 240, weekly_goal: int = 600) -> UserStudyRecord:
    """Insert a fresh record with default stats. Conflict if one exists."""
    record = UserStudyRecord(user_id=user_id, owner_id=owner_id or user_id)
    record.stats.daily_goal = daily_goal
    record.stats.weekly_goal = weekly_goal
    row = _record_to_row(record)

    sb = get_supabase()
    if not sb:
        with _local_lock:
            if user_id in _local_rows:
                raise ConflictError(f"Stats record for user {user_id} already exists")
            _local_rows[user_id] = row
        logger.info(f"Created stats record for user {user_id}")
        return record

    try:
        result = sb.table(SUPABASE_STATS_TABLE).insert(row).execute()
    except APIError as e:
        if e.code == UNIQUE_VIOLATION:
            raise ConflictError(f"Stats record for user {user_id} already exists") from e
        logger.error(f"create_user_record failed: {e}")
        raise
    except Exception as e:
        logger.error(f"create_user_record failed: {e}")
        raise
    logger.info(f"Created stats record for user {user_id}")
    return _row_to_record(result.data[0]) if result.data else record


def load_user_record(user_id: str) -> UserStudyRecord:
    sb = get_supabase()
    if not sb:
        with _local_lock:
            row = _local_rows.get(user_id)
        if row is None:
            raise NotFoundError(f"No stats record for user {user_id}")
        return _row_to_record(row)

    try:
        result = sb.table(SUPABASE_STATS_TABLE).select("*").eq("user_id", user_id).execute()
    except Exception as e:
        logger.error(f"load_user_record failed: {e}")
        raise
    if not result.data:
        raise NotFoundError(f"No stats record for user {user_id}")
    return _row_to_record(result.data[0])


def save_user_record(record: UserStudyRecord, expected_version: int) -> UserStudyRecord:
    """
    Persist ``record`` if the stored version is still ``expected_version``.

    Returns the saved record (version bumped). Raises ConflictError when a
    concurrent write got there first.
    """
    saved = record.model_copy(update={"version": expected_version + 1})
    row = _record_to_row(saved)

    sb = get_supabase()
    if not sb:
        with _local_lock:
            current = _local_rows.get(record.user_id)
            if current is None:
                raise NotFoundError(f"No stats record for user {record.user_id}")
            if current["version"] != expected_version:
                logger.warning(
                    f"Version conflict for user {record.user_id}: "
                    f"expected {expected_version}, found {current['version']}"
                )
                raise ConflictError(f"Stats for user {record.user_id} were modified concurrently")
            _local_rows[record.user_id] = row
        return saved

    try:
        result = (
            sb.table(SUPABASE_STATS_TABLE)
            .update(row)
            .eq("user_id", record.user_id)
            .eq("version", expected_version)
            .execute()
        )
    except Exception as e:
        logger.error(f"save_user_record failed: {e}")
        raise
    if not result.data:
        # Either the row is gone or somebody else bumped the version.
        load_user_record(record.user_id)
        logger.warning(f"Version conflict for user {record.user_id}: expected {expected_version}")
        raise ConflictError(f"Stats for user {record.user_id} were modified concurrently")
    return _row_to_record(result.data[0])
