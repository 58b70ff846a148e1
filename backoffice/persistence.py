"""SQLite persistence for the administrator login session and slot limits."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

import logfire

from backoffice.config import settings
from backoffice.models import AuthSession, OrderingSpace

# Only the most recent login is kept.
_SESSION_ROW_ID = 1


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _connect() -> sqlite3.Connection:
    db_file = Path(settings.session_db_path)
    db_file.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(db_file)


def bootstrap_schema() -> None:
    """Create persistence schema if it does not already exist."""
    with _connect() as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS sessions (
                id INTEGER PRIMARY KEY,
                token TEXT NOT NULL,
                user_json TEXT NOT NULL DEFAULT '{}',
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS slot_limits (
                space TEXT PRIMARY KEY,
                slot_limit INTEGER NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )


def save_session(session: AuthSession) -> None:
    """Persist the session, replacing any earlier one."""
    if not session.token:
        raise ValueError("Cannot save a session without a token")

    with _connect() as conn:
        with conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO sessions (id, token, user_json, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (_SESSION_ROW_ID, session.token, json.dumps(session.user), _utc_now_iso()),
            )
    logfire.debug("Session saved", user=session.display_name)


def load_session() -> AuthSession | None:
    """Return the stored session, or ``None`` when nobody is logged in."""
    with _connect() as conn:
        row = conn.execute(
            "SELECT token, user_json FROM sessions WHERE id = ?",
            (_SESSION_ROW_ID,),
        ).fetchone()
    if row is None:
        return None

    token, user_json = row
    try:
        user = json.loads(user_json) if user_json else {}
    except json.JSONDecodeError:
        logfire.warning("Stored session user is not valid JSON; ignoring it")
        user = {}
    if not isinstance(user, dict):
        user = {}
    return AuthSession(token=token, user=user)


def clear_session() -> None:
    """Forget the stored session (logout or rejected token)."""
    with _connect() as conn:
        with conn:
            conn.execute("DELETE FROM sessions WHERE id = ?", (_SESSION_ROW_ID,))
    logfire.debug("Session cleared")


def save_slot_limit(space: OrderingSpace, limit: int) -> None:
    """Remember the sort-order limit of an ordering space."""
    if limit <= 0:
        raise ValueError("limit must be greater than 0")

    with _connect() as conn:
        with conn:
            conn.execute(
                """
                INSERT INTO slot_limits (space, slot_limit, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(space) DO UPDATE SET
                    slot_limit = excluded.slot_limit,
                    updated_at = excluded.updated_at
                """,
                (space.value, limit, _utc_now_iso()),
            )


def load_slot_limits() -> dict[OrderingSpace, int]:
    """Return the stored limit of every space that has one."""
    with _connect() as conn:
        rows = conn.execute("SELECT space, slot_limit FROM slot_limits").fetchall()

    limits: dict[OrderingSpace, int] = {}
    for space, limit in rows:
        try:
            limits[OrderingSpace(space)] = int(limit)
        except ValueError:
            logfire.warning("Ignoring stored slot limit for unknown space", space=space)
    return limits
