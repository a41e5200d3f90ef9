"""Local history of completed workout sessions.

Each finished session is appended to the ``session_history`` table together
with whether the completion report reached the API. Writes are best effort;
nothing here is needed to finish a session.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

from core import DEFAULT_DB_PATH

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from backend.completion import CompletionReport


SCHEMA = """
CREATE TABLE IF NOT EXISTS session_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    workout_name TEXT NOT NULL DEFAULT '',
    started_at REAL NOT NULL,
    ended_at REAL NOT NULL,
    duration_minutes INTEGER NOT NULL,
    calories REAL NOT NULL DEFAULT 0,
    completed_units INTEGER NOT NULL,
    planned_units INTEGER NOT NULL,
    reported INTEGER NOT NULL DEFAULT 0
)
"""


def init_db(db_path: Path = DEFAULT_DB_PATH) -> None:
    """Create the history table in ``db_path`` if it does not exist."""

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(str(db_path)) as conn:
        conn.execute(SCHEMA)


def save_completed_session(
    report: "CompletionReport",
    reported: bool = False,
    db_path: Path = DEFAULT_DB_PATH,
) -> int:
    """Store ``report`` and return the new row id."""

    init_db(db_path)
    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.execute(
            """
            INSERT INTO session_history
                (workout_name, started_at, ended_at, duration_minutes,
                 calories, completed_units, planned_units, reported)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                report.workout_name,
                report.started_at,
                report.ended_at,
                report.total_duration_minutes,
                report.total_calories,
                report.completed_units,
                report.total_planned_units,
                int(reported),
            ),
        )
        return cursor.lastrowid


def get_session_history(
    limit: int | None = None, db_path: Path = DEFAULT_DB_PATH
) -> list[dict]:
    """Return past sessions, most recent first.

    When ``limit`` is provided only that many newest sessions are returned.
    """

    init_db(db_path)
    with sqlite3.connect(str(db_path)) as conn:
        query = (
            "SELECT workout_name, started_at, ended_at, duration_minutes, "
            "calories, completed_units, planned_units, reported "
            "FROM session_history ORDER BY started_at DESC, id DESC"
        )
        if limit is not None:
            rows = conn.execute(query + " LIMIT ?", (limit,)).fetchall()
        else:
            rows = conn.execute(query).fetchall()
    return [
        {
            "workout_name": name,
            "started_at": started,
            "ended_at": ended,
            "duration_minutes": minutes,
            "calories": calories,
            "completed_units": done,
            "planned_units": planned,
            "reported": bool(reported),
        }
        for name, started, ended, minutes, calories, done, planned, reported in rows
    ]


def get_history_stats(db_path: Path = DEFAULT_DB_PATH) -> dict:
    """Return totals across all recorded sessions."""

    init_db(db_path)
    with sqlite3.connect(str(db_path)) as conn:
        row = conn.execute(
            """
            SELECT COUNT(*),
                   COALESCE(SUM(duration_minutes), 0),
                   COALESCE(SUM(calories), 0),
                   COALESCE(SUM(completed_units), 0)
              FROM session_history
            """
        ).fetchone()
    sessions, minutes, calories, units = row
    return {
        "sessions": sessions,
        "total_minutes": minutes,
        "total_calories": calories,
        "total_units": units,
    }
