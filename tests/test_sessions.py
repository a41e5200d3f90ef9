import sqlite3

from backend.completion import CompletionReport
from backend.sessions import (
    get_history_stats,
    get_session_history,
    init_db,
    save_completed_session,
)


def _report(name, started_at, minutes=10, calories=50.0, done=4, planned=4):
    return CompletionReport(
        workout_name=name,
        total_duration_minutes=minutes,
        total_calories=calories,
        completed_units=done,
        total_planned_units=planned,
        started_at=started_at,
        ended_at=started_at + minutes * 60,
    )


def test_init_db_creates_table(tmp_path):
    db_path = tmp_path / "nested" / "workout.db"
    init_db(db_path)
    with sqlite3.connect(db_path) as conn:
        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
    assert "session_history" in tables


def test_history_newest_first(tmp_path):
    db_path = tmp_path / "workout.db"
    save_completed_session(_report("Monday", 100.0), reported=True, db_path=db_path)
    save_completed_session(_report("Wednesday", 300.0), db_path=db_path)
    save_completed_session(_report("Tuesday", 200.0), db_path=db_path)

    history = get_session_history(db_path=db_path)
    assert [h["workout_name"] for h in history] == ["Wednesday", "Tuesday", "Monday"]
    assert history[-1]["reported"] is True
    assert history[0]["reported"] is False

    latest = get_session_history(limit=1, db_path=db_path)
    assert len(latest) == 1
    assert latest[0]["workout_name"] == "Wednesday"


def test_history_stats(tmp_path):
    db_path = tmp_path / "workout.db"
    assert get_history_stats(db_path=db_path) == {
        "sessions": 0,
        "total_minutes": 0,
        "total_calories": 0,
        "total_units": 0,
    }
    save_completed_session(_report("A", 100.0, minutes=20, calories=80.0, done=6), db_path=db_path)
    save_completed_session(_report("B", 200.0, minutes=15, calories=40.5, done=3), db_path=db_path)
    stats = get_history_stats(db_path=db_path)
    assert stats["sessions"] == 2
    assert stats["total_minutes"] == 35
    assert stats["total_calories"] == 120.5
    assert stats["total_units"] == 9
