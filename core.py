from __future__ import annotations

from pathlib import Path

# Number of sets a standalone exercise runs for
DEFAULT_SETS_PER_EXERCISE = 3

# Default rest duration between sets in seconds
DEFAULT_REST_DURATION = 30

# Countdown used for timed exercises that do not declare a duration
DEFAULT_TIMED_DURATION = 30

# Interval, in seconds, between countdown ticks
TICK_INTERVAL = 1.0

# Default path to the local session history database
DEFAULT_DB_PATH = Path(__file__).resolve().parent / "data" / "workout.db"

# Plan loaded by the app when none is given on the command line
DEFAULT_PLAN_PATH = Path(__file__).resolve().parent / "data" / "sample_plan.json"

# REST API the completion report is sent to
DEFAULT_API_BASE_URL = "http://localhost:3000/api"
DEFAULT_API_TIMEOUT = 10.0
