"""Screens used during an active workout session."""

from .workout_session_screen import WorkoutSessionScreen
from .workout_summary_screen import WorkoutSummaryScreen

__all__ = [
    "WorkoutSessionScreen",
    "WorkoutSummaryScreen",
]
