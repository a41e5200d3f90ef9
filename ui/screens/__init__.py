"""UI screen modules for the workout app."""

from .session import WorkoutSessionScreen, WorkoutSummaryScreen

__all__ = [
    "WorkoutSessionScreen",
    "WorkoutSummaryScreen",
]
