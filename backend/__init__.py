"""Session core, plan sources and reporting for the workout app."""

from __future__ import annotations

from backend.plan import Counted, PlannedExercise, Timed, WorkoutPlan
from backend.workout_session import (
    InvalidTransitionError,
    Phase,
    SessionState,
    SessionStateMachine,
)

__all__ = [
    "Counted",
    "PlannedExercise",
    "Timed",
    "WorkoutPlan",
    "InvalidTransitionError",
    "Phase",
    "SessionState",
    "SessionStateMachine",
]
