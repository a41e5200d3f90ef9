"""Workout session state machine.

The session is an immutable :class:`SessionState` that only changes through
four transitions: :func:`start`, :func:`tick`, :func:`advance` and
:func:`resume`. Each takes the current state and returns a new one; the host
(see :mod:`backend.session_runner`) owns the single mutable reference and
supplies timestamps, so nothing here reads the clock.

A countdown reaching zero only sets ``ringing``. Moving to the next phase
always requires an explicit :func:`advance`.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, replace

from backend.plan import PlannedExercise, WorkoutPlan


class Phase(enum.Enum):
    NOT_STARTED = "not_started"
    EXERCISE_ACTIVE = "exercise_active"
    RESTING = "resting"
    FINISHED = "finished"


class InvalidTransitionError(RuntimeError):
    """Raised when a transition is requested in a phase that forbids it."""


@dataclass(frozen=True)
class SessionState:
    exercise_index: int = 0
    # 1-based; during rest it still names the set just completed
    set_index: int = 1
    phase: Phase = Phase.NOT_STARTED
    remaining_seconds: int = 0
    # wall-clock time up to which ``remaining_seconds`` is accurate
    timer_anchor: float | None = None
    completed_units: int = 0
    ringing: bool = False


def _current(plan: WorkoutPlan, state: SessionState) -> PlannedExercise:
    return plan[state.exercise_index]


def _is_last_set(plan: WorkoutPlan, state: SessionState) -> bool:
    return state.set_index >= _current(plan, state).sets


def _is_last_exercise(plan: WorkoutPlan, state: SessionState) -> bool:
    return state.exercise_index >= len(plan) - 1


def countdown_running(plan: WorkoutPlan, state: SessionState) -> bool:
    """Return ``True`` while a countdown is armed and has not rung yet."""

    if state.ringing:
        return False
    if state.phase is Phase.RESTING:
        return True
    if state.phase is Phase.EXERCISE_ACTIVE:
        return _current(plan, state).is_timed
    return False


def _arm_exercise(
    plan: WorkoutPlan, state: SessionState, now: float
) -> SessionState:
    """Enter the active phase for the set ``state`` points at."""

    ex = _current(plan, state)
    if ex.is_timed:
        seconds = ex.mode.seconds
        return replace(
            state,
            phase=Phase.EXERCISE_ACTIVE,
            remaining_seconds=seconds,
            timer_anchor=now,
            ringing=seconds == 0,
        )
    return replace(
        state,
        phase=Phase.EXERCISE_ACTIVE,
        remaining_seconds=0,
        timer_anchor=None,
        ringing=False,
    )


def _finish(state: SessionState) -> SessionState:
    return replace(
        state,
        phase=Phase.FINISHED,
        remaining_seconds=0,
        timer_anchor=None,
        ringing=False,
    )


def _require_running(state: SessionState, action: str) -> None:
    if state.phase in (Phase.NOT_STARTED, Phase.FINISHED):
        raise InvalidTransitionError(
            f"Cannot {action} while session is {state.phase.value}"
        )


def start(plan: WorkoutPlan, state: SessionState, now: float) -> SessionState:
    """Begin the first set of the first exercise."""

    if state.phase is not Phase.NOT_STARTED:
        raise InvalidTransitionError(
            f"Cannot start while session is {state.phase.value}"
        )
    return _arm_exercise(plan, replace(state, exercise_index=0, set_index=1), now)


def tick(plan: WorkoutPlan, state: SessionState) -> SessionState:
    """Account for one elapsed second.

    Only the countdown changes; the phase never does. Once the countdown hits
    zero further ticks return ``state`` unchanged.
    """

    _require_running(state, "tick")
    if not countdown_running(plan, state):
        return state
    remaining = max(0, state.remaining_seconds - 1)
    anchor = state.timer_anchor + 1 if state.timer_anchor is not None else None
    return replace(
        state,
        remaining_seconds=remaining,
        timer_anchor=anchor,
        ringing=remaining == 0,
    )


def _leave_rest(plan: WorkoutPlan, state: SessionState, now: float) -> SessionState:
    if _is_last_set(plan, state):
        if _is_last_exercise(plan, state):
            return _finish(state)
        nxt = replace(state, exercise_index=state.exercise_index + 1, set_index=1)
    else:
        nxt = replace(state, set_index=state.set_index + 1)
    return _arm_exercise(plan, nxt, now)


def advance(
    plan: WorkoutPlan,
    state: SessionState,
    now: float,
    skip_zero_rest: bool = False,
) -> SessionState:
    """Complete the current set or end the current rest.

    Timed sets may be cut short; there is no guard on the remaining time.
    The last set of the last exercise goes straight to
    :attr:`Phase.FINISHED` without resting.
    """

    _require_running(state, "advance")
    if state.phase is Phase.RESTING:
        return _leave_rest(plan, state, now)

    done = replace(state, completed_units=state.completed_units + 1)
    if _is_last_set(plan, done) and _is_last_exercise(plan, done):
        return _finish(done)

    rest = _current(plan, done).rest_seconds
    resting = replace(
        done,
        phase=Phase.RESTING,
        remaining_seconds=rest,
        timer_anchor=now,
        ringing=rest == 0,
    )
    if rest == 0 and skip_zero_rest:
        return _leave_rest(plan, resting, now)
    return resting


def resume(
    plan: WorkoutPlan,
    state: SessionState,
    elapsed_seconds: float,
    now: float,
) -> SessionState:
    """Correct the countdown after the app was suspended for a while.

    ``elapsed_seconds`` is the time since ``timer_anchor``. The countdown is
    clamped at zero and rings, but the phase is left alone.
    """

    if not countdown_running(plan, state):
        return state
    elapsed = max(0, math.floor(elapsed_seconds))
    remaining = max(0, state.remaining_seconds - elapsed)
    return replace(
        state,
        remaining_seconds=remaining,
        timer_anchor=now,
        ringing=remaining == 0,
    )


class SessionStateMachine:
    """Bind the session transitions to a single :class:`WorkoutPlan`.

    The machine itself holds no session state; every method takes the current
    :class:`SessionState` and returns the next one.
    """

    def __init__(self, plan: WorkoutPlan, skip_zero_rest: bool = False):
        self.plan = plan
        self.skip_zero_rest = skip_zero_rest

    def initial_state(self) -> SessionState:
        return SessionState()

    def start(self, state: SessionState, now: float) -> SessionState:
        new = start(self.plan, state, now)
        logging.debug("Session started: %s", self.set_label(new))
        return new

    def tick(self, state: SessionState) -> SessionState:
        return tick(self.plan, state)

    def advance(self, state: SessionState, now: float) -> SessionState:
        new = advance(self.plan, state, now, self.skip_zero_rest)
        logging.debug(
            "Advanced %s -> %s (%s)",
            state.phase.value,
            new.phase.value,
            self.set_label(new),
        )
        return new

    def resume(
        self, state: SessionState, elapsed_seconds: float, now: float
    ) -> SessionState:
        return resume(self.plan, state, elapsed_seconds, now)

    # ------------------------------------------------------------------
    # Display helpers
    # ------------------------------------------------------------------

    def countdown_running(self, state: SessionState) -> bool:
        return countdown_running(self.plan, state)

    def current_exercise(self, state: SessionState) -> PlannedExercise:
        return _current(self.plan, state)

    def set_label(self, state: SessionState) -> str:
        """Return ``"Set N of M"`` for the set in progress or just finished."""
        ex = _current(self.plan, state)
        return f"Set {state.set_index} of {ex.sets}"

    def upcoming_display(self, state: SessionState) -> str:
        """Return the exercise and set that follow the current one."""

        if state.phase is Phase.FINISHED:
            return ""
        ex_idx = state.exercise_index
        set_idx = state.set_index + 1
        if set_idx > self.plan[ex_idx].sets:
            ex_idx += 1
            set_idx = 1
        if ex_idx < len(self.plan):
            ex = self.plan[ex_idx]
            return f"{ex.name} set {set_idx} of {ex.sets}"
        return ""

    def next_up_label(self, state: SessionState) -> str:
        upcoming = self.upcoming_display(state)
        return f"Next: {upcoming}" if upcoming else ""

    def progress_percentage(self, state: SessionState) -> float:
        """Share of planned sets completed so far, from 0 to 100."""
        total = self.plan.total_units
        return state.completed_units / total * 100 if total else 0.0
