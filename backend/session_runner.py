"""Drive a :class:`SessionStateMachine` from the clock and app lifecycle.

:class:`SessionRunner` owns the only mutable reference to the session state.
It feeds one :meth:`~SessionStateMachine.tick` per second from a Kivy clock
interval, forwards user actions, corrects the countdown once after every
suspend/resume cycle and sends the completion report when the session
finishes.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path
from typing import Callable

from kivy.clock import Clock

from backend.completion import CompletionReport, CompletionReporter, build_report
from backend.plan import WorkoutPlan
from backend.sessions import save_completed_session
from backend.workout_session import Phase, SessionState, SessionStateMachine
from core import TICK_INTERVAL


class SessionRunner:
    """Host-side owner of one workout session.

    ``schedule_interval`` and ``clock`` default to Kivy's
    ``Clock.schedule_interval`` and :func:`time.time`; tests replace them.
    ``history_db`` enables the local session log when given.
    """

    def __init__(
        self,
        plan: WorkoutPlan,
        reporter: CompletionReporter | None = None,
        history_db: Path | None = None,
        skip_zero_rest: bool = False,
        on_change: Callable[[SessionState], None] | None = None,
        on_ring: Callable[[SessionState], None] | None = None,
        on_finish: Callable[[CompletionReport], None] | None = None,
        schedule_interval: Callable | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.machine = SessionStateMachine(plan, skip_zero_rest=skip_zero_rest)
        self.reporter = reporter
        self.history_db = history_db
        self.on_change = on_change
        self.on_ring = on_ring
        self.on_finish = on_finish
        self._schedule_interval = schedule_interval or Clock.schedule_interval
        self._clock = clock

        self.state = self.machine.initial_state()
        self.started_at: float | None = None
        self.ended_at: float | None = None
        self.set_started_at: float | None = None
        self.paused = False
        self.suspended_at: float | None = None
        self.report: CompletionReport | None = None
        self._event = None

    @property
    def plan(self) -> WorkoutPlan:
        return self.machine.plan

    @property
    def finished(self) -> bool:
        return self.state.phase is Phase.FINISHED

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_state(self, new: SessionState) -> None:
        rang = new.ringing and not self.state.ringing
        self.state = new
        if self.on_change:
            self.on_change(new)
        if rang and self.on_ring:
            self.on_ring(new)

    def _ensure_clock_event(self) -> None:
        if self._event is None:
            self._event = self._schedule_interval(self._on_tick, TICK_INTERVAL)

    def _cancel_clock_event(self) -> None:
        if self._event is not None:
            self._event.cancel()
            self._event = None

    def _on_tick(self, dt):
        if self.paused or self.suspended_at is not None:
            return
        if self.state.phase in (Phase.NOT_STARTED, Phase.FINISHED):
            self._cancel_clock_event()
            return
        new = self.machine.tick(self.state)
        if new != self.state:
            self._set_state(new)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def start(self) -> SessionState:
        """Begin the session and start ticking."""
        now = self._clock()
        new = self.machine.start(self.state, now)
        self.started_at = now
        self.set_started_at = now
        self._set_state(new)
        self._ensure_clock_event()
        logging.info(
            "Workout '%s' started: %d exercises, %d sets",
            self.plan.name,
            len(self.plan),
            self.plan.total_units,
        )
        return self.state

    def advance(self) -> SessionState:
        """Finish the current set or rest and move on."""
        now = self._clock()
        previous = self.state
        new = self.machine.advance(previous, now)
        # a new set or rest always starts running
        self.paused = False
        moved = (new.exercise_index, new.set_index) != (
            previous.exercise_index,
            previous.set_index,
        )
        if new.phase is Phase.EXERCISE_ACTIVE and moved:
            self.set_started_at = now
        self._set_state(new)
        if new.phase is Phase.FINISHED:
            self._finish(now)
        return self.state

    def pause(self) -> None:
        """Stop the countdown until :meth:`unpause` is called."""
        if self.state.phase in (Phase.NOT_STARTED, Phase.FINISHED) or self.paused:
            return
        self.paused = True
        logging.info("Workout paused")

    def unpause(self) -> None:
        """Continue the countdown from where it was paused."""
        if not self.paused:
            return
        self.paused = False
        # re-anchor so the paused time is not deducted later
        self._set_state(self.machine.resume(self.state, 0, self._clock()))
        logging.info("Workout resumed")

    def abandon(self) -> None:
        """Discard the session without reporting anything."""
        self._cancel_clock_event()
        if self.state.phase is Phase.FINISHED:
            return
        logging.info(
            "Workout '%s' abandoned after %d sets",
            self.plan.name,
            self.state.completed_units,
        )
        self.paused = False
        self.suspended_at = None
        self.state = self.machine.initial_state()

    def set_elapsed(self) -> float:
        """Seconds spent on the current set, for the stopwatch display."""
        if self.set_started_at is None:
            return 0.0
        return max(0.0, self._clock() - self.set_started_at)

    # ------------------------------------------------------------------
    # App lifecycle
    # ------------------------------------------------------------------

    def suspend(self) -> None:
        """Record that the app went to the background."""
        if self.state.phase in (Phase.NOT_STARTED, Phase.FINISHED):
            return
        if self.suspended_at is None:
            self.suspended_at = self._clock()
            logging.info("Workout suspended")

    def restore(self) -> None:
        """Apply the countdown correction for the last suspension.

        Only the first call after :meth:`suspend` has an effect.
        """
        if self.suspended_at is None:
            return
        self.suspended_at = None
        now = self._clock()
        if self.paused or self.state.timer_anchor is None:
            return
        elapsed = now - self.state.timer_anchor
        logging.info("Workout restored after %.0f s", elapsed)
        self._set_state(self.machine.resume(self.state, elapsed, now))

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def _finish(self, now: float) -> None:
        self._cancel_clock_event()
        self.ended_at = now
        self.report = build_report(self.plan, self.state, self.started_at, now)
        reported = False
        if self.plan.save_history and self.reporter is not None:
            try:
                reported = self.reporter.report(self.report)
            except Exception:
                # the summary is shown whether or not the upload worked
                logging.exception("Workout report could not be sent")
        if self.plan.save_history and self.history_db is not None:
            try:
                save_completed_session(
                    self.report, reported=reported, db_path=self.history_db
                )
            except (sqlite3.Error, OSError) as exc:
                logging.warning("Could not store workout history: %s", exc)
        logging.info(
            "Workout '%s' finished in %d min",
            self.plan.name,
            self.report.total_duration_minutes,
        )
        if self.on_finish:
            self.on_finish(self.report)
