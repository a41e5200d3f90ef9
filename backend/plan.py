"""Workout plans consumed by the session state machine.

A plan is an ordered, immutable list of :class:`PlannedExercise` entries.
Plans are built from plain data: a custom routine or generated daily plan
(:func:`plan_from_dict`), the workout API payload
(:func:`plan_from_api_workout`) or a single standalone exercise
(:func:`single_exercise_plan`).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from core import (
    DEFAULT_REST_DURATION,
    DEFAULT_SETS_PER_EXERCISE,
    DEFAULT_TIMED_DURATION,
)


@dataclass(frozen=True)
class Timed:
    """Exercise performed for ``seconds`` against a countdown."""

    seconds: int
    kind: str = field(default="timed", init=False)

    def __post_init__(self):
        object.__setattr__(self, "seconds", max(0, int(self.seconds or 0)))


@dataclass(frozen=True)
class Counted:
    """Exercise completed after ``reps`` repetitions; no countdown."""

    reps: int
    kind: str = field(default="counted", init=False)

    def __post_init__(self):
        object.__setattr__(self, "reps", max(0, int(self.reps or 0)))


Mode = Timed | Counted


@dataclass(frozen=True)
class PlannedExercise:
    exercise: Mapping[str, Any]
    mode: Mode
    sets: int = DEFAULT_SETS_PER_EXERCISE
    rest_seconds: int = DEFAULT_REST_DURATION
    calories_per_set: float = 0.0

    def __post_init__(self):
        if self.sets is None:
            object.__setattr__(self, "sets", DEFAULT_SETS_PER_EXERCISE)
        if int(self.sets) < 1:
            raise ValueError(f"Exercise needs at least one set, got {self.sets}")
        object.__setattr__(self, "sets", int(self.sets))
        object.__setattr__(self, "rest_seconds", max(0, int(self.rest_seconds or 0)))
        object.__setattr__(
            self, "calories_per_set", max(0.0, float(self.calories_per_set or 0))
        )

    @property
    def name(self) -> str:
        return str(self.exercise.get("name", ""))

    @property
    def is_timed(self) -> bool:
        return isinstance(self.mode, Timed)


@dataclass(frozen=True)
class WorkoutPlan:
    """Ordered exercises for one session.

    ``total_calories`` overrides the per-set estimate when the source already
    computed a figure. ``save_history`` is ``False`` for previews whose
    completion should not be reported.
    """

    exercises: tuple[PlannedExercise, ...]
    name: str = ""
    total_calories: float | None = None
    save_history: bool = True

    def __post_init__(self):
        object.__setattr__(self, "exercises", tuple(self.exercises))
        if not self.exercises:
            raise ValueError("Workout plan has no exercises")

    def __len__(self) -> int:
        return len(self.exercises)

    def __getitem__(self, index: int) -> PlannedExercise:
        return self.exercises[index]

    @property
    def total_units(self) -> int:
        """Number of sets across the whole plan."""
        return sum(ex.sets for ex in self.exercises)

    @property
    def estimated_calories(self) -> float:
        if self.total_calories is not None:
            return float(self.total_calories)
        return sum(ex.calories_per_set * ex.sets for ex in self.exercises)


def mode_from_dict(data: Mapping[str, Any]) -> Mode:
    """Return the mode described by ``{"kind": ..., "seconds"/"reps": ...}``."""

    kind = data.get("kind")
    if kind == "timed":
        return Timed(data.get("seconds", 0))
    if kind == "counted":
        return Counted(data.get("reps", 0))
    raise ValueError(f"Unknown exercise mode '{kind}'")


def plan_from_dict(data: Mapping[str, Any]) -> WorkoutPlan:
    """Build a :class:`WorkoutPlan` from its plain-data representation."""

    exercises = []
    for entry in data.get("exercises") or []:
        exercise = entry.get("exercise") or {}
        if not isinstance(exercise, Mapping):
            exercise = {"name": str(exercise)}
        exercises.append(
            PlannedExercise(
                exercise=exercise,
                mode=mode_from_dict(entry.get("mode") or {}),
                sets=entry.get("sets"),
                rest_seconds=entry.get("rest_seconds", DEFAULT_REST_DURATION),
                calories_per_set=entry.get(
                    "calories_per_set", exercise.get("calories", 0)
                ),
            )
        )
    return WorkoutPlan(
        exercises=tuple(exercises),
        name=data.get("name", ""),
        total_calories=data.get("total_calories"),
        save_history=data.get("save_history", True),
    )


def plan_from_api_workout(data: Mapping[str, Any]) -> WorkoutPlan:
    """Build a plan from a workout returned by the REST API.

    Exercises whose ``tipo`` is ``"timer"`` run against a countdown of the
    workout's ``duration``, falling back to the exercise's own
    ``tempo_estimado`` and finally :data:`DEFAULT_TIMED_DURATION`. Every
    other exercise is repetition based.
    """

    exercises = []
    for entry in data.get("exercises") or []:
        info = entry.get("exercise") or {}
        if info.get("tipo") == "timer":
            mode: Mode = Timed(
                entry.get("duration")
                or info.get("tempo_estimado")
                or DEFAULT_TIMED_DURATION
            )
        else:
            mode = Counted(entry.get("reps") or 0)
        exercises.append(
            PlannedExercise(
                exercise={**info, "name": info.get("nome", "")},
                mode=mode,
                sets=entry.get("sets"),
                rest_seconds=entry.get("restTime", DEFAULT_REST_DURATION),
                calories_per_set=info.get("calorias_estimadas") or 0,
            )
        )
    return WorkoutPlan(
        exercises=tuple(exercises),
        name=data.get("workoutName") or "",
        total_calories=data.get("totalCalories"),
        save_history=not data.get("skipSaveHistory", False),
    )


def single_exercise_plan(
    exercise: Mapping[str, Any],
    mode: Mode,
    rest_seconds: int | None = None,
) -> WorkoutPlan:
    """Plan for previewing one exercise on its own.

    Standalone exercises always run :data:`DEFAULT_SETS_PER_EXERCISE` sets and
    are never saved to the workout history.
    """

    planned = PlannedExercise(
        exercise=exercise,
        mode=mode,
        sets=DEFAULT_SETS_PER_EXERCISE,
        rest_seconds=DEFAULT_REST_DURATION if rest_seconds is None else rest_seconds,
        calories_per_set=exercise.get("calories", 0),
    )
    return WorkoutPlan(
        exercises=(planned,), name=planned.name, save_history=False
    )


def load_plan(path: Path) -> WorkoutPlan:
    """Read a JSON plan file written in the :func:`plan_from_dict` format."""

    with Path(path).open("r", encoding="utf-8") as fh:
        return plan_from_dict(json.load(fh))
