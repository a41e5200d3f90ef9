import os
from pathlib import Path
import sys
import pytest

# Kivy parses sys.argv on import unless told not to
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
os.environ.setdefault("KIVY_LOG_MODE", "PYTHON")

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend import settings
from backend.plan import Counted, PlannedExercise, Timed, WorkoutPlan


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEvent:
    def __init__(self, callback, interval):
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Records interval callbacks instead of handing them to Kivy's Clock."""

    def __init__(self):
        self.events: list[FakeEvent] = []

    def __call__(self, callback, interval):
        event = FakeEvent(callback, interval)
        self.events.append(event)
        return event

    @property
    def active(self) -> list[FakeEvent]:
        return [e for e in self.events if not e.cancelled]

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            for event in self.active:
                event.callback(event.interval)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def mixed_plan() -> WorkoutPlan:
    """A timed exercise of two sets followed by one counted set."""
    return WorkoutPlan(
        exercises=(
            PlannedExercise(
                exercise={"name": "Plank"},
                mode=Timed(30),
                sets=2,
                rest_seconds=10,
                calories_per_set=5,
            ),
            PlannedExercise(
                exercise={"name": "Push-up"},
                mode=Counted(10),
                sets=1,
                rest_seconds=0,
                calories_per_set=8,
            ),
        ),
        name="Mixed",
    )


@pytest.fixture
def single_set_plan() -> WorkoutPlan:
    return WorkoutPlan(
        exercises=(
            PlannedExercise(
                exercise={"name": "Squat"}, mode=Counted(15), sets=1, rest_seconds=60
            ),
        ),
        name="One Shot",
    )


@pytest.fixture
def settings_file(tmp_path, monkeypatch) -> Path:
    """Point the settings module at a temporary file with an empty cache."""
    path = tmp_path / "settings.json"
    monkeypatch.setattr(settings, "SETTINGS_PATH", path)
    monkeypatch.setattr(settings, "_settings_cache", None)
    return path
