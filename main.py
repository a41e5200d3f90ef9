import os
import sys

# keep Kivy from consuming our command line arguments
os.environ.setdefault("KIVY_NO_ARGS", "1")

from kivymd.app import MDApp
from kivy.lang import Builder
from pathlib import Path
import logging

from assets.sounds import SoundSystem
from backend import settings
from backend.completion import CompletionReporter
from backend.plan import WorkoutPlan, load_plan
from backend.session_runner import SessionRunner
from core import DEFAULT_DB_PATH, DEFAULT_PLAN_PATH
from ui.screens import WorkoutSessionScreen, WorkoutSummaryScreen  # noqa: F401

KV = """
ScreenManager:
    WorkoutSessionScreen:
        name: "workout_session"
    WorkoutSummaryScreen:
        name: "workout_summary"
"""


class CalisthenicsApp(MDApp):
    runner: SessionRunner | None = None
    sounds: SoundSystem | None = None
    report = None

    def __init__(self, plan_path: Path = DEFAULT_PLAN_PATH, **kwargs):
        super().__init__(**kwargs)
        self.plan_path = Path(plan_path)

    def build(self):
        return Builder.load_string(KV)

    def on_start(self):
        self.start_workout(load_plan(self.plan_path))

    def start_workout(self, plan: WorkoutPlan):
        """Create the ``SessionRunner`` for ``plan`` and show the session."""

        auth_token = settings.get_value("auth_token") or None
        reporter = CompletionReporter(
            settings.get_value("api_base_url"),
            timeout=float(settings.get_value("api_timeout")),
            auth_token=auth_token,
        )
        self.report = None
        self.sounds = SoundSystem(enabled=bool(settings.get_value("sound_on")))
        self.runner = SessionRunner(
            plan,
            reporter=reporter,
            history_db=DEFAULT_DB_PATH,
            skip_zero_rest=bool(settings.get_value("skip_zero_rest")),
            on_finish=self._on_finish,
        )
        if self.root:
            self.root.current = "workout_session"
            self.root.get_screen("workout_session").bind_runner()

    def abandon_workout(self):
        if self.runner:
            self.runner.abandon()
        self.runner = None
        self.report = None
        if self.root:
            self.root.current = "workout_summary"

    def _on_finish(self, report):
        self.report = report
        if self.root:
            self.root.current = "workout_summary"

    def on_pause(self):
        if self.runner:
            self.runner.suspend()
        return True

    def on_resume(self):
        if self.runner:
            self.runner.restore()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    plan_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_PLAN_PATH
    CalisthenicsApp(plan_path=plan_path).run()
