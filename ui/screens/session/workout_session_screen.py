from kivy.clock import Clock
from kivy.lang import Builder
from kivy.properties import (
    BooleanProperty,
    ListProperty,
    NumericProperty,
    StringProperty,
)
from kivymd.app import MDApp
from kivymd.uix.button import MDFlatButton
from kivymd.uix.dialog import MDDialog
from kivymd.uix.screen import MDScreen

from backend.workout_session import Phase, SessionState

KV = """
<WorkoutSessionScreen>:
    MDBoxLayout:
        orientation: "vertical"
        spacing: "12dp"
        padding: "20dp"
        MDLabel:
            text: root.exercise_name
            font_style: "H5"
            halign: "center"
        MDLabel:
            text: root.set_label
            halign: "center"
        MDLabel:
            text: root.phase_label
            halign: "center"
            theme_text_color: "Secondary"
        MDLabel:
            id: timer_label
            text: root.timer_label
            font_style: "H2"
            halign: "center"
            theme_text_color: "Custom"
            text_color: root.timer_color
        MDProgressBar:
            value: root.progress
        MDLabel:
            text: root.upcoming_label
            halign: "center"
            theme_text_color: "Hint"
        MDBoxLayout:
            size_hint_y: None
            height: "48dp"
            spacing: "12dp"
            MDRaisedButton:
                text: "Pause" if not root.is_paused else "Resume"
                on_release: root.toggle_pause()
            MDRaisedButton:
                text: root.advance_label
                on_release: root.advance()
            MDFlatButton:
                text: "Quit"
                on_release: root.show_abandon_confirmation()
"""

Builder.load_string(KV)

RINGING_COLOR = (0, 1, 0, 1)
RUNNING_COLOR = (1, 1, 1, 1)


def format_seconds(seconds: float) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


class WorkoutSessionScreen(MDScreen):
    """Screen running the sets and rests of the current workout.

    All session logic lives in the app's ``SessionRunner``; this screen only
    renders its state and forwards button presses.
    """

    exercise_name = StringProperty("")
    set_label = StringProperty("")
    phase_label = StringProperty("")
    timer_label = StringProperty("00:00")
    upcoming_label = StringProperty("")
    advance_label = StringProperty("Start")
    progress = NumericProperty(0)
    is_paused = BooleanProperty(False)
    timer_color = ListProperty(RUNNING_COLOR)
    _event = None

    def _runner(self):
        app = MDApp.get_running_app()
        return getattr(app, "runner", None) if app else None

    def bind_runner(self):
        """Render the app's current runner and follow its changes."""
        runner = self._runner()
        if runner:
            runner.on_change = self.refresh
            runner.on_ring = self.ring
            self.refresh(runner.state)

    def on_pre_enter(self, *args):
        self.bind_runner()
        if not self._event:
            # stopwatch for repetition sets; the countdown refreshes via on_change
            self._event = Clock.schedule_interval(self._update_stopwatch, 0.5)
        return super().on_pre_enter(*args)

    def on_leave(self, *args):
        if self._event:
            self._event.cancel()
            self._event = None
        return super().on_leave(*args)

    def refresh(self, state: SessionState):
        runner = self._runner()
        if not runner:
            return
        machine = runner.machine
        self.is_paused = runner.paused
        if state.phase is Phase.NOT_STARTED:
            first = runner.plan[0]
            self.exercise_name = first.name
            self.set_label = f"Set 1 of {first.sets}"
            self.phase_label = "Ready"
            self.advance_label = "Start"
            self.timer_label = "00:00"
            self.upcoming_label = ""
            self.progress = 0
            return
        if state.phase is Phase.FINISHED:
            self.phase_label = "Finished"
            self.progress = 100
            return
        current = machine.current_exercise(state)
        self.exercise_name = current.name
        self.set_label = machine.set_label(state)
        self.upcoming_label = machine.next_up_label(state)
        self.progress = machine.progress_percentage(state)
        if state.phase is Phase.RESTING:
            self.phase_label = "Rest"
            self.advance_label = "Next"
            self.timer_label = format_seconds(state.remaining_seconds)
        else:
            self.advance_label = "Done"
            if current.is_timed:
                self.phase_label = f"{current.mode.seconds} s"
                self.timer_label = format_seconds(state.remaining_seconds)
            else:
                self.phase_label = f"{current.mode.reps} reps"
                self.timer_label = format_seconds(runner.set_elapsed())
        self.timer_color = RINGING_COLOR if state.ringing else RUNNING_COLOR

    def ring(self, state: SessionState):
        self.timer_color = RINGING_COLOR
        app = MDApp.get_running_app()
        sounds = getattr(app, "sounds", None) if app else None
        if sounds:
            sounds.alert()

    def _update_stopwatch(self, dt):
        runner = self._runner()
        if not runner or runner.state.phase is not Phase.EXERCISE_ACTIVE:
            return
        if not runner.machine.current_exercise(runner.state).is_timed:
            self.timer_label = format_seconds(runner.set_elapsed())

    def advance(self):
        runner = self._runner()
        if not runner or runner.finished:
            return
        if runner.state.phase is Phase.NOT_STARTED:
            runner.start()
        else:
            runner.advance()

    def toggle_pause(self):
        runner = self._runner()
        if not runner:
            return
        if runner.paused:
            runner.unpause()
        else:
            runner.pause()
        self.is_paused = runner.paused

    def show_abandon_confirmation(self):
        if not hasattr(self, "_abandon_dialog") or not self._abandon_dialog:
            self._abandon_dialog = MDDialog(
                text="Quit this workout? Your progress will not be saved.",
                buttons=[
                    MDFlatButton(
                        text="Cancel", on_release=lambda *_: self._abandon_dialog.dismiss()
                    ),
                    MDFlatButton(text="Quit", on_release=self._perform_abandon),
                ],
            )
        self._abandon_dialog.open()

    def _perform_abandon(self, *args):
        if hasattr(self, "_abandon_dialog") and self._abandon_dialog:
            self._abandon_dialog.dismiss()
        app = MDApp.get_running_app()
        if app:
            app.abandon_workout()
