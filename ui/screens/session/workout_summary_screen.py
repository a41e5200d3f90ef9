from kivy.lang import Builder
from kivy.properties import StringProperty
from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen

KV = """
<WorkoutSummaryScreen>:
    MDBoxLayout:
        orientation: "vertical"
        spacing: "12dp"
        padding: "20dp"
        MDLabel:
            text: root.title
            font_style: "H4"
            halign: "center"
        MDLabel:
            text: root.details
            halign: "center"
        MDRaisedButton:
            text: "Close"
            pos_hint: {"center_x": 0.5}
            on_release: app.stop()
"""

Builder.load_string(KV)


class WorkoutSummaryScreen(MDScreen):
    """Screen showing the totals of a completed workout."""

    title = StringProperty("")
    details = StringProperty("")

    def on_pre_enter(self, *args):
        self.populate()
        return super().on_pre_enter(*args)

    def populate(self):
        app = MDApp.get_running_app()
        report = getattr(app, "report", None) if app else None
        if report is None:
            self.title = "Workout abandoned"
            self.details = ""
            return
        self.title = report.workout_name or "Workout complete"
        self.details = "\n".join(
            [
                f"Duration: {report.total_duration_minutes} min",
                f"Calories: {round(report.total_calories)} kcal",
                f"Sets: {report.completed_units} of {report.total_planned_units}",
            ]
        )
