from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen
from kivymd.uix.list import OneLineListItem, TwoLineListItem
from kivy.properties import ObjectProperty

from backend.timers import format_seconds


class WorkoutSummaryScreen(MDScreen):
    """Screen showing the workout that was just saved."""

    summary_list = ObjectProperty(None)

    def on_pre_enter(self, *args):
        self.populate()
        return super().on_pre_enter(*args)

    def populate(self):
        if not self.summary_list:
            return
        self.summary_list.clear_widgets()
        app = MDApp.get_running_app()
        log = app.last_log if app else None
        if not log:
            return
        exercises = {e.id: e for e in app.repository.get_exercises()}
        detail = f"{log.duration_minutes} min"
        if log.calories:
            detail += f", {log.calories:g} kcal"
        self.summary_list.add_widget(TwoLineListItem(text=log.date[:10], secondary_text=detail))
        for entry in log.exercises:
            exercise = exercises.get(entry.exercise_id)
            self.summary_list.add_widget(
                OneLineListItem(text=exercise.name if exercise else entry.exercise_id)
            )
            for idx, s in enumerate(entry.sets, 1):
                if not s.completed:
                    continue
                if exercise is not None and exercise.is_duration:
                    text = f"Set {idx}: {format_seconds(s.duration_seconds)}"
                else:
                    text = f"Set {idx}: {s.weight:g}kg x {s.reps}"
                self.summary_list.add_widget(OneLineListItem(text=text))
