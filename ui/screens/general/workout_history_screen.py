from datetime import datetime

from kivymd.uix.screen import MDScreen
from kivymd.uix.list import TwoLineListItem
from kivy.app import App
from kivy.properties import StringProperty

from ui.dialogs import confirm


class WorkoutHistoryScreen(MDScreen):
    """Display the saved workouts, newest first.

    Tapping an entry offers to delete it.
    """

    return_to = StringProperty("home")
    """Name of the screen to return to when leaving the history screen."""

    def on_pre_enter(self, *args):
        """Populate the history list before the screen becomes visible."""
        self.populate()
        return super().on_pre_enter(*args)

    def populate(self) -> None:
        app = App.get_running_app()
        lst = self.ids.get("history_list")
        if not lst:
            return
        lst.clear_widgets()
        names = {e.id: e.name for e in app.repository.get_exercises()}
        for log in reversed(app.repository.get_workout_logs()):
            try:
                when = datetime.fromisoformat(log.date).strftime("%H:%M %a %d/%m/%Y")
            except ValueError:
                when = log.date
            exercises = ", ".join(names.get(e.exercise_id, "?") for e in log.exercises)
            item = TwoLineListItem(
                text=f"{when}  ({log.duration_minutes} min)",
                secondary_text=exercises or "No exercises",
                on_release=lambda _, lid=log.id: self.confirm_delete(lid),
            )
            lst.add_widget(item)

    def confirm_delete(self, log_id: str) -> None:
        def delete():
            App.get_running_app().repository.delete_workout_log(log_id)
            self.populate()

        confirm("Delete Workout?", "This workout will be removed from the history.", delete, "Delete")
