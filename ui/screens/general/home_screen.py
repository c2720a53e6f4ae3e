from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen
from kivymd.uix.list import OneLineListItem
from kivy.properties import StringProperty

from backend.routines import find_active_routine


class HomeScreen(MDScreen):
    """Landing screen listing the days of the routine running today."""

    routine_name = StringProperty("No routine")

    def on_pre_enter(self, *args):
        self.populate()
        return super().on_pre_enter(*args)

    def populate(self) -> None:
        app = MDApp.get_running_app()
        lst = self.ids.get("day_list")
        if not app or not lst:
            return
        lst.clear_widgets()
        routine = find_active_routine(app.repository.get_routines())
        if routine is None:
            self.routine_name = "No routine"
            return
        self.routine_name = routine.name
        for day in routine.days:
            lst.add_widget(
                OneLineListItem(
                    text=f"{day.name} ({len(day.exercises)} exercises)",
                    on_release=lambda _, d=day.id: app.start_workout(routine, d),
                )
            )

    def start_free_workout(self) -> None:
        MDApp.get_running_app().start_workout()
