from __future__ import annotations

"""Screen for modifying app settings."""

import logging

from kivymd.uix.screen import MDScreen
from kivymd.app import MDApp
from kivymd.toast import toast
from kivy.properties import StringProperty


class SettingsScreen(MDScreen):
    """Display and persist user-configurable settings."""

    return_to = StringProperty("home")
    """Name of the screen to return to when leaving settings."""

    def on_pre_enter(self, *args) -> None:
        """Populate controls from stored settings."""
        repo = MDApp.get_running_app().repository
        self.ids.volume_slider.value = repo.get_volume()
        self.ids.wake_lock_toggle.active = repo.get_wake_lock_enabled()
        return super().on_pre_enter(*args)

    def on_volume(self, slider, value: float) -> None:
        """Handle volume slider changes."""
        app = MDApp.get_running_app()
        app.repository.save_volume(value)
        if app.workout_session:
            app.workout_session.volume = app.repository.get_volume()

    def on_wake_lock_toggle(self, switch, value: bool) -> None:
        app = MDApp.get_running_app()
        app.repository.save_wake_lock_enabled(value)
        if app.workout_session and not value:
            app.wake_lock.release()

    def play_test_sound(self) -> None:
        app = MDApp.get_running_app()
        app.cue_player.play_cue("test", app.repository.get_volume())

    def load_default_exercises(self) -> None:
        """Merge the bundled exercise catalogue into the library."""
        added = MDApp.get_running_app().repository.load_default_exercises()
        logging.info("Loaded %d default exercises", added)
        toast(f"Added {added} exercises" if added else "Library already up to date")
