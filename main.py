from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path

from kivy.core.window import Window
from kivy.lang import Builder
from kivymd.app import MDApp

from backend.audio import CuePlayer
from backend.kvstore import SQLiteStore
from backend.models import Routine, WorkoutLog
from backend.storage import Repository
from backend.wake_lock import WakeLock
from backend.workout_session import WorkoutSession

# Screen classes must be registered before main.kv is loaded
from ui.screens import (  # noqa: F401
    HomeScreen,
    SettingsScreen,
    WorkoutActiveScreen,
    WorkoutHistoryScreen,
    WorkoutSummaryScreen,
)


if os.name == "nt" or sys.platform.startswith("win"):
    Window.size = (280, 280 * (20 / 9))


class IronTrackApp(MDApp):
    workout_session: WorkoutSession | None = None
    # Log saved by the most recent finished workout, shown on the summary
    last_log: WorkoutLog | None = None

    def build(self):
        self.title = "IronTrack"
        self.repository = Repository(SQLiteStore())
        self.cue_player = CuePlayer()
        self.wake_lock = WakeLock()
        self._paused_at: float | None = None
        return Builder.load_file(str(Path(__file__).with_name("main.kv")))

    def on_start(self):
        """Resume a workout left running when the app was closed."""
        self.workout_session = WorkoutSession.load_from_recovery(
            self.repository, **self._session_callbacks()
        )
        if self.workout_session:
            logging.info("Recovered active workout")
            self.root.current = "workout_active"

    def _session_callbacks(self) -> dict:
        return {
            "cue_player": self.cue_player,
            "wake_lock": self.wake_lock,
            "on_change": self._on_session_change,
            "on_finish": self._on_session_end,
        }

    def start_workout(self, routine: Routine | None = None, day_id: str | None = None):
        """Start ``routine``'s day ``day_id``, or a free workout.

        An unfinished workout is reopened instead of starting another one.
        """
        if self.workout_session is None:
            # first user gesture: prepare sounds so the first cue is not delayed
            self.cue_player.unlock()
            self.workout_session = WorkoutSession(
                self.repository, routine, day_id, **self._session_callbacks()
            )
        self.root.current = "workout_active"

    def _on_session_change(self):
        if self.root and self.root.current == "workout_active":
            self.root.get_screen("workout_active").update_status()

    def _on_session_end(self, log: WorkoutLog | None):
        self.workout_session = None
        self.last_log = log
        if self.root:
            self.root.current = "workout_summary" if log else "home"

    def on_pause(self):
        self._paused_at = time.time()
        return True

    def on_resume(self):
        if self._paused_at is not None and self.workout_session:
            self.workout_session.resync_timers(time.time() - self._paused_at)
        self._paused_at = None


if __name__ == "__main__":
    IronTrackApp().run()
