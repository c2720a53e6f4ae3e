"""Persistence facade for every entity collection.

:class:`Repository` reads and writes whole collections through a key/value
store from :mod:`backend.kvstore`.  Each collection is serialised as one JSON
document and every call is a single synchronous read or write.  A repository
is constructed once when the application starts and handed to whoever needs
it.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from backend.catalogue import DEFAULT_EXERCISES, INITIAL_EXERCISES
from backend.models import (
    ActiveSessionSnapshot,
    BodyMeasurement,
    Exercise,
    Routine,
    WorkoutLog,
)
from backend.settings import Settings

EXERCISE_KEY = "irontrack_exercises"
ROUTINE_KEY = "irontrack_routines"
LOG_KEY = "irontrack_logs"
MEASUREMENTS_KEY = "irontrack_measurements"
METRIC_CONFIG_KEY = "irontrack_metric_configs"
PROFILE_KEY = "irontrack_profile"

# The active session is written to two keys so that a damaged copy can be
# recovered from the other one.
ACTIVE_SESSION_KEYS = (
    "irontrack_active_session_1",
    "irontrack_active_session_2",
)


class Repository:
    def __init__(self, store):
        self.store = store
        self.settings = Settings(store)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read(self, key: str, default: Any) -> Any:
        raw = self.store.get(key)
        if not raw:
            return default
        return json.loads(raw)

    def _write(self, key: str, value: Any) -> None:
        self.store.set(key, json.dumps(value))

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    def get_exercises(self) -> list[Exercise]:
        """Return all exercises, seeding the initial catalogue on first use."""
        data = self._read(EXERCISE_KEY, None)
        if data is None:
            data = [dict(item) for item in INITIAL_EXERCISES]
            self._write(EXERCISE_KEY, data)
        return [Exercise.from_dict(item) for item in data]

    def get_exercise(self, exercise_id: str) -> Exercise | None:
        return next((e for e in self.get_exercises() if e.id == exercise_id), None)

    def save_exercises(self, exercises: list[Exercise]) -> None:
        self._write(EXERCISE_KEY, [e.to_dict() for e in exercises])

    def delete_exercise(self, exercise_id: str) -> list[Exercise]:
        """Remove an exercise.  Logs keep their reference to it."""
        updated = [e for e in self.get_exercises() if e.id != exercise_id]
        self.save_exercises(updated)
        return updated

    def load_default_exercises(self) -> int:
        """Merge the bundled catalogue, skipping names that already exist.

        Returns the number of exercises added.
        """
        current = self.get_exercises()
        names = {e.name.strip().lower() for e in current}
        new = [
            Exercise.from_dict(item)
            for item in DEFAULT_EXERCISES
            if item["name"].strip().lower() not in names
        ]
        if not new:
            return 0
        self.save_exercises(current + new)
        return len(new)

    # ------------------------------------------------------------------
    # Routines
    # ------------------------------------------------------------------

    def get_routines(self) -> list[Routine]:
        return [Routine.from_dict(item) for item in self._read(ROUTINE_KEY, [])]

    def save_routines(self, routines: list[Routine]) -> None:
        self._write(ROUTINE_KEY, [r.to_dict() for r in routines])

    # ------------------------------------------------------------------
    # Workout logs
    # ------------------------------------------------------------------

    def get_workout_logs(self) -> list[WorkoutLog]:
        return [WorkoutLog.from_dict(item) for item in self._read(LOG_KEY, [])]

    def save_workout_log(self, log: WorkoutLog) -> None:
        """Append ``log`` to the stored history."""
        data = self._read(LOG_KEY, [])
        data.append(log.to_dict())
        self._write(LOG_KEY, data)

    def delete_workout_log(self, log_id: str) -> None:
        data = [item for item in self._read(LOG_KEY, []) if str(item["id"]) != str(log_id)]
        self._write(LOG_KEY, data)

    # ------------------------------------------------------------------
    # Body measurements and profile
    # ------------------------------------------------------------------

    def get_measurements(self) -> list[BodyMeasurement]:
        return [
            BodyMeasurement.from_dict(item)
            for item in self._read(MEASUREMENTS_KEY, [])
        ]

    def save_measurements(self, measurements: list[BodyMeasurement]) -> None:
        self._write(MEASUREMENTS_KEY, [m.to_dict() for m in measurements])

    def delete_measurement(self, measurement_id: str) -> list[BodyMeasurement]:
        # ids may have been stored as numbers by older exports
        updated = [
            m for m in self.get_measurements() if str(m.id) != str(measurement_id)
        ]
        self.save_measurements(updated)
        return updated

    def get_custom_metric_configs(self) -> list[dict]:
        """Return user-defined measurement metrics as ``{id, label, unit}``."""
        return self._read(METRIC_CONFIG_KEY, [])

    def save_custom_metric_configs(self, configs: list[dict]) -> None:
        self._write(METRIC_CONFIG_KEY, configs)

    def get_profile(self) -> dict:
        return self._read(PROFILE_KEY, {})

    def save_profile(self, profile: dict) -> None:
        self._write(PROFILE_KEY, profile)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_wake_lock_enabled(self) -> bool:
        return bool(self.settings.get_value("wake_lock", True))

    def save_wake_lock_enabled(self, enabled: bool) -> None:
        self.settings.set_value("wake_lock", bool(enabled))

    def get_volume(self) -> float:
        return float(self.settings.get_value("volume", 1.0))

    def save_volume(self, volume: float) -> None:
        self.settings.set_value("volume", min(1.0, max(0.0, float(volume))))

    def get_language(self) -> str:
        return self.settings.get_value("language", "en")

    def save_language(self, language: str) -> None:
        self.settings.set_value("language", language)

    # ------------------------------------------------------------------
    # Active session snapshot
    # ------------------------------------------------------------------

    def get_active_session(self) -> ActiveSessionSnapshot | None:
        """Return the persisted in-progress session, if any.

        The first readable copy wins.  Unreadable copies are logged and
        skipped; when none can be read there is no active session.
        """
        for key in ACTIVE_SESSION_KEYS:
            raw = self.store.get(key)
            if not raw:
                continue
            try:
                return ActiveSessionSnapshot.from_dict(json.loads(raw))
            except (ValueError, KeyError, TypeError):
                logging.warning("Discarding unreadable session snapshot %s", key)
        return None

    def save_active_session(self, snapshot: ActiveSessionSnapshot) -> None:
        payload = json.dumps(snapshot.to_dict())
        for key in ACTIVE_SESSION_KEYS:
            self.store.set(key, payload)

    def clear_active_session(self) -> None:
        for key in ACTIVE_SESSION_KEYS:
            self.store.delete(key)
