from __future__ import annotations

"""User settings kept in the key/value store.

The settings are stored as a list of dictionaries to preserve order.
Each dictionary contains ``key``, ``value`` and ``type`` entries.
"""

import copy
import json
import logging
from typing import Any, Dict, List

SETTINGS_KEY = "irontrack_settings"

# Default settings used on first run or when the stored copy is unreadable.
DEFAULT_SETTINGS: List[Dict[str, Any]] = [
    {"key": "volume", "value": 1.0, "type": "slider"},
    {"key": "wake_lock", "value": True, "type": "bool"},
    {"key": "language", "value": "en", "type": "choice"},
    {"key": "theme", "value": "iron", "type": "choice"},
]


class Settings:
    """Read and update settings stored under :data:`SETTINGS_KEY`.

    The list is read from the store once and cached; every update is written
    straight back.
    """

    def __init__(self, store):
        self.store = store
        self._cache: List[Dict[str, Any]] | None = None

    def load(self) -> List[Dict[str, Any]]:
        """Load settings from the store or create defaults."""
        raw = self.store.get(SETTINGS_KEY)
        if raw:
            try:
                data = json.loads(raw)
                if isinstance(data, list):
                    return data
            except ValueError:
                logging.warning("Stored settings are unreadable, using defaults")
        defaults = copy.deepcopy(DEFAULT_SETTINGS)
        self.save(defaults)
        return defaults

    def save(self, settings: List[Dict[str, Any]]) -> None:
        self.store.set(SETTINGS_KEY, json.dumps(settings))

    def all(self) -> List[Dict[str, Any]]:
        """Return the cached settings list, loading it if needed."""
        if self._cache is None:
            self._cache = self.load()
        return self._cache

    def get_value(self, key: str, default: Any = None) -> Any:
        for item in self.all():
            if item.get("key") == key:
                return item.get("value")
        for item in DEFAULT_SETTINGS:
            if item["key"] == key:
                return item["value"]
        return default

    def set_value(self, key: str, value: Any) -> None:
        """Update ``key`` with ``value`` and persist the change."""
        settings = self.all()
        for item in settings:
            if item.get("key") == key:
                item["value"] = value
                break
        else:
            settings.append({"key": key, "value": value, "type": type(value).__name__})
        self.save(settings)
