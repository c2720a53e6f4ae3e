"""UI screen modules for IronTrack."""

from .session import (
    WorkoutActiveScreen,
    WorkoutSummaryScreen,
)
from .general import (
    HomeScreen,
    SettingsScreen,
    WorkoutHistoryScreen,
)

__all__ = [
    "HomeScreen",
    "SettingsScreen",
    "WorkoutActiveScreen",
    "WorkoutHistoryScreen",
    "WorkoutSummaryScreen",
]
