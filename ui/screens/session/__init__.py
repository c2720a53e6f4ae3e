"""Screens used during an active workout session."""

from .workout_active_screen import WorkoutActiveScreen
from .workout_summary_screen import WorkoutSummaryScreen

__all__ = [
    "WorkoutActiveScreen",
    "WorkoutSummaryScreen",
]
