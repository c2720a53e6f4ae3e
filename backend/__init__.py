"""Shared constants and defaults for backend modules."""

from __future__ import annotations

import os
from pathlib import Path

# Default values used throughout the application
DEFAULT_SETS_PER_EXERCISE = 3
DEFAULT_REST_DURATION = 60
DEFAULT_REPS = 10
DEFAULT_DURATION_SECONDS = 60

# Seconds added or removed by one press of the set countdown +/- buttons
SET_TIMER_STEP = 15

# Directory holding the key/value database and rendered sound files.  It can
# be redirected with ``IRONTRACK_DATA_DIR`` so tests and tools never touch the
# user's data.
DATA_DIR = Path(
    os.environ.get(
        "IRONTRACK_DATA_DIR", Path(__file__).resolve().parents[1] / "data"
    )
)
DEFAULT_DB_PATH = DATA_DIR / "irontrack.db"

__all__ = [
    "DEFAULT_SETS_PER_EXERCISE",
    "DEFAULT_REST_DURATION",
    "DEFAULT_REPS",
    "DEFAULT_DURATION_SECONDS",
    "SET_TIMER_STEP",
    "DATA_DIR",
    "DEFAULT_DB_PATH",
]
