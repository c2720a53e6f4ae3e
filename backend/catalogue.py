"""Bundled exercise catalogues."""

from __future__ import annotations

# Seeded the first time the exercise collection is read.
INITIAL_EXERCISES: list[dict] = [
    {"id": "1", "name": "Bench Press", "muscleGroup": "chest", "type": "weighted-reps"},
    {"id": "2", "name": "Squat", "muscleGroup": "legs", "type": "weighted-reps"},
    {"id": "3", "name": "Deadlift", "muscleGroup": "back", "type": "weighted-reps"},
    {"id": "4", "name": "Military Press", "muscleGroup": "shoulders", "type": "weighted-reps"},
    {"id": "5", "name": "Treadmill", "muscleGroup": "cardio", "type": "duration"},
]


def _ex(idx: int, name: str, group: str, kind: str, rest: int) -> dict:
    return {
        "id": f"def_{idx}",
        "name": name,
        "muscleGroup": group,
        "type": kind,
        "defaultRestSeconds": rest,
    }


# Merged on request by ``Repository.load_default_exercises``.
DEFAULT_EXERCISES: list[dict] = [
    _ex(1, "Barbell Bench Press", "chest", "weighted-reps", 120),
    _ex(2, "Incline Dumbbell Press", "chest", "weighted-reps", 90),
    _ex(3, "Cable Fly", "chest", "weighted-reps", 60),
    _ex(4, "Push-ups", "chest", "bodyweight", 60),
    _ex(5, "Dips", "chest", "bodyweight", 90),
    _ex(6, "Deadlift", "back", "weighted-reps", 180),
    _ex(7, "Pull-ups", "back", "bodyweight", 90),
    _ex(8, "Barbell Row", "back", "weighted-reps", 90),
    _ex(9, "Lat Pulldown", "back", "weighted-reps", 60),
    _ex(10, "Seated Cable Row", "back", "weighted-reps", 60),
    _ex(11, "Barbell Squat", "legs", "weighted-reps", 180),
    _ex(12, "Leg Press", "legs", "weighted-reps", 120),
    _ex(13, "Dumbbell Lunges", "legs", "weighted-reps", 90),
    _ex(14, "Leg Extension", "legs", "weighted-reps", 60),
    _ex(15, "Leg Curl", "legs", "weighted-reps", 60),
    _ex(16, "Calf Raise", "legs", "weighted-reps", 45),
    _ex(17, "Overhead Press", "shoulders", "weighted-reps", 120),
    _ex(18, "Lateral Raise", "shoulders", "weighted-reps", 60),
    _ex(19, "Face Pull", "shoulders", "weighted-reps", 60),
    _ex(20, "Arnold Press", "shoulders", "weighted-reps", 90),
    _ex(21, "Barbell Curl", "arms", "weighted-reps", 60),
    _ex(22, "Hammer Curl", "arms", "weighted-reps", 60),
    _ex(23, "Skull Crusher", "arms", "weighted-reps", 60),
    _ex(24, "Triceps Pushdown", "arms", "weighted-reps", 60),
    _ex(25, "Plank", "abs", "duration", 60),
    _ex(26, "Crunch", "abs", "bodyweight", 45),
    _ex(27, "Hanging Leg Raise", "abs", "bodyweight", 60),
    _ex(28, "Rowing Machine", "cardio", "duration", 60),
    _ex(29, "Jump Rope", "cardio", "duration", 60),
    _ex(30, "Burpees", "full-body", "bodyweight", 60),
]
