from datetime import date

from backend.models import Exercise, ExerciseKind, Routine, RoutineExercise
from backend.routines import (
    find_active_routine,
    parse_target,
    rest_seconds_for,
    seed_log_exercise,
    seed_set,
)


def _routine(rid, start, end=None):
    return Routine(id=rid, name=rid, start_date=start, end_date=end)


def test_find_active_routine_by_date():
    routines = [
        _routine("old", "2024-01-01", "2024-02-01"),
        _routine("current", "2024-03-01", "2024-06-01"),
        _routine("newest", "2025-01-01"),
    ]
    assert find_active_routine(routines, date(2024, 4, 1)).id == "current"
    assert find_active_routine(routines, date(2025, 3, 1)).id == "newest"


def test_find_active_routine_falls_back_to_last():
    routines = [_routine("a", "2030-01-01"), _routine("b", "2031-01-01")]
    assert find_active_routine(routines, date(2024, 1, 1)).id == "b"
    assert find_active_routine([], date(2024, 1, 1)) is None


def test_parse_target():
    assert parse_target("8-12", 10) == 8
    assert parse_target("20", 10) == 20
    assert parse_target("", 10) == 10
    assert parse_target("max", 10) == 10
    assert parse_target("0", 10) == 10
    assert parse_target("22,5", 0) == 22.5


def test_seed_duration_set():
    plank = Exercise(id="p", name="Plank", kind=ExerciseKind.DURATION)
    s = seed_set(RoutineExercise(id="x", exercise_id="p", target_reps="45"), plank)
    assert s.reps == 45
    assert s.duration_seconds == 45
    assert seed_set(None, plank).duration_seconds == 60


def test_seed_log_exercise_counts():
    entry = seed_log_exercise(RoutineExercise(id="x", exercise_id="1", target_sets=5), None)
    assert len(entry.sets) == 5
    assert entry.sets[0].reps == 10
    entry = seed_log_exercise(RoutineExercise(id="x", exercise_id="1"), None)
    assert len(entry.sets) == 3


def test_rest_seconds_precedence():
    ex = Exercise(id="1", name="Squat", default_rest_seconds=150)
    assert rest_seconds_for(RoutineExercise(id="x", exercise_id="1", target_rest_seconds=45), ex) == 45
    assert rest_seconds_for(RoutineExercise(id="x", exercise_id="1"), ex) == 150
    assert rest_seconds_for(None, None) == 60
