from backend.models import (
    ActiveSessionSnapshot,
    CompletedSet,
    Exercise,
    ExerciseKind,
    MuscleGroup,
    Routine,
    RoutineDay,
    RoutineExercise,
    SetType,
    WorkoutLog,
    WorkoutLogExercise,
    new_id,
)


def test_exercise_dict_uses_stored_names():
    ex = Exercise(
        id="7",
        name="Plank",
        muscle_group=MuscleGroup.ABS,
        kind=ExerciseKind.DURATION,
        secondary_muscles=[MuscleGroup.BACK],
        default_rest_seconds=45,
    )
    assert ex.to_dict() == {
        "id": "7",
        "name": "Plank",
        "muscleGroup": "abs",
        "secondaryMuscles": ["back"],
        "type": "duration",
        "defaultRestSeconds": 45,
    }
    assert ex.is_duration
    assert Exercise.from_dict(ex.to_dict()) == ex


def test_exercise_from_dict_defaults():
    ex = Exercise.from_dict({"id": 3, "name": "Row"})
    assert ex.id == "3"
    assert ex.muscle_group is MuscleGroup.OTHER
    assert ex.kind is ExerciseKind.WEIGHTED
    assert ex.secondary_muscles == []


def test_set_type_cycle():
    assert SetType.NORMAL.next() is SetType.WARMUP
    assert SetType.DROP.next() is SetType.NORMAL


def test_completed_set_zero_rpe_is_unset():
    s = CompletedSet.from_dict({"reps": "8", "weight": "40", "rpe": 0})
    assert s.reps == 8
    assert s.weight == 40.0
    assert s.rpe is None
    assert "rpe" not in s.to_dict()


def test_routine_find_day():
    routine = Routine.from_dict(
        {
            "id": "r",
            "name": "Block",
            "startDate": "2024-01-01",
            "endDate": "",
            "days": [
                {
                    "id": "d",
                    "name": "Pull",
                    "exercises": [
                        {"id": "e", "exerciseId": "2", "targetSets": 4, "targetReps": "6-8"}
                    ],
                }
            ],
        }
    )
    assert routine.end_date is None
    day = routine.find_day("d")
    assert day.exercises[0] == RoutineExercise(
        id="e", exercise_id="2", target_sets=4, target_reps="6-8"
    )
    assert routine.find_day("x") is None


def test_snapshot_dict_layout():
    snapshot = ActiveSessionSnapshot(
        log=WorkoutLog(
            id="l",
            date="2024-03-01T09:00:00",
            exercises=[WorkoutLogExercise("1", [CompletedSet(reps=5, weight=100)])],
        ),
        active_routine_day=RoutineDay(id="d", name="Free Workout"),
        start_time=1700000000000,
    )
    data = snapshot.to_dict()
    assert set(data) == {"log", "activeRoutineDay", "startTime"}
    assert data["log"]["exercises"][0]["sets"][0]["weight"] == 100
    assert ActiveSessionSnapshot.from_dict(data) == snapshot


def test_new_id_is_unique():
    ids = {new_id() for _ in range(50)}
    assert len(ids) == 50
