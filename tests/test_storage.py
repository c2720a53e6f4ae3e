import json

import pytest

from backend.kvstore import JsonFileStore, MemoryStore, SQLiteStore
from backend.models import BodyMeasurement, Exercise, ExerciseKind, MuscleGroup
from backend.storage import EXERCISE_KEY, Repository


@pytest.fixture(params=["memory", "sqlite", "json"])
def any_store(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteStore(tmp_path / "irontrack.db")
    if request.param == "json":
        return JsonFileStore(tmp_path / "kv")
    return MemoryStore()


def test_store_get_set_delete(any_store):
    assert any_store.get("missing") is None
    any_store.set("a", "1")
    any_store.set("a", "2")
    any_store.set("b", "x")
    assert any_store.get("a") == "2"
    assert any_store.keys() == ["a", "b"]
    any_store.delete("a")
    any_store.delete("a")
    assert any_store.get("a") is None


def test_sqlite_store_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "irontrack.db"
    SQLiteStore(path).set("k", "v")
    assert SQLiteStore(path).get("k") == "v"


def test_exercises_seeded_on_first_read(repo, store):
    names = [e.name for e in repo.get_exercises()]
    assert names == ["Bench Press", "Squat", "Deadlift", "Military Press", "Treadmill"]
    assert json.loads(store.get(EXERCISE_KEY))[0]["id"] == "1"


def test_save_and_delete_exercise(repo):
    exercises = repo.get_exercises()
    exercises.append(Exercise(id="x1", name="Zercher Squat", muscle_group=MuscleGroup.LEGS))
    repo.save_exercises(exercises)
    assert repo.get_exercise("x1").name == "Zercher Squat"
    remaining = repo.delete_exercise("x1")
    assert all(e.id != "x1" for e in remaining)
    assert repo.get_exercise("x1") is None


def test_load_default_exercises_skips_existing_names(repo):
    added = repo.load_default_exercises()
    # "Deadlift" is already in the initial catalogue
    assert added == 29
    assert repo.load_default_exercises() == 0
    plank = next(e for e in repo.get_exercises() if e.name == "Plank")
    assert plank.kind is ExerciseKind.DURATION
    assert plank.default_rest_seconds == 60


def test_workout_logs_append_and_delete(repo, make_session, push_routine):
    first = make_session(push_routine, "d1").finish()
    second = make_session(push_routine, "d1").finish()
    assert [l.id for l in repo.get_workout_logs()] == [first.id, second.id]
    repo.delete_workout_log(first.id)
    assert [l.id for l in repo.get_workout_logs()] == [second.id]


def test_measurements(repo):
    repo.save_measurements(
        [
            BodyMeasurement(id="1", date="2024-01-01", weight=80.5, circumferences={"waist": 84}),
            BodyMeasurement(id="2", date="2024-02-01", weight=79.0, body_fat=15.2),
        ]
    )
    stored = repo.get_measurements()
    assert stored[0].circumferences == {"waist": 84.0}
    assert stored[1].body_fat == 15.2
    assert [m.id for m in repo.delete_measurement(1)] == ["2"]


def test_profile_and_metric_configs(repo):
    assert repo.get_profile() == {}
    repo.save_profile({"name": "Sam", "height": 180})
    assert repo.get_profile()["height"] == 180
    repo.save_custom_metric_configs([{"id": "forearm", "label": "Forearm", "unit": "cm"}])
    assert repo.get_custom_metric_configs()[0]["unit"] == "cm"


def test_settings_defaults_and_updates(store):
    repo = Repository(store)
    assert repo.get_wake_lock_enabled() is True
    assert repo.get_volume() == 1.0
    assert repo.get_language() == "en"
    repo.save_volume(3)
    repo.save_wake_lock_enabled(False)
    repo.save_language("he")
    reloaded = Repository(store)
    assert reloaded.get_volume() == 1.0
    assert reloaded.get_wake_lock_enabled() is False
    assert reloaded.get_language() == "he"
    repo.save_volume(-1)
    assert Repository(store).get_volume() == 0.0


def test_corrupt_settings_fall_back_to_defaults(store):
    store.set("irontrack_settings", "[broken")
    repo = Repository(store)
    assert repo.get_volume() == 1.0
    assert json.loads(store.get("irontrack_settings"))[0]["key"] == "volume"


def test_active_session_absent(repo):
    assert repo.get_active_session() is None
    repo.clear_active_session()
