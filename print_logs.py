import sys

from backend import DEFAULT_DB_PATH
from backend.kvstore import SQLiteStore
from backend.storage import Repository
from backend.timers import format_seconds


def main(db_path=DEFAULT_DB_PATH):
    repo = Repository(SQLiteStore(db_path))
    exercises = {e.id: e for e in repo.get_exercises()}

    for log in reversed(repo.get_workout_logs()):
        print(f"\n=== Workout: {log.date} ===")
        print(f"Duration: {log.duration_minutes} min")
        if log.calories:
            print(f"Calories: {log.calories:g}")

        for entry in log.exercises:
            exercise = exercises.get(entry.exercise_id)
            print(f"\n  Exercise: {exercise.name if exercise else entry.exercise_id}")
            for number, s in enumerate(entry.sets, 1):
                status = "done" if s.completed else "skipped"
                print(f"    Set {number} ({s.type.value}, {status}):")
                if exercise is not None and exercise.is_duration:
                    print(f"      Time:   {format_seconds(s.duration_seconds)}")
                else:
                    print(f"      Weight: {s.weight:g} kg")
                    print(f"      Reps:   {s.reps}")
                if s.rpe:
                    print(f"      RPE:    {s.rpe:g}")

    snapshot = repo.get_active_session()
    if snapshot:
        print(f"\nActive workout in progress: {snapshot.active_routine_day.name}")


if __name__ == "__main__":
    main(*sys.argv[1:])
