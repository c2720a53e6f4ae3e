"""Routine helpers: picking the active routine and seeding a workout draft."""

from __future__ import annotations

from datetime import date

from backend import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_REPS,
    DEFAULT_REST_DURATION,
    DEFAULT_SETS_PER_EXERCISE,
)
from backend.models import (
    CompletedSet,
    Exercise,
    Routine,
    RoutineDay,
    RoutineExercise,
    SetType,
    WorkoutLogExercise,
    new_id,
)


def _to_date(value: str) -> date:
    return date.fromisoformat(value[:10])


def is_routine_active(routine: Routine, today: date) -> bool:
    """Return ``True`` if ``today`` falls within the routine's date range."""
    if not routine.start_date:
        return False
    if today < _to_date(routine.start_date):
        return False
    return not routine.end_date or today <= _to_date(routine.end_date)


def find_active_routine(routines: list[Routine], today: date | None = None) -> Routine | None:
    """Return the routine running today.

    When no routine covers ``today`` the most recently created one (the last
    in the stored order) is used.
    """
    today = today or date.today()
    for routine in routines:
        if is_routine_active(routine, today):
            return routine
    return routines[-1] if routines else None


def parse_target(value: str | None, default: float = 0) -> float:
    """Return the lower bound of a target such as ``"8-12"`` or ``"20"``."""
    if not value:
        return default
    head = str(value).split("-")[0].strip().replace(",", ".")
    try:
        parsed = float(head)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def seed_set(routine_exercise: RoutineExercise | None, exercise: Exercise | None) -> CompletedSet:
    """Return a fresh set pre-filled from the routine targets."""
    reps_target = routine_exercise.target_reps if routine_exercise else ""
    weight_target = routine_exercise.target_weight if routine_exercise else ""
    if exercise is not None and exercise.is_duration:
        seconds = int(parse_target(reps_target, DEFAULT_DURATION_SECONDS))
        return CompletedSet(
            reps=seconds,
            weight=parse_target(weight_target, 0.0),
            duration_seconds=seconds,
            completed=False,
            type=SetType.NORMAL,
        )
    return CompletedSet(
        reps=int(parse_target(reps_target, DEFAULT_REPS)),
        weight=parse_target(weight_target, 0.0),
        completed=False,
        type=SetType.NORMAL,
    )


def seed_log_exercise(
    routine_exercise: RoutineExercise, exercise: Exercise | None
) -> WorkoutLogExercise:
    """Build the draft entry for one routine exercise."""
    count = routine_exercise.target_sets or DEFAULT_SETS_PER_EXERCISE
    return WorkoutLogExercise(
        exercise_id=routine_exercise.exercise_id,
        sets=[seed_set(routine_exercise, exercise) for _ in range(count)],
    )


def adhoc_routine_exercise(exercise_id: str) -> RoutineExercise:
    """Routine entry for an exercise added during a session."""
    return RoutineExercise(
        id=new_id(),
        exercise_id=exercise_id,
        target_sets=DEFAULT_SETS_PER_EXERCISE,
        target_rest_seconds=DEFAULT_REST_DURATION,
        is_superset=False,
    )


def rest_seconds_for(
    routine_exercise: RoutineExercise | None, exercise: Exercise | None
) -> int:
    """Rest after a set: routine setting, then exercise default, then 60."""
    if routine_exercise is not None and routine_exercise.target_rest_seconds:
        return int(routine_exercise.target_rest_seconds)
    if exercise is not None and exercise.default_rest_seconds:
        return int(exercise.default_rest_seconds)
    return DEFAULT_REST_DURATION


def superset_groups(day: RoutineDay) -> list[list[int]]:
    """Return runs of contiguous exercise indices sharing a superset group."""
    groups: list[list[int]] = []
    current: list[int] = []
    current_id = None
    for idx, ex in enumerate(day.exercises):
        group_id = ex.superset_group_id if ex.is_superset else None
        if group_id is not None and group_id == current_id:
            current.append(idx)
            continue
        if len(current) > 1:
            groups.append(current)
        current = [idx] if group_id is not None else []
        current_id = group_id
    if len(current) > 1:
        groups.append(current)
    return groups
