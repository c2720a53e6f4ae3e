"""Personal records and "last time" lookups over the workout history."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, NamedTuple

from backend.models import CompletedSet, WorkoutLog


class PRStatus(NamedTuple):
    is_weight_pr: bool
    is_reps_pr: bool

    @property
    def is_pr(self) -> bool:
        return self.is_weight_pr or self.is_reps_pr


NO_PR = PRStatus(False, False)


def _completed_sets(
    logs: Iterable[WorkoutLog], exercise_id: str, exclude_log_id: str | None = None
) -> Iterable[CompletedSet]:
    for log in logs:
        if exclude_log_id is not None and log.id == exclude_log_id:
            continue
        for entry in log.exercises:
            if entry.exercise_id != exercise_id:
                continue
            for s in entry.sets:
                if s.completed:
                    yield s


def get_personal_record(
    logs: Iterable[WorkoutLog], exercise_id: str, exclude_log_id: str | None = None
) -> float:
    """Return the heaviest completed weight ever logged for ``exercise_id``."""
    return max(
        (s.weight for s in _completed_sets(logs, exercise_id, exclude_log_id)),
        default=0.0,
    )


def check_is_pr(
    logs: Iterable[WorkoutLog],
    exercise_id: str,
    weight: float,
    reps: int,
    exclude_log_id: str | None = None,
) -> PRStatus:
    """Compare a candidate set against the completed history.

    A weight PR beats the heaviest weight ever completed.  A reps PR matches
    that heaviest weight exactly and beats the most reps done at it.  Without
    a prior non-zero record nothing counts as a PR, so the first session of a
    new exercise never reports one.
    """
    history = list(_completed_sets(logs, exercise_id, exclude_log_id))
    max_weight = max((s.weight for s in history), default=0.0)
    if max_weight <= 0:
        return NO_PR
    max_reps_at_weight = max(
        (s.reps for s in history if s.weight == max_weight), default=0
    )
    is_weight_pr = weight > max_weight
    is_reps_pr = (
        weight == max_weight
        and max_reps_at_weight > 0
        and reps > max_reps_at_weight
    )
    return PRStatus(is_weight_pr, is_reps_pr)


def _log_time(log: WorkoutLog) -> datetime:
    try:
        return datetime.fromisoformat(log.date.replace("Z", "+00:00")).replace(
            tzinfo=None
        )
    except ValueError:
        return datetime.min


def logs_with_exercise(
    logs: Iterable[WorkoutLog], exercise_id: str, exclude_log_id: str | None = None
) -> list[WorkoutLog]:
    """Return logs containing ``exercise_id``, most recent first."""
    found = [
        log
        for log in logs
        if log.id != exclude_log_id
        and any(e.exercise_id == exercise_id for e in log.exercises)
    ]
    return sorted(found, key=_log_time, reverse=True)


def get_ghost_set(
    logs: Iterable[WorkoutLog],
    exercise_id: str,
    set_index: int,
    exclude_log_id: str | None = None,
) -> CompletedSet | None:
    """Return what was logged last time for the same exercise and set position.

    The most recent log containing the exercise is used.  When it has fewer
    sets than ``set_index + 1`` its last set is returned instead.
    """
    for log in logs_with_exercise(logs, exercise_id, exclude_log_id):
        entry = next(e for e in log.exercises if e.exercise_id == exercise_id)
        if not entry.sets:
            continue
        if 0 <= set_index < len(entry.sets):
            return entry.sets[set_index]
        return entry.sets[-1]
    return None


def last_session_summary(
    logs: Iterable[WorkoutLog], exercise_id: str, exclude_log_id: str | None = None
) -> str | None:
    """Describe the best set of the most recent session, e.g. ``"20kg x 10"``."""
    recent = logs_with_exercise(logs, exercise_id, exclude_log_id)
    if not recent:
        return None
    entry = next(e for e in recent[0].exercises if e.exercise_id == exercise_id)
    if not entry.sets:
        return None
    best = entry.sets[0]
    for s in entry.sets[1:]:
        if s.weight > best.weight:
            best = s
    if best.weight > 0:
        return f"{best.weight:g}kg x {best.reps}"
    if best.reps > 0:
        return f"{best.reps} reps"
    return None
