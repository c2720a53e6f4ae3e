"""Entity types persisted by the application.

Every entity is a small dataclass with ``to_dict``/``from_dict`` helpers.  The
dictionaries use the camelCase field names of the stored JSON documents, so
they are the on-disk contract shared with any backup or export tooling.
Optional fields are omitted from the dictionaries when unset.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MuscleGroup(str, Enum):
    CHEST = "chest"
    BACK = "back"
    LEGS = "legs"
    SHOULDERS = "shoulders"
    ARMS = "arms"
    ABS = "abs"
    CARDIO = "cardio"
    FULL_BODY = "full-body"
    OTHER = "other"


class ExerciseKind(str, Enum):
    WEIGHTED = "weighted-reps"
    DURATION = "duration"
    BODYWEIGHT = "bodyweight"


class SetType(str, Enum):
    NORMAL = "normal"
    WARMUP = "warmup"
    FAILURE = "failure"
    DROP = "drop"

    def next(self) -> "SetType":
        """Return the type following this one in the toggle cycle."""
        order = list(SetType)
        return order[(order.index(self) + 1) % len(order)]


_last_id = 0


def new_id() -> str:
    """Return a fresh identifier based on the current time in milliseconds.

    Identifiers handed out within the same millisecond are bumped so they
    stay unique.
    """
    global _last_id
    _last_id = max(int(time.time() * 1000), _last_id + 1)
    return str(_last_id)


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _drop_none(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


@dataclass
class Exercise:
    id: str
    name: str
    muscle_group: MuscleGroup = MuscleGroup.OTHER
    kind: ExerciseKind = ExerciseKind.WEIGHTED
    secondary_muscles: list[MuscleGroup] = field(default_factory=list)
    notes: str | None = None
    link: str | None = None
    default_rest_seconds: int | None = None

    @property
    def is_duration(self) -> bool:
        return self.kind is ExerciseKind.DURATION

    def to_dict(self) -> dict:
        return _drop_none(
            {
                "id": self.id,
                "name": self.name,
                "muscleGroup": self.muscle_group.value,
                "secondaryMuscles": [m.value for m in self.secondary_muscles]
                or None,
                "type": self.kind.value,
                "notes": self.notes,
                "link": self.link,
                "defaultRestSeconds": self.default_rest_seconds,
            }
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            muscle_group=MuscleGroup(data.get("muscleGroup", "other")),
            kind=ExerciseKind(data.get("type", ExerciseKind.WEIGHTED.value)),
            secondary_muscles=[
                MuscleGroup(m) for m in data.get("secondaryMuscles") or []
            ],
            notes=data.get("notes"),
            link=data.get("link"),
            default_rest_seconds=data.get("defaultRestSeconds"),
        )


@dataclass
class RoutineExercise:
    id: str
    exercise_id: str
    target_sets: int = 0
    target_reps: str = ""
    target_weight: str = ""
    target_rest_seconds: int | None = None
    is_superset: bool = False
    superset_group_id: str | None = None

    def to_dict(self) -> dict:
        return _drop_none(
            {
                "id": self.id,
                "exerciseId": self.exercise_id,
                "targetSets": self.target_sets,
                "targetReps": self.target_reps,
                "targetWeight": self.target_weight,
                "targetRestSeconds": self.target_rest_seconds,
                "isSuperset": self.is_superset,
                "supersetGroupId": self.superset_group_id,
            }
        )

    @classmethod
    def from_dict(cls, data: dict) -> "RoutineExercise":
        return cls(
            id=str(data["id"]),
            exercise_id=str(data["exerciseId"]),
            target_sets=int(data.get("targetSets") or 0),
            target_reps=str(data.get("targetReps") or ""),
            target_weight=str(data.get("targetWeight") or ""),
            target_rest_seconds=data.get("targetRestSeconds"),
            is_superset=bool(data.get("isSuperset", False)),
            superset_group_id=data.get("supersetGroupId"),
        )


@dataclass
class RoutineDay:
    id: str
    name: str
    exercises: list[RoutineExercise] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "exercises": [ex.to_dict() for ex in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RoutineDay":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            exercises=[
                RoutineExercise.from_dict(ex) for ex in data.get("exercises", [])
            ],
        )


@dataclass
class Routine:
    id: str
    name: str
    start_date: str
    end_date: str | None = None
    days: list[RoutineDay] = field(default_factory=list)

    def find_day(self, day_id: str) -> RoutineDay | None:
        return next((d for d in self.days if d.id == day_id), None)

    def to_dict(self) -> dict:
        return _drop_none(
            {
                "id": self.id,
                "name": self.name,
                "startDate": self.start_date,
                "endDate": self.end_date,
                "days": [d.to_dict() for d in self.days],
            }
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Routine":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            start_date=data.get("startDate", ""),
            end_date=data.get("endDate") or None,
            days=[RoutineDay.from_dict(d) for d in data.get("days", [])],
        )


@dataclass
class CompletedSet:
    reps: int = 0
    weight: float = 0.0
    duration_seconds: int = 0
    completed: bool = False
    type: SetType = SetType.NORMAL
    rpe: float | None = None

    def to_dict(self) -> dict:
        return _drop_none(
            {
                "reps": self.reps,
                "weight": self.weight,
                "durationSeconds": self.duration_seconds,
                "completed": self.completed,
                "type": self.type.value,
                "rpe": self.rpe,
            }
        )

    @classmethod
    def from_dict(cls, data: dict) -> "CompletedSet":
        return cls(
            reps=int(data.get("reps") or 0),
            weight=float(data.get("weight") or 0),
            duration_seconds=int(data.get("durationSeconds") or 0),
            completed=bool(data.get("completed", False)),
            type=SetType(data.get("type") or SetType.NORMAL.value),
            rpe=data.get("rpe") or None,
        )


@dataclass
class WorkoutLogExercise:
    exercise_id: str
    sets: list[CompletedSet] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "exerciseId": self.exercise_id,
            "sets": [s.to_dict() for s in self.sets],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutLogExercise":
        return cls(
            exercise_id=str(data["exerciseId"]),
            sets=[CompletedSet.from_dict(s) for s in data.get("sets", [])],
        )


@dataclass
class WorkoutLog:
    id: str
    date: str
    exercises: list[WorkoutLogExercise] = field(default_factory=list)
    routine_id: str | None = None
    routine_day_id: str | None = None
    duration_minutes: int = 0
    calories: float | None = None

    def to_dict(self) -> dict:
        return _drop_none(
            {
                "id": self.id,
                "date": self.date,
                "routineId": self.routine_id,
                "routineDayId": self.routine_day_id,
                "exercises": [ex.to_dict() for ex in self.exercises],
                "durationMinutes": self.duration_minutes,
                "calories": self.calories,
            }
        )

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutLog":
        return cls(
            id=str(data["id"]),
            date=data.get("date", ""),
            routine_id=data.get("routineId"),
            routine_day_id=data.get("routineDayId"),
            exercises=[
                WorkoutLogExercise.from_dict(ex) for ex in data.get("exercises", [])
            ],
            duration_minutes=int(data.get("durationMinutes") or 0),
            calories=data.get("calories"),
        )


# Circumference fields recorded in centimetres
MEASUREMENT_FIELDS = ("chest", "waist", "arms", "legs", "neck", "hips")


@dataclass
class BodyMeasurement:
    id: str
    date: str
    weight: float
    body_fat: float | None = None
    circumferences: dict[str, float] = field(default_factory=dict)
    custom_values: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "date": self.date,
            "weight": self.weight,
            "bodyFat": self.body_fat,
        }
        for name in MEASUREMENT_FIELDS:
            data[name] = self.circumferences.get(name)
        if self.custom_values:
            data["customValues"] = dict(self.custom_values)
        return _drop_none(data)

    @classmethod
    def from_dict(cls, data: dict) -> "BodyMeasurement":
        return cls(
            id=str(data["id"]),
            date=data.get("date", ""),
            weight=float(data["weight"]),
            body_fat=data.get("bodyFat"),
            circumferences={
                name: float(data[name])
                for name in MEASUREMENT_FIELDS
                if data.get(name) is not None
            },
            custom_values=dict(data.get("customValues") or {}),
        )


@dataclass
class ActiveSessionSnapshot:
    """Persisted copy of an in-progress workout used to resume after reload."""

    log: WorkoutLog
    active_routine_day: RoutineDay
    start_time: int  # epoch milliseconds
    routine_id: str | None = None
    day_id: str | None = None

    def to_dict(self) -> dict:
        return _drop_none(
            {
                "log": self.log.to_dict(),
                "activeRoutineDay": self.active_routine_day.to_dict(),
                "startTime": self.start_time,
                "routineId": self.routine_id,
                "dayId": self.day_id,
            }
        )

    @classmethod
    def from_dict(cls, data: dict) -> "ActiveSessionSnapshot":
        return cls(
            log=WorkoutLog.from_dict(data["log"]),
            active_routine_day=RoutineDay.from_dict(data["activeRoutineDay"]),
            start_time=int(data["startTime"]),
            routine_id=data.get("routineId"),
            day_id=data.get("dayId"),
        )
