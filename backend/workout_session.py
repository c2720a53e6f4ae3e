"""The in-progress workout: draft log, timers and personal-record checks."""

from __future__ import annotations

import copy
import logging
import time
from datetime import datetime
from typing import Callable

from backend import DEFAULT_DURATION_SECONDS, SET_TIMER_STEP
from backend import records
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
from backend.routines import (
    adhoc_routine_exercise,
    rest_seconds_for,
    seed_log_exercise,
    seed_set,
    superset_groups,
)
from backend.timers import RestTimer, SessionClock, SetTimer, format_seconds

# Passed as ``set_index`` to :meth:`WorkoutSession.remove_set` to drop the
# whole exercise.
REMOVE_EXERCISE = -1

FREE_WORKOUT_NAME = "Free Workout"

# Editable set fields and the type each value is coerced to
SET_FIELDS: dict[str, type] = {
    "reps": int,
    "weight": float,
    "duration_seconds": int,
    "completed": bool,
    "type": SetType,
    "rpe": float,
}
NON_NEGATIVE_FIELDS = ("reps", "weight", "duration_seconds")


class WorkoutSession:
    """One active workout from start to finish or cancel.

    Every change to the draft log is written straight back to the repository
    as the active session snapshot, which is what allows the workout to be
    resumed after the application is closed.  The session also owns the rest
    timer, the per-set countdown and the elapsed-time clock.

    ``cue_player`` plays timer sounds, ``clock`` schedules the one-second
    timer ticks (Kivy's ``Clock`` when omitted), ``now`` returns wall-clock
    seconds, ``on_change`` is called after every state change and
    ``on_finish`` receives the saved log (or ``None`` on cancel) when the
    session ends.
    """

    def __init__(
        self,
        repository,
        routine: Routine | None = None,
        day_id: str | None = None,
        *,
        cue_player=None,
        clock=None,
        now: Callable[[], float] = time.time,
        wake_lock=None,
        on_change: Callable[[], None] | None = None,
        on_finish: Callable[[WorkoutLog | None], None] | None = None,
    ):
        """Build a fresh draft from ``routine``'s day ``day_id``.

        Without a routine an empty free-form day is used.
        """
        self.repository = repository
        if routine is not None and day_id is not None:
            day = routine.find_day(day_id)
            if day is None:
                raise ValueError(f"Day '{day_id}' not found in routine '{routine.name}'")
            day = copy.deepcopy(day)
        else:
            day = RoutineDay(id=new_id(), name=FREE_WORKOUT_NAME)

        self.routine_id = routine.id if routine is not None else None
        self.day_id = day_id if routine is not None else None
        self.active_routine_day = day
        self.start_time = int(now() * 1000)
        self._setup_runtime(cue_player, clock, now, wake_lock, on_change, on_finish)

        self.log = WorkoutLog(
            id=new_id(),
            date=datetime.fromtimestamp(now()).isoformat(timespec="seconds"),
            routine_id=self.routine_id,
            routine_day_id=self.day_id,
            exercises=[
                seed_log_exercise(rex, self.exercises_db.get(rex.exercise_id))
                for rex in day.exercises
            ],
        )
        self.save_recovery_state()
        logging.info("Started workout '%s' with %d exercises", day.name, len(day.exercises))

    def _setup_runtime(self, cue_player, clock, now, wake_lock, on_change, on_finish) -> None:
        self.cue_player = cue_player
        self.now = now
        self.wake_lock = wake_lock
        self.on_change = on_change
        self.on_finish = on_finish
        self.ended = False
        self.exercises_db: dict[str, Exercise] = {
            e.id: e for e in self.repository.get_exercises()
        }
        self.volume = self.repository.get_volume()
        # set whose completion armed the current rest countdown
        self._rest_origin: tuple[int, int] | None = None

        self.rest_timer = RestTimer(clock, on_cue=self._play, on_change=self._changed)
        self.set_timer = SetTimer(
            clock,
            on_cue=self._play,
            on_expire=self._on_set_timer_expired,
            on_change=self._changed,
        )
        self.session_clock = SessionClock(
            self.start_time, clock, now=now, on_tick=lambda _elapsed: self._changed()
        )
        self.session_clock.start()

        if self.wake_lock is not None and self.repository.get_wake_lock_enabled():
            try:
                self.wake_lock.request()
            except Exception:
                logging.exception("Wake lock unavailable")

    # ------------------------------------------------------------------
    # Construction from persisted state
    # ------------------------------------------------------------------

    @classmethod
    def from_snapshot(cls, repository, snapshot: ActiveSessionSnapshot, **runtime) -> "WorkoutSession":
        """Resume the session stored in ``snapshot`` verbatim."""
        obj = cls.__new__(cls)
        obj.repository = repository
        obj.log = snapshot.log
        obj.active_routine_day = snapshot.active_routine_day
        obj.start_time = snapshot.start_time
        obj.routine_id = snapshot.routine_id
        obj.day_id = snapshot.day_id
        obj._setup_runtime(
            runtime.get("cue_player"),
            runtime.get("clock"),
            runtime.get("now", time.time),
            runtime.get("wake_lock"),
            runtime.get("on_change"),
            runtime.get("on_finish"),
        )
        logging.info(
            "Resumed workout '%s' after %ss",
            obj.active_routine_day.name,
            obj.elapsed_seconds(),
        )
        return obj

    @classmethod
    def load_from_recovery(cls, repository, **runtime) -> "WorkoutSession | None":
        """Return the persisted session if there is one."""
        snapshot = repository.get_active_session()
        if snapshot is None:
            return None
        return cls.from_snapshot(repository, snapshot, **runtime)

    @classmethod
    def resume_or_start(
        cls, repository, routine: Routine | None = None, day_id: str | None = None, **runtime
    ) -> "WorkoutSession":
        """Resume a persisted session, or start ``routine``/``day_id`` fresh."""
        session = cls.load_from_recovery(repository, **runtime)
        if session is not None:
            return session
        return cls(repository, routine, day_id, **runtime)

    def to_snapshot(self) -> ActiveSessionSnapshot:
        return ActiveSessionSnapshot(
            log=self.log,
            active_routine_day=self.active_routine_day,
            start_time=self.start_time,
            routine_id=self.routine_id,
            day_id=self.day_id,
        )

    def save_recovery_state(self) -> None:
        """Persist the current draft as the active session snapshot."""
        if self.ended:
            return
        self.repository.save_active_session(self.to_snapshot())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _play(self, kind: str) -> None:
        if self.cue_player is not None:
            self.cue_player.play_cue(kind, self.volume)

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def _commit(self) -> None:
        self.save_recovery_state()
        self._changed()

    def _entry(self, exercise_index: int) -> WorkoutLogExercise:
        if not 0 <= exercise_index < len(self.log.exercises):
            raise IndexError("Invalid exercise index")
        return self.log.exercises[exercise_index]

    def _set(self, exercise_index: int, set_index: int) -> CompletedSet:
        entry = self._entry(exercise_index)
        if not 0 <= set_index < len(entry.sets):
            raise IndexError("Invalid exercise/set index")
        return entry.sets[set_index]

    def exercise(self, exercise_index: int) -> Exercise | None:
        """Return the library exercise at ``exercise_index``, if it still exists."""
        return self.exercises_db.get(self._entry(exercise_index).exercise_id)

    def routine_exercise(self, exercise_index: int) -> RoutineExercise | None:
        if 0 <= exercise_index < len(self.active_routine_day.exercises):
            return self.active_routine_day.exercises[exercise_index]
        return None

    def rest_seconds(self, exercise_index: int) -> int:
        return rest_seconds_for(
            self.routine_exercise(exercise_index), self.exercise(exercise_index)
        )

    def superset_members(self, exercise_index: int) -> list[int]:
        """Return the indices performed back-to-back with ``exercise_index``."""
        self._entry(exercise_index)
        for group in superset_groups(self.active_routine_day):
            if exercise_index in group:
                return group
        return [exercise_index]

    @property
    def exercises(self) -> list[WorkoutLogExercise]:
        return self.log.exercises

    # ------------------------------------------------------------------
    # Set editing
    # ------------------------------------------------------------------

    def update_set(self, exercise_index: int, set_index: int, field: str, value) -> None:
        """Overwrite one field of one set.

        Changing ``completed`` goes through :meth:`toggle_set` so records and
        the rest timer behave the same as a tap on the set.
        """
        if field not in SET_FIELDS:
            raise KeyError(f"Unknown set field '{field}'")
        target = self._set(exercise_index, set_index)
        if field == "completed":
            if bool(value) != target.completed:
                self.toggle_set(exercise_index, set_index)
            return
        if value is None and field == "rpe":
            coerced = None
        else:
            coerced = SET_FIELDS[field](value)
        if field in NON_NEGATIVE_FIELDS and coerced < 0:
            raise ValueError(f"{field} cannot be negative")
        setattr(target, field, coerced)
        self._commit()

    def add_set(self, exercise_index: int) -> int:
        """Append a set copying the last one and return its index."""
        entry = self._entry(exercise_index)
        if entry.sets:
            prev = entry.sets[-1]
        else:
            prev = seed_set(
                self.routine_exercise(exercise_index), self.exercise(exercise_index)
            )
        entry.sets.append(
            CompletedSet(
                reps=prev.reps,
                weight=prev.weight,
                duration_seconds=prev.duration_seconds,
                completed=False,
                type=prev.type,
            )
        )
        self._commit()
        return len(entry.sets) - 1

    def remove_set(self, exercise_index: int, set_index: int) -> None:
        """Delete a set; an exercise left without sets is removed as well.

        ``REMOVE_EXERCISE`` as ``set_index`` removes the whole exercise.
        """
        if set_index == REMOVE_EXERCISE:
            self._remove_exercise(exercise_index)
            self._commit()
            return
        entry = self._entry(exercise_index)
        self._set(exercise_index, set_index)
        del entry.sets[set_index]

        timer = self.set_timer
        if timer.active and timer.exercise_index == exercise_index:
            if timer.set_index == set_index:
                timer.cancel()
            elif timer.set_index > set_index:
                timer.set_index -= 1
        origin = self._rest_origin
        if origin and origin[0] == exercise_index:
            if origin[1] == set_index:
                self._rest_origin = None
            elif origin[1] > set_index:
                self._rest_origin = (exercise_index, origin[1] - 1)

        if not entry.sets:
            self._remove_exercise(exercise_index)
        self._commit()

    def _remove_exercise(self, exercise_index: int) -> None:
        self._entry(exercise_index)
        del self.log.exercises[exercise_index]
        if exercise_index < len(self.active_routine_day.exercises):
            del self.active_routine_day.exercises[exercise_index]

        timer = self.set_timer
        if timer.active:
            if timer.exercise_index == exercise_index:
                timer.cancel()
            elif timer.exercise_index > exercise_index:
                timer.exercise_index -= 1
        origin = self._rest_origin
        if origin:
            if origin[0] == exercise_index:
                self._rest_origin = None
            elif origin[0] > exercise_index:
                self._rest_origin = (origin[0] - 1, origin[1])

    def toggle_set_type(self, exercise_index: int, set_index: int) -> SetType:
        """Cycle normal, warmup, failure, drop and back to normal."""
        target = self._set(exercise_index, set_index)
        target.type = target.type.next()
        self._commit()
        return target.type

    # ------------------------------------------------------------------
    # Adding and replacing exercises
    # ------------------------------------------------------------------

    def _new_entry(self, exercise_id: str) -> WorkoutLogExercise:
        exercise = self.exercises_db.get(exercise_id)
        if exercise is None:
            raise KeyError(f"Unknown exercise '{exercise_id}'")
        return WorkoutLogExercise(exercise_id=exercise_id, sets=[seed_set(None, exercise)])

    def add_exercise(self, exercise_id: str) -> int:
        """Append ``exercise_id`` with one set and return its index."""
        entry = self._new_entry(exercise_id)
        # keep the day aligned with the log so rest settings resolve by index
        del self.active_routine_day.exercises[len(self.log.exercises):]
        self.log.exercises.append(entry)
        self.active_routine_day.exercises.append(adhoc_routine_exercise(exercise_id))
        self._commit()
        return len(self.log.exercises) - 1

    def replace_exercise(self, exercise_index: int, exercise_id: str) -> int:
        """Swap the exercise at ``exercise_index`` for ``exercise_id``."""
        self._entry(exercise_index)
        entry = self._new_entry(exercise_id)
        self.log.exercises[exercise_index] = entry
        routine_entry = adhoc_routine_exercise(exercise_id)
        if exercise_index < len(self.active_routine_day.exercises):
            self.active_routine_day.exercises[exercise_index] = routine_entry
        else:
            self.active_routine_day.exercises.append(routine_entry)
        if self.set_timer.active and self.set_timer.exercise_index == exercise_index:
            self.set_timer.cancel()
        if self._rest_origin and self._rest_origin[0] == exercise_index:
            self._rest_origin = None
        self._commit()
        return exercise_index

    def quick_create_exercise(
        self,
        name: str,
        muscle_group: MuscleGroup = MuscleGroup.OTHER,
        kind: ExerciseKind = ExerciseKind.WEIGHTED,
        replace_index: int | None = None,
    ) -> int:
        """Save a new library exercise and put it into the session.

        The exercise is appended, or substituted at ``replace_index``.
        Returns the index it occupies in the draft.
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Exercise name is required")
        exercise = Exercise(
            id=new_id(),
            name=name,
            muscle_group=MuscleGroup(muscle_group),
            kind=ExerciseKind(kind),
            notes="",
        )
        library = self.repository.get_exercises()
        library.append(exercise)
        self.repository.save_exercises(library)
        self.exercises_db[exercise.id] = exercise
        logging.info("Created exercise '%s' during workout", name)
        if replace_index is None:
            return self.add_exercise(exercise.id)
        return self.replace_exercise(replace_index, exercise.id)

    # ------------------------------------------------------------------
    # Completing sets and personal records
    # ------------------------------------------------------------------

    def toggle_set(self, exercise_index: int, set_index: int) -> records.PRStatus | None:
        """Flip a set's completed flag.

        Completing a set checks it for a personal record, plays the finish
        cue and starts the rest countdown.  Un-completing it cancels the rest
        countdown that the completion started.  Either way a set countdown
        running for this set is stopped.  Returns the record status when the
        set was completed, otherwise ``None``.
        """
        target = self._set(exercise_index, set_index)
        target.completed = not target.completed
        status = None
        if target.completed:
            status = self.check_is_pr(exercise_index, target.weight, target.reps)
            if status.is_pr:
                logging.info(
                    "New personal record on exercise %s: %skg x %s",
                    self.log.exercises[exercise_index].exercise_id,
                    target.weight,
                    target.reps,
                )
            self._play("finish")
            self._rest_origin = (exercise_index, set_index)
            self.rest_timer.start(self.rest_seconds(exercise_index))
        elif self._rest_origin == (exercise_index, set_index):
            self.rest_timer.cancel()
            self._rest_origin = None
        if self.set_timer.matches(exercise_index, set_index):
            self.set_timer.cancel()
        self._commit()
        return status

    def history(self) -> list[WorkoutLog]:
        """Return saved logs, never including this draft."""
        return [log for log in self.repository.get_workout_logs() if log.id != self.log.id]

    def check_is_pr(self, exercise_index: int, weight: float, reps: int) -> records.PRStatus:
        exercise_id = self._entry(exercise_index).exercise_id
        return records.check_is_pr(self.history(), exercise_id, weight, reps)

    def get_personal_record(self, exercise_index: int, history=None) -> float:
        if history is None:
            history = self.history()
        return records.get_personal_record(history, self._entry(exercise_index).exercise_id)

    def is_record_weight(self, exercise_index: int, set_index: int, history=None) -> bool:
        """Return ``True`` if the set's weight reaches the all-time record.

        ``history`` may be passed in by callers checking many sets so the
        saved logs are only loaded once.
        """
        record = self.get_personal_record(exercise_index, history)
        return record > 0 and self._set(exercise_index, set_index).weight >= record

    def get_ghost_set(
        self, exercise_index: int, set_index: int, history=None
    ) -> CompletedSet | None:
        if history is None:
            history = self.history()
        return records.get_ghost_set(
            history, self._entry(exercise_index).exercise_id, set_index
        )

    def last_session_summary(self, exercise_index: int, history=None) -> str | None:
        if history is None:
            history = self.history()
        return records.last_session_summary(
            history, self._entry(exercise_index).exercise_id
        )

    # ------------------------------------------------------------------
    # Rest timer
    # ------------------------------------------------------------------

    def start_rest(self, seconds: int) -> None:
        self._rest_origin = None
        self.rest_timer.start(seconds)

    def adjust_rest(self, delta: int) -> None:
        self.rest_timer.adjust(delta)

    def skip_rest(self) -> None:
        self.rest_timer.skip()

    def minimize_rest(self) -> None:
        self.rest_timer.minimize()

    def restore_rest(self) -> None:
        self.rest_timer.restore()

    # ------------------------------------------------------------------
    # Set countdown (duration exercises)
    # ------------------------------------------------------------------

    def start_set_timer(self, exercise_index: int, set_index: int, seconds: int | None = None) -> None:
        """Start counting down the set, replacing any other set countdown."""
        target = self._set(exercise_index, set_index)
        if seconds is None:
            seconds = target.duration_seconds or target.reps or DEFAULT_DURATION_SECONDS
        if seconds <= 0:
            return
        self._play("start")
        self.set_timer.start(exercise_index, set_index, seconds)

    def adjust_set_timer(self, direction: int) -> None:
        """Add or remove one step of seconds from the running set countdown."""
        step = SET_TIMER_STEP if direction > 0 else -SET_TIMER_STEP
        self.set_timer.adjust(step)

    def cancel_set_timer(self) -> None:
        """Stop the set countdown without completing the set."""
        self.set_timer.cancel()

    def finish_set_timer_early(self) -> None:
        """Stop the countdown and complete the set with the time done so far."""
        if not self.set_timer.active:
            return
        ex_idx, set_idx = self.set_timer.exercise_index, self.set_timer.set_index
        elapsed = self.set_timer.elapsed()
        self.set_timer.cancel()
        if elapsed <= 0:
            return
        target = self._set(ex_idx, set_idx)
        target.duration_seconds = elapsed
        if not target.completed:
            self.toggle_set(ex_idx, set_idx)
        else:
            self._commit()

    def _on_set_timer_expired(self, exercise_index: int, set_index: int, total: int) -> None:
        if self.ended:
            return
        try:
            target = self._set(exercise_index, set_index)
        except IndexError:
            logging.warning("Set countdown expired for a removed set")
            return
        target.duration_seconds = total
        if target.completed:
            self._commit()
        else:
            self.toggle_set(exercise_index, set_index)

    def resync_timers(self, paused_seconds: float) -> None:
        """Catch the countdowns up after the app was paused for a while.

        Interval ticks are not delivered while the app is suspended; the
        elapsed clock needs no correction because it reads the wall clock.
        """
        seconds = int(paused_seconds)
        if seconds <= 0:
            return
        self.rest_timer.fast_forward(seconds)
        self.set_timer.fast_forward(seconds)

    # ------------------------------------------------------------------
    # Elapsed time
    # ------------------------------------------------------------------

    def elapsed_seconds(self) -> int:
        return self.session_clock.elapsed_seconds()

    def formatted_elapsed(self) -> str:
        return format_seconds(self.elapsed_seconds())

    # ------------------------------------------------------------------
    # Ending the session
    # ------------------------------------------------------------------

    def _shutdown(self) -> None:
        self.ended = True
        self.rest_timer.cancel()
        self.set_timer.cancel()
        self.session_clock.stop()
        if self.wake_lock is not None:
            try:
                self.wake_lock.release()
            except Exception:
                logging.exception("Wake lock release failed")

    def finish(self, calories: float | None = None) -> WorkoutLog:
        """Store the draft as a finished log and drop the snapshot."""
        if self.ended:
            raise RuntimeError("Workout already ended")
        self.log.duration_minutes = self.elapsed_seconds() // 60
        if calories is not None:
            self.log.calories = calories
        self.repository.save_workout_log(self.log)
        self.repository.clear_active_session()
        self._shutdown()
        logging.info(
            "Finished workout '%s' after %d minutes",
            self.active_routine_day.name,
            self.log.duration_minutes,
        )
        if self.on_finish is not None:
            self.on_finish(self.log)
        return self.log

    def cancel(self) -> None:
        """Discard the draft without saving a log."""
        if self.ended:
            return
        self.repository.clear_active_session()
        self._shutdown()
        logging.info("Cancelled workout '%s'", self.active_routine_day.name)
        if self.on_finish is not None:
            self.on_finish(None)

    def summary(self) -> str:
        """Return a formatted text summary of the session."""
        lines = [f"Workout: {self.active_routine_day.name}"]
        lines.append(f"Date: {self.log.date}")
        lines.append(f"Duration: {self.formatted_elapsed()}")
        for entry in self.log.exercises:
            exercise = self.exercises_db.get(entry.exercise_id)
            lines.append(f"\n{exercise.name if exercise else entry.exercise_id}")
            for idx, s in enumerate(entry.sets, 1):
                mark = "x" if s.completed else " "
                if exercise is not None and exercise.is_duration:
                    detail = format_seconds(s.duration_seconds)
                else:
                    detail = f"{s.weight:g}kg x {s.reps}"
                kind = "" if s.type is SetType.NORMAL else f" ({s.type.value})"
                lines.append(f"  [{mark}] Set {idx}: {detail}{kind}")
        return "\n".join(lines)
