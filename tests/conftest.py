from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.kvstore import MemoryStore
from backend.models import Routine, RoutineDay, RoutineExercise
from backend.storage import Repository
from backend.workout_session import WorkoutSession

START = 1_700_000_000.0


class FakeEvent:
    def __init__(self, clock, callback, interval):
        self.clock = clock
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True
        if self in self.clock.events:
            self.clock.events.remove(self)


class FakeClock:
    """Stand-in for ``kivy.clock.Clock`` that advances only when told to.

    ``time`` doubles as the wall clock so elapsed time follows ``advance``.
    """

    def __init__(self, start: float = START):
        self.now = start
        self.events: list[FakeEvent] = []

    def schedule_interval(self, callback, interval):
        event = FakeEvent(self, callback, interval)
        self.events.append(event)
        return event

    def time(self) -> float:
        return self.now

    def advance(self, seconds: int = 1) -> None:
        for _ in range(int(seconds)):
            self.now += 1
            for event in list(self.events):
                if not event.cancelled:
                    event.callback(1.0)

    def sleep(self, seconds: float) -> None:
        """Move the wall clock without delivering any ticks."""
        self.now += seconds


class RecordingCuePlayer:
    def __init__(self):
        self.played: list[tuple[str, float]] = []

    def play_cue(self, kind: str, volume: float = 1.0) -> None:
        self.played.append((kind, volume))

    @property
    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.played]


class FakeWakeLock:
    def __init__(self):
        self.held = False
        self.requests = 0

    def request(self):
        self.requests += 1
        self.held = True
        return True

    def release(self):
        self.held = False


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def repo(store):
    return Repository(store)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cues():
    return RecordingCuePlayer()


@pytest.fixture
def wake_lock():
    return FakeWakeLock()


@pytest.fixture
def push_routine(repo) -> Routine:
    """Store and return a routine whose day has Bench Press and Treadmill."""
    routine = Routine(
        id="r1",
        name="Strength Block",
        start_date="2024-01-01",
        days=[
            RoutineDay(
                id="d1",
                name="Push Day",
                exercises=[
                    RoutineExercise(
                        id="re1",
                        exercise_id="1",
                        target_sets=3,
                        target_reps="10",
                        target_weight="50",
                        target_rest_seconds=90,
                    ),
                    RoutineExercise(
                        id="re2",
                        exercise_id="5",
                        target_sets=1,
                        target_reps="30",
                    ),
                ],
            )
        ],
    )
    repo.save_routines([routine])
    return routine


@pytest.fixture
def make_session(repo, clock, cues):
    """Return a factory creating sessions bound to the fake clock."""

    def factory(routine=None, day_id=None, **kwargs):
        kwargs.setdefault("cue_player", cues)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("now", clock.time)
        return WorkoutSession(repo, routine, day_id, **kwargs)

    return factory
