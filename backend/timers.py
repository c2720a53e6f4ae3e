"""Countdown timers used during an active workout.

All timers run on a scheduler with the interface of ``kivy.clock.Clock``:
``schedule_interval(callback, seconds)`` returns an event with ``cancel()``.
Kivy's clock is used unless another scheduler is passed in.  Callbacks run on
the same thread as the rest of the UI, so no locking is needed.

Each timer owns at most one scheduled event.  Starting a timer cancels the
previous event first; scheduling while an event is still live is an error.
"""

from __future__ import annotations

import time
from typing import Callable

TICK_INTERVAL = 1.0

# Remaining seconds at or below which a tick cue plays every second
TICK_CUE_THRESHOLD = 4


def format_seconds(seconds: int) -> str:
    """Return ``seconds`` as ``m:ss``."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


def _default_clock():
    from kivy.clock import Clock

    return Clock


def _ignore(*_args) -> None:
    pass


class _IntervalTimer:
    def __init__(self, clock=None):
        self._clock = clock
        self._event = None

    @property
    def running(self) -> bool:
        return self._event is not None

    def _schedule(self) -> None:
        if self._event is not None:
            raise RuntimeError("timer already has a live interval")
        if self._clock is None:
            self._clock = _default_clock()
        self._event = self._clock.schedule_interval(self._tick, TICK_INTERVAL)

    def _unschedule(self) -> None:
        if self._event is not None:
            self._event.cancel()
            self._event = None

    def _tick(self, dt) -> None:  # pragma: no cover - overridden
        raise NotImplementedError


class RestTimer(_IntervalTimer):
    """Single-shot rest countdown that can be re-armed at any time.

    ``on_cue`` receives ``"tick"`` for each of the last seconds and
    ``"rest_finish"`` once when the countdown runs out by itself.
    """

    def __init__(
        self,
        clock=None,
        on_cue: Callable[[str], None] = _ignore,
        on_change: Callable[[], None] = _ignore,
    ):
        super().__init__(clock)
        self.on_cue = on_cue
        self.on_change = on_change
        self.remaining = 0
        self.total = 0
        self.is_minimized = False

    @property
    def active(self) -> bool:
        return self.running

    @property
    def state(self) -> dict | None:
        """Return ``{remaining, total, isMinimized}`` or ``None`` when idle."""
        if not self.active:
            return None
        return {
            "remaining": self.remaining,
            "total": self.total,
            "isMinimized": self.is_minimized,
        }

    def start(self, seconds: int) -> None:
        if seconds <= 0:
            return
        self._unschedule()
        self.remaining = int(seconds)
        self.total = int(seconds)
        self.is_minimized = False
        self._schedule()
        self.on_change()

    def _tick(self, dt) -> None:
        self.remaining -= 1
        if self.remaining <= 0:
            self._clear()
            self.on_cue("rest_finish")
        elif self.remaining <= TICK_CUE_THRESHOLD:
            self.on_cue("tick")
        self.on_change()

    def adjust(self, delta: int) -> None:
        """Add ``delta`` seconds.  Reaching zero cancels without a cue."""
        if not self.active:
            return
        self.remaining = max(0, self.remaining + int(delta))
        if self.remaining == 0:
            self._clear()
        else:
            self.total = max(self.total, self.remaining)
        self.on_change()

    def minimize(self) -> None:
        if self.active:
            self.is_minimized = True
            self.on_change()

    def restore(self) -> None:
        if self.active:
            self.is_minimized = False
            self.on_change()

    def cancel(self) -> None:
        if self.active:
            self._clear()
            self.on_change()

    skip = cancel

    def fast_forward(self, seconds: int) -> None:
        """Account for ``seconds`` that passed without ticks being delivered."""
        if not self.active or seconds <= 0:
            return
        self.remaining -= int(seconds)
        if self.remaining <= 0:
            self._clear()
            self.on_cue("rest_finish")
        self.on_change()

    def _clear(self) -> None:
        self._unschedule()
        self.remaining = 0
        self.total = 0
        self.is_minimized = False


class SetTimer(_IntervalTimer):
    """Countdown for one duration-based set.

    When the countdown runs out ``on_expire(exercise_index, set_index, total)``
    is called exactly once.  Only one set countdown exists at a time.
    """

    def __init__(
        self,
        clock=None,
        on_cue: Callable[[str], None] = _ignore,
        on_expire: Callable[[int, int, int], None] = _ignore,
        on_change: Callable[[], None] = _ignore,
    ):
        super().__init__(clock)
        self.on_cue = on_cue
        self.on_expire = on_expire
        self.on_change = on_change
        self.exercise_index: int | None = None
        self.set_index: int | None = None
        self.remaining = 0
        self.total = 0

    @property
    def active(self) -> bool:
        return self.running

    @property
    def state(self) -> dict | None:
        if not self.active:
            return None
        return {
            "exerciseIndex": self.exercise_index,
            "setIndex": self.set_index,
            "remaining": self.remaining,
            "total": self.total,
        }

    def matches(self, exercise_index: int, set_index: int) -> bool:
        return (
            self.active
            and self.exercise_index == exercise_index
            and self.set_index == set_index
        )

    def start(self, exercise_index: int, set_index: int, seconds: int) -> None:
        if seconds <= 0:
            return
        self._unschedule()
        self.exercise_index = exercise_index
        self.set_index = set_index
        self.remaining = int(seconds)
        self.total = int(seconds)
        self._schedule()
        self.on_change()

    def _tick(self, dt) -> None:
        if self.remaining <= 1:
            ex_idx, set_idx, total = self.exercise_index, self.set_index, self.total
            self._clear()
            self.on_cue("rest_finish")
            self.on_expire(ex_idx, set_idx, total)
        else:
            self.remaining -= 1
            if self.remaining <= TICK_CUE_THRESHOLD:
                self.on_cue("tick")
        self.on_change()

    def adjust(self, delta: int) -> None:
        """Add ``delta`` seconds, never going below zero.

        Zero does not expire immediately; the next tick does.
        """
        if not self.active:
            return
        self.remaining = max(0, self.remaining + int(delta))
        self.total = max(self.total, self.remaining)
        self.on_change()

    def elapsed(self) -> int:
        return max(0, self.total - self.remaining) if self.active else 0

    def cancel(self) -> None:
        if self.active:
            self._clear()
            self.on_change()

    def fast_forward(self, seconds: int) -> None:
        if not self.active or seconds <= 0:
            return
        self.remaining = max(0, self.remaining - int(seconds))
        self.on_change()

    def _clear(self) -> None:
        self._unschedule()
        self.exercise_index = None
        self.set_index = None
        self.remaining = 0
        self.total = 0


class SessionClock(_IntervalTimer):
    """Wall-clock stopwatch for the whole session.

    Elapsed time is always ``now - start_time`` so it keeps counting while the
    application is in the background.  ``start_time`` is in epoch
    milliseconds.
    """

    def __init__(
        self,
        start_time: int,
        clock=None,
        now: Callable[[], float] = time.time,
        on_tick: Callable[[int], None] = _ignore,
    ):
        super().__init__(clock)
        self.start_time = start_time
        self.now = now
        self.on_tick = on_tick

    def elapsed_seconds(self) -> int:
        return max(0, int(self.now() - self.start_time / 1000))

    def formatted(self) -> str:
        return format_seconds(self.elapsed_seconds())

    def start(self) -> None:
        self._unschedule()
        self._schedule()

    def stop(self) -> None:
        self._unschedule()

    def _tick(self, dt) -> None:
        self.on_tick(self.elapsed_seconds())
