"""Keep the screen on while a workout is running.

On Android the activity window gets ``FLAG_KEEP_SCREEN_ON``.  Elsewhere the
lock is unavailable and requests simply report ``False``.  Failures are logged
and never interrupt a session.
"""

from __future__ import annotations

import logging

try:  # pragma: no cover - jnius is only available on Android
    from jnius import autoclass  # type: ignore
except Exception:  # pragma: no cover - allow import on non-Android
    autoclass = None  # type: ignore


# android.view.WindowManager.LayoutParams.FLAG_KEEP_SCREEN_ON
FLAG_KEEP_SCREEN_ON = 128


def _apply_keep_screen_on(enabled: bool) -> None:
    activity = autoclass("org.kivy.android.PythonActivity").mActivity
    window = activity.getWindow()
    if enabled:
        window.addFlags(FLAG_KEEP_SCREEN_ON)
    else:
        window.clearFlags(FLAG_KEEP_SCREEN_ON)


def _set_keep_screen_on(enabled: bool) -> None:
    # window flags may only be changed from the Android UI thread
    from android.runnable import run_on_ui_thread  # type: ignore

    run_on_ui_thread(_apply_keep_screen_on)(enabled)


class WakeLock:
    """Best-effort screen wake lock."""

    def __init__(self):
        self.held = False

    @property
    def available(self) -> bool:
        return autoclass is not None

    def request(self) -> bool:
        """Acquire the lock.  Returns ``True`` when the screen is kept on."""
        if not self.available:
            return False
        try:
            _set_keep_screen_on(True)
        except Exception:
            logging.exception("Wake lock request failed")
            return False
        self.held = True
        return True

    def release(self) -> None:
        if not self.held:
            return
        self.held = False
        try:
            _set_keep_screen_on(False)
        except Exception:
            logging.exception("Wake lock release failed")
