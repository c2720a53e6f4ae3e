"""Short synthesised audio cues for the workout timers.

Each cue is rendered once into a small WAV file inside the cache directory
and then played through Kivy's ``SoundLoader``.  Playback is fire-and-forget:
a missing audio backend or a broken file is logged and otherwise ignored so a
workout is never interrupted by sound problems.
"""

from __future__ import annotations

import array
import logging
import math
import wave
from pathlib import Path

from backend import DATA_DIR

SAMPLE_RATE = 22050

CUE_KINDS = ("tick", "start", "finish", "rest_finish", "test")

# Each cue is a list of segments:
#   (start, end, start_freq, end_freq, waveform, gain)
# Times are in seconds.  Gain decays linearly to silence over a segment.
CUES: dict[str, list[tuple[float, float, float, float, str, float]]] = {
    "tick": [(0.0, 0.1, 880.0, 880.0, "sine", 0.3)],
    "start": [(0.0, 0.3, 440.0, 880.0, "sine", 0.4)],
    "test": [(0.0, 0.3, 440.0, 880.0, "sine", 0.4)],
    "finish": [
        (0.0, 0.15, 523.25, 523.25, "triangle", 0.5),
        (0.15, 0.3, 659.25, 659.25, "triangle", 0.45),
        (0.3, 0.8, 783.99, 783.99, "triangle", 0.4),
    ],
    "rest_finish": [
        (0.0, 0.15, 600.0, 600.0, "square", 0.3),
        (0.25, 0.4, 600.0, 600.0, "square", 0.3),
    ],
}


def _oscillator(waveform: str, phase: float) -> float:
    """Return the sample of ``waveform`` at ``phase`` (in cycles)."""
    frac = phase % 1.0
    if waveform == "square":
        return 1.0 if frac < 0.5 else -1.0
    if waveform == "triangle":
        return 4.0 * abs(frac - 0.5) - 1.0
    return math.sin(2 * math.pi * frac)


def render_samples(kind: str) -> array.array:
    """Return 16-bit mono samples for the cue ``kind``."""
    segments = CUES[kind]
    length = max(end for _, end, *_ in segments)
    samples = array.array("h", [0] * int(length * SAMPLE_RATE))
    for start, end, f0, f1, waveform, gain in segments:
        first = int(start * SAMPLE_RATE)
        count = int((end - start) * SAMPLE_RATE)
        phase = 0.0
        for i in range(count):
            progress = i / count
            freq = f0 + (f1 - f0) * progress
            phase += freq / SAMPLE_RATE
            value = _oscillator(waveform, phase) * gain * (1.0 - progress)
            samples[first + i] = int(value * 32767)
    return samples


def render_cue(kind: str, path: Path) -> Path:
    """Write the cue ``kind`` to ``path`` as a WAV file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as fh:
        fh.setnchannels(1)
        fh.setsampwidth(2)
        fh.setframerate(SAMPLE_RATE)
        fh.writeframes(render_samples(kind).tobytes())
    return path


def _kivy_loader():
    from kivy.core.audio import SoundLoader

    return SoundLoader


class CuePlayer:
    """Play timer cues at a given volume.

    ``loader`` must provide ``load(path)`` returning an object with
    ``volume``, ``stop()`` and ``play()``; it defaults to Kivy's
    ``SoundLoader``.  Sounds are rendered and loaded lazily and cached.
    """

    def __init__(self, cache_dir: Path | None = None, loader=None):
        self.cache_dir = Path(cache_dir) if cache_dir else DATA_DIR / "sounds"
        self._loader = loader
        self._cache: dict[str, object] = {}

    # ------------------------------------------------------------------
    # Core helpers
    # ------------------------------------------------------------------
    def _load(self, kind: str):
        snd = self._cache.get(kind)
        if snd is None:
            path = self.cache_dir / f"{kind}.wav"
            if not path.exists():
                render_cue(kind, path)
            if self._loader is None:
                self._loader = _kivy_loader()
            snd = self._loader.load(str(path))
            self._cache[kind] = snd
        return snd

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def unlock(self) -> None:
        """Render and load every cue so the first playback has no delay."""
        for kind in CUE_KINDS:
            try:
                self._load(kind)
            except Exception:
                logging.exception("Could not prepare sound %s", kind)

    def play_cue(self, kind: str, volume: float = 1.0) -> None:
        """Play ``kind`` at ``volume`` (0..1).  Never raises on playback errors."""
        if kind not in CUES:
            raise ValueError(f"Unknown cue '{kind}'")
        if volume <= 0:
            return
        try:
            snd = self._load(kind)
            if snd:
                snd.volume = min(1.0, volume)
                snd.stop()
                snd.play()
        except Exception:
            logging.exception("Playing sound %s failed", kind)
