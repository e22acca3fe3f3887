"""Frame clocks.

The simulation never reads the wall clock itself. Whoever drives `step()`
owns a clock and passes `(elapsed, delta)` in.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Tuple


class ManualClock:
    """Deterministic clock advanced explicitly (tests, headless runs)."""

    def __init__(self, frame_rate: float = 60.0, start: float = 0.0):
        if not (float(frame_rate) > 0.0):
            raise ValueError(f"frame_rate must be > 0, got {frame_rate!r}")
        self.frame_rate = float(frame_rate)
        self.elapsed = float(start)
        self.frame = 0

    @property
    def frame_delta(self) -> float:
        return 1.0 / self.frame_rate

    def tick(self, delta: Optional[float] = None) -> Tuple[float, float]:
        """Advance by `delta` (default one frame) and return `(elapsed, delta)`."""
        dt = self.frame_delta if delta is None else float(delta)
        self.elapsed += dt
        self.frame += 1
        return self.elapsed, dt


class WallClock:
    """Monotonic wall clock for interactive hosts."""

    def __init__(self, source: Callable[[], float] = time.perf_counter):
        self._source = source
        self._start: Optional[float] = None
        self._last: Optional[float] = None
        self.frame = 0

    @property
    def elapsed(self) -> float:
        if self._start is None or self._last is None:
            return 0.0
        return self._last - self._start

    def tick(self, delta: Optional[float] = None) -> Tuple[float, float]:
        del delta
        now = float(self._source())
        if self._start is None:
            self._start = now
            self._last = now
        dt = now - self._last
        self._last = now
        self.frame += 1
        return now - self._start, dt
