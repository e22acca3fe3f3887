"""Simple step-history instrument for simulation runs."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from .integrator import StepStats


class StateHistoryInstrument:
    """Capture per-step summaries for observer-side analysis.

    This instrument is intentionally minimal:
    - append snapshots to an in-memory list (`history`)
    - optional downsampling via `sample_every`
    - optional cap via `max_frames` (oldest frames are dropped)
    """

    def __init__(self, *, sample_every: int = 1, max_frames: Optional[int] = None) -> None:
        if sample_every < 1:
            raise ValueError(f"sample_every must be >= 1, got {sample_every}")
        self.sample_every = int(sample_every)
        self.max_frames = max_frames
        self.history: list[dict[str, Any]] = []

    def update(self, stats: StepStats) -> None:
        if stats.frame % self.sample_every:
            return
        self.history.append(asdict(stats))
        if self.max_frames is not None and len(self.history) > self.max_frames:
            del self.history[: len(self.history) - self.max_frames]

    def series(self, key: str) -> list[Any]:
        return [h[key] for h in self.history]

    def clear(self) -> None:
        self.history.clear()
