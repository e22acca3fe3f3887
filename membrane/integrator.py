"""Per-frame driver.

One `step()` = one rendered frame:
1. advance a stateful trajectory, then snapshot the collider pose once
2. let the configured response compute the next state for every point
3. drop non-finite values back to the prior state
4. commit to the grid and flag the output buffer
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import torch

from .collider import Collider, Transform
from .config import SimulationConfig
from .console import console
from .errors import ColliderUnavailable
from .grid import Grid
from .output import SurfaceOutput
from .response import CollisionResponse


@dataclass
class StepStats:
    """Statistics from a single simulation step."""
    frame: int
    elapsed: float
    delta: float
    skipped: bool = False
    contacts: int = 0
    non_finite: int = 0
    max_displacement: float = 0.0


class Integrator:
    def __init__(
        self,
        grid: Grid,
        collider: Collider,
        response: CollisionResponse,
        output: SurfaceOutput,
        *,
        config: SimulationConfig,
    ):
        self.grid = grid
        self.collider = collider
        self.response = response
        self.output = output
        self.cfg = config
        self.frame = 0
        self.closed = False
        self.last_stats: Optional[StepStats] = None
        self._warned_unavailable = False

    def close(self) -> None:
        """Stop stepping. Nothing runs in the background, so this is just a flag."""
        self.closed = True

    def step(self, elapsed: float, delta: float, pose: Optional[Transform] = None) -> StepStats:
        if self.closed:
            raise RuntimeError("integrator is closed")
        self.frame += 1
        elapsed = float(elapsed)
        delta = float(delta)

        try:
            self.collider.require()
        except ColliderUnavailable as err:
            if not self._warned_unavailable:
                console.warn("Collider unavailable, holding surface at rest", detail=str(err))
                self._warned_unavailable = True
            self.last_stats = StepStats(frame=self.frame, elapsed=elapsed, delta=delta, skipped=True)
            return self.last_stats

        if self._warned_unavailable:
            console.info("Collider available, resuming simulation")
            self._warned_unavailable = False

        frames = self.cfg.frames(delta)
        self.collider.advance(frames)
        snapshot = pose if pose is not None else self.collider.current_pose(elapsed)

        with torch.no_grad():
            result = self.response.apply(self.grid, self.collider, snapshot, frames)

            prior_cur = self.grid.current
            prior_vel = self.grid.velocity
            finite = torch.isfinite(result.current).all(dim=-1)
            new_vel = result.velocity if result.velocity is not None else prior_vel
            finite = finite & torch.isfinite(new_vel).all(dim=-1)
            non_finite = int((~finite).sum())
            if non_finite:
                new_cur = torch.where(finite[:, None], result.current, prior_cur)
                new_vel = torch.where(finite[:, None], new_vel, prior_vel)
            else:
                new_cur = result.current

            self.grid.commit(new_cur, new_vel)
            disp = self.grid.displacement().abs()
            max_disp = float(disp.max()) if disp.numel() else 0.0

        self.output.mark_dirty()
        self.last_stats = StepStats(
            frame=self.frame,
            elapsed=elapsed,
            delta=delta,
            contacts=result.contacts,
            non_finite=non_finite,
            max_displacement=max_disp,
        )
        return self.last_stats
