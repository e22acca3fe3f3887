"""Assembled simulation: grid + collider + response + integrator + output."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np

from .collider import Collider, Transform
from .config import SimulationConfig
from .grid import Grid
from .integrator import Integrator, StepStats
from .output import SurfaceOutput
from .response import CollisionResponse, build_response


class Simulation:
    """Ephemeral per-session membrane simulation.

    The host render loop calls `step(elapsed, delta)` once per frame and
    uploads `output.buffer` whenever `output.needs_update` is set. Tearing
    down is simply a matter of no longer calling `step`.

    `on_collider_ready(sim)` runs once, on the first step that finds the
    collider available. Rigs sized from a still-loading asset use it to
    `reconfigure` themselves.
    """

    def __init__(
        self,
        config: SimulationConfig,
        collider: Collider,
        *,
        on_collider_ready: Optional[Callable[["Simulation"], None]] = None,
    ):
        self.collider = collider
        self._on_collider_ready = on_collider_ready
        self._build(config)

    def _build(self, config: SimulationConfig) -> None:
        self.cfg = config
        self.grid = Grid.create(
            config.grid_size,
            config.physical_size,
            device=config.device,
            dtype=config.dtype,
        )
        self.response: CollisionResponse = build_response(config)
        self.output = SurfaceOutput(self.grid)
        self.integrator = Integrator(self.grid, self.collider, self.response, self.output, config=config)

    def __repr__(self) -> str:
        return (
            f"Simulation(grid={self.cfg.grid_size}x{self.cfg.grid_size}, "
            f"response={self.response.name}, collider={self.collider!r})"
        )

    @property
    def frame(self) -> int:
        return self.integrator.frame

    def reconfigure(self, config: SimulationConfig) -> None:
        """Rebuild grid, response and output for `config`. The surface restarts at rest."""
        previous = self.integrator
        self._build(config)
        self.integrator.frame = previous.frame
        self.integrator.closed = previous.closed

    def step(self, elapsed: float, delta: float, pose: Optional[Transform] = None) -> StepStats:
        if self._on_collider_ready is not None and not self.integrator.closed and self.collider.available:
            hook, self._on_collider_ready = self._on_collider_ready, None
            hook(self)
        return self.integrator.step(elapsed, delta, pose)

    def reset(self) -> None:
        self.grid.reset()
        self.output.mark_dirty()

    def close(self) -> None:
        self.integrator.close()

    @property
    def buffer(self) -> np.ndarray:
        return self.output.buffer

    def cut_mask(self) -> Optional[np.ndarray]:
        """Per-point cut-away flags for trajectories that cut the surface, else None."""
        cut = getattr(self.collider.trajectory, "cut_mask", None)
        if cut is None:
            return None
        return cut(self.grid.current).cpu().numpy()
