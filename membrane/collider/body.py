"""Collider = shape + trajectory."""

from __future__ import annotations

from typing import Optional, Union

from .shapes import Mesh, Sphere
from .trajectory import StaticTrajectory, Trajectory
from .transform import Transform

Shape = Union[Sphere, Mesh]


class Collider:
    """A moving body the surface reacts to. Read-only from the simulation's side."""

    def __init__(self, shape: Shape, trajectory: Optional[Trajectory] = None):
        self.shape = shape
        self.trajectory: Trajectory = trajectory if trajectory is not None else StaticTrajectory(Transform.at(0.0, 0.0, 0.0))

    def __repr__(self) -> str:
        return f"Collider(shape={self.shape!r}, trajectory={type(self.trajectory).__name__})"

    @property
    def is_sphere(self) -> bool:
        return isinstance(self.shape, Sphere)

    @property
    def available(self) -> bool:
        return self.shape.available

    def require(self) -> None:
        self.shape.require()

    def current_pose(self, elapsed: float) -> Transform:
        return self.trajectory(float(elapsed))

    def advance(self, frames: float) -> None:
        """Let a stateful trajectory (pointer-driven, ...) move forward by `frames` reference frames."""
        advance = getattr(self.trajectory, "advance", None)
        if advance is not None:
            advance(frames)
