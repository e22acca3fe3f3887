"""Image-sphere pull-through effect.

A sphere follows the pointer behind an image plane. Holding the pointer
raises `progress` toward 1, which drives the sphere forward and grows the
hole cut in the plane; releasing lowers it again.
"""

from __future__ import annotations

import torch

from .collider import Transform

# [CHOICE] progress change per reference frame while held / released
PULL_RATE = 0.01


class PullThroughTrajectory:
    """Pointer-driven collider pose.

    `pointer` is in normalised device coordinates ([-1, 1] on both axes).
    The integrator calls `advance(frames)` once per step before reading the
    pose, so the pose depends only on the stored state and is consistent
    within a frame.
    """

    def __init__(
        self,
        *,
        reach: float = 2.0,
        rest_depth: float = -2.0,
        travel: float = 2.0,
        rate: float = PULL_RATE,
        radius: float = 1.0,
    ):
        self.reach = float(reach)
        self.rest_depth = float(rest_depth)
        self.travel = float(travel)
        self.rate = float(rate)
        self.radius = float(radius)
        self.pointer = (0.0, 0.0)
        self.held = False
        self.progress = 0.0

    def move(self, x: float, y: float) -> None:
        self.pointer = (float(x), float(y))

    def press(self) -> None:
        self.held = True

    def release(self) -> None:
        self.held = False

    def advance(self, frames: float = 1.0) -> float:
        step = self.rate * float(frames)
        if self.held:
            self.progress = min(self.progress + step, 1.0)
        else:
            self.progress = max(self.progress - step, 0.0)
        return self.progress

    def pose(self) -> Transform:
        px, py = self.pointer
        return Transform.at(px * self.reach, py * self.reach, self.rest_depth + self.progress * self.travel)

    def __call__(self, elapsed: float) -> Transform:
        del elapsed
        return self.pose()

    def cut_mask(self, points: torch.Tensor) -> torch.Tensor:
        """Surface points cut away at the current pose and progress."""
        center = self.pose().center(points.device, points.dtype)
        return pull_through_mask(points, center, self.radius, self.progress)


def pull_threshold(radius: float, progress: float) -> float:
    """mix(2r, -r, progress): cut-away distance around the sphere centre."""
    p = min(max(float(progress), 0.0), 1.0)
    return 2.0 * radius * (1.0 - p) + (-radius) * p


def pull_through_mask(points: torch.Tensor, center: torch.Tensor, radius: float, progress: float) -> torch.Tensor:
    """True for surface points cut away (drawn on the sphere instead of the plane)."""
    center = torch.as_tensor(center, device=points.device, dtype=points.dtype)
    dist = torch.linalg.norm(points - center, dim=-1)
    return dist < pull_threshold(radius, progress)
