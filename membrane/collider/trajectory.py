"""Time → pose drivers for colliders.

The simulation core never animates the collider itself; it asks a trajectory
for the pose at the elapsed time it was handed.
"""

from __future__ import annotations

import math
from typing import Optional, Protocol, Sequence

import torch

from ..errors import InvalidConfiguration
from .transform import Transform


class Trajectory(Protocol):
    def __call__(self, elapsed: float) -> Transform: ...


class StaticTrajectory:
    """Collider that never moves."""

    def __init__(self, pose: Transform):
        self.pose = pose

    def __call__(self, elapsed: float) -> Transform:
        del elapsed
        return self.pose


class SinusoidalTrajectory:
    """Oscillation along one axis.

    position[axis] = offset + sin(2π * (t mod period) / period) * amplitude
    Other components come from `base`.
    """

    def __init__(
        self,
        *,
        amplitude: float,
        period: float,
        offset: float = 0.0,
        axis: int = 2,
        base: Sequence[float] = (0.0, 0.0, 0.0),
        rotation: Optional[torch.Tensor] = None,
        scale: float = 1.0,
    ):
        if not (float(period) > 0.0):
            raise InvalidConfiguration(f"period must be > 0, got {period!r}")
        if axis not in (0, 1, 2):
            raise InvalidConfiguration(f"axis must be 0, 1 or 2, got {axis!r}")
        self.amplitude = float(amplitude)
        self.period = float(period)
        self.offset = float(offset)
        self.axis = int(axis)
        self.base = tuple(float(c) for c in base)
        self.rotation = rotation
        self.scale = float(scale)

    def __call__(self, elapsed: float) -> Transform:
        progress = (float(elapsed) % self.period) / self.period
        value = math.sin(progress * math.pi * 2.0) * self.amplitude + self.offset
        pos = list(self.base)
        pos[self.axis] = value
        return Transform(position=torch.tensor(pos, dtype=torch.float64), rotation=self.rotation, scale=self.scale)


class KeyframeTrajectory:
    """Externally authored path, linearly interpolated and clamped at the ends."""

    def __init__(self, times: Sequence[float], positions: Sequence[Sequence[float]], *, scale: float = 1.0):
        t = torch.as_tensor(times, dtype=torch.float64).reshape(-1)
        p = torch.as_tensor(positions, dtype=torch.float64)
        if t.numel() == 0 or p.shape != (t.numel(), 3):
            raise InvalidConfiguration("keyframes need matching times (K,) and positions (K, 3)")
        if t.numel() > 1 and not bool((t[1:] > t[:-1]).all()):
            raise InvalidConfiguration("keyframe times must be strictly increasing")
        self.times = t
        self.positions = p
        self.scale = float(scale)

    def __call__(self, elapsed: float) -> Transform:
        t = float(elapsed)
        times = self.times
        if t <= float(times[0]):
            return Transform(position=self.positions[0], scale=self.scale)
        if t >= float(times[-1]):
            return Transform(position=self.positions[-1], scale=self.scale)
        hi = int(torch.searchsorted(times, torch.tensor([t], dtype=torch.float64), right=True)[0])
        lo = hi - 1
        w = (t - float(times[lo])) / (float(times[hi]) - float(times[lo]))
        pos = self.positions[lo] * (1.0 - w) + self.positions[hi] * w
        return Transform(position=pos, scale=self.scale)
