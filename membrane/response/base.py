"""Collision response interface.

A response turns (rest state, prior state, collider pose) into the next
state. It returns new tensors and never writes into the grid, so the
integrator can commit or drop the whole step.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

import torch

from ..collider import Collider, Transform
from ..config import SimulationConfig
from ..grid import Grid


@dataclass
class ResponseResult:
    current: torch.Tensor
    velocity: Optional[torch.Tensor] = None
    # Points that the collider acted on this step (hit / pushed / projected).
    contacts: int = 0


def blend_rate(rate: float, frames: float) -> float:
    """Per-frame blend factor `rate` applied over `frames` frames."""
    if frames == 1.0:
        return float(rate)
    return 1.0 - (1.0 - float(rate)) ** float(frames)


def decay_factor(factor: float, frames: float) -> float:
    """Per-frame multiplicative decay applied over `frames` frames."""
    return float(factor) ** float(frames)


def collider_sphere(
    collider: Collider, pose: Transform, device: str | torch.device, dtype: torch.dtype
) -> Tuple[torch.Tensor, float]:
    """World-space (centre, radius) of the collider, exact for spheres and a bounding proxy for meshes."""
    center, radius = collider.shape.bounding_sphere(pose)
    return center.to(device=device, dtype=dtype), float(radius)


class CollisionResponse(ABC):
    """Per-point collider response, selected once at configuration time."""

    name: str = "base"
    uses_velocity: bool = False

    def __init__(self, config: SimulationConfig):
        self.cfg = config

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    @abstractmethod
    def apply(self, grid: Grid, collider: Collider, pose: Transform, frames: float) -> ResponseResult:
        raise NotImplementedError
