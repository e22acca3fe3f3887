"""Rigid pose (+ uniform scale) of a collider."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import torch


def _as_vec3(value: Sequence[float] | torch.Tensor) -> torch.Tensor:
    t = torch.as_tensor(value, dtype=torch.float64).reshape(-1)
    if t.numel() != 3:
        raise ValueError(f"expected 3 components, got {t.numel()}")
    return t


@dataclass(frozen=True)
class Transform:
    """World pose: `world = position + scale * rotation @ local`.

    Stored in float64 on CPU; callers move the pieces to the grid's device
    when they build per-step tensors.
    """
    position: torch.Tensor
    rotation: Optional[torch.Tensor] = None
    scale: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _as_vec3(self.position))
        if self.rotation is not None:
            rot = torch.as_tensor(self.rotation, dtype=torch.float64)
            if rot.shape != (3, 3):
                raise ValueError(f"rotation must be 3x3, got {tuple(rot.shape)}")
            object.__setattr__(self, "rotation", rot)
        scale = float(self.scale)
        if not (scale > 0.0) or not math.isfinite(scale):
            raise ValueError(f"scale must be a positive finite number, got {self.scale!r}")
        object.__setattr__(self, "scale", scale)

    @classmethod
    def at(cls, x: float, y: float, z: float, *, scale: float = 1.0) -> "Transform":
        return cls(position=torch.tensor([x, y, z], dtype=torch.float64), scale=scale)

    @staticmethod
    def rotation_about(axis: Sequence[float], angle: float) -> torch.Tensor:
        """Rodrigues rotation matrix for `angle` radians about `axis`."""
        k = _as_vec3(axis)
        norm = float(torch.linalg.norm(k))
        if norm == 0.0:
            return torch.eye(3, dtype=torch.float64)
        kx, ky, kz = (float(c) / norm for c in k)
        K = torch.tensor(
            [[0.0, -kz, ky], [kz, 0.0, -kx], [-ky, kx, 0.0]],
            dtype=torch.float64,
        )
        return torch.eye(3, dtype=torch.float64) + math.sin(angle) * K + (1.0 - math.cos(angle)) * (K @ K)

    def with_position(self, position: Sequence[float] | torch.Tensor) -> "Transform":
        return Transform(position=_as_vec3(position), rotation=self.rotation, scale=self.scale)

    def center(self, device: str | torch.device, dtype: torch.dtype) -> torch.Tensor:
        return self.position.to(device=device, dtype=dtype)

    def to_local(self, points: torch.Tensor) -> torch.Tensor:
        """World points (..., 3) into the collider's local frame."""
        pos = self.position.to(device=points.device, dtype=points.dtype)
        local = points - pos
        if self.rotation is not None:
            # row vectors: (R^T p)^T = p^T R
            local = local @ self.rotation.to(device=points.device, dtype=points.dtype)
        return local / self.scale

    def to_local_direction(self, dirs: torch.Tensor) -> torch.Tensor:
        """World directions into local space. Lengths are divided by `scale`,
        so ray parameters stay valid in world units."""
        local = dirs
        if self.rotation is not None:
            local = local @ self.rotation.to(device=dirs.device, dtype=dirs.dtype)
        return local / self.scale

    def to_world(self, points: torch.Tensor) -> torch.Tensor:
        world = points * self.scale
        if self.rotation is not None:
            world = world @ self.rotation.to(device=points.device, dtype=points.dtype).T
        return world + self.position.to(device=points.device, dtype=points.dtype)
