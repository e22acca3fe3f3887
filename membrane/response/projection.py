"""Surface projection (draping cloth).

Points whose rest position falls inside the collider are placed on its
surface; the rest ease back toward their rest position with a fixed blend.
"""

from __future__ import annotations

import torch

from ..collider import Collider, Transform
from ..grid import Grid
from .base import CollisionResponse, ResponseResult, blend_rate, collider_sphere

# [CHOICE] minimum |rest - centre| for radial projection
# [REASON] below this the direction is undefined; the point stays put for the step
_MIN_RADIAL = 1e-9


class SurfaceProjection(CollisionResponse):
    name = "projection"
    uses_velocity = False

    def apply(self, grid: Grid, collider: Collider, pose: Transform, frames: float) -> ResponseResult:
        rest = grid.rest_view
        cur = grid.current
        center, radius = collider_sphere(collider, pose, rest.device, rest.dtype)

        diff = rest - center
        dist = torch.linalg.norm(diff, dim=-1)
        inside = dist < radius

        k = blend_rate(self.cfg.relax_rate, frames)
        relaxed = cur + (rest - cur) * k

        if self.cfg.projection_mode == "radial":
            ok = dist > _MIN_RADIAL
            unit = diff / torch.where(ok, dist, torch.ones_like(dist))[:, None]
            projected = torch.where(ok[:, None], center + unit * radius, cur)
        else:
            # Solve |p - c| = r for z with x, y held at rest.
            planar = diff[:, 0] ** 2 + diff[:, 1] ** 2
            depth = torch.sqrt(torch.clamp(radius * radius - planar, min=0.0))
            side = torch.where(diff[:, 2] >= 0.0, torch.ones_like(depth), -torch.ones_like(depth))
            projected = rest.clone()
            projected[:, 2] = center[2] + side * depth

        nxt = torch.where(inside[:, None], projected, relaxed)
        return ResponseResult(current=nxt, velocity=torch.zeros_like(cur), contacts=int(inside.sum()))
