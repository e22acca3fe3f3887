"""Analytic proximity push.

Closed-form distance test against the collider centre. Points inside the
influence shell are set directly to a pushed depth; everything else blends
back toward rest. No velocity, so the return is non-oscillating.
"""

from __future__ import annotations

import torch

from ..collider import Collider, Transform
from ..grid import Grid
from .base import CollisionResponse, ResponseResult, blend_rate, collider_sphere


class AnalyticPush(CollisionResponse):
    name = "analytic"
    uses_velocity = False

    def influence_sphere(self, collider: Collider, pose: Transform, device, dtype) -> tuple[torch.Tensor, float]:
        """A configured influence radius is measured from the pose origin, else the collider bounds."""
        if self.cfg.influence_radius is not None:
            return pose.center(device, dtype), float(self.cfg.influence_radius)
        return collider_sphere(collider, pose, device, dtype)

    def apply(self, grid: Grid, collider: Collider, pose: Transform, frames: float) -> ResponseResult:
        rest = grid.rest_view
        cur = grid.current
        center, radius = self.influence_sphere(collider, pose, rest.device, rest.dtype)
        max_push = float(self.cfg.max_displacement)
        threshold = float(self.cfg.depth_threshold)
        band = float(self.cfg.band_depth)
        center_z = float(pose.position[2])

        dist = torch.linalg.norm(rest - center, dim=-1)
        shell = radius + max_push
        inside = dist < shell
        if not center_z > threshold:
            inside = torch.zeros_like(inside)

        # [FORMULA] push = clamp(((r + m - d) / m)^2, 0, 1)
        push = torch.clamp(((shell - dist) / max_push) ** 2, 0.0, 1.0)
        # [FORMULA] force = push * m * penetration, penetration = (C.z - h) / band in [0, 1]
        penetration = min(max((center_z - threshold) / band, 0.0), 1.0)
        pushed_z = rest[:, 2] + push * max_push * penetration

        k = blend_rate(self.cfg.stiffness, frames)
        relaxed_z = cur[:, 2] + (rest[:, 2] - cur[:, 2]) * k

        nxt = cur.clone()
        nxt[:, 2] = torch.where(inside, pushed_z, relaxed_z)
        return ResponseResult(current=nxt, velocity=torch.zeros_like(cur), contacts=int(inside.sum()))
