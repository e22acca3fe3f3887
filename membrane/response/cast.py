"""Directional cast push (velocity integrated).

Every point fires a probe ray from its current position along a fixed
direction. A hit pulls the point toward `-hit_distance`; a miss springs it
back toward rest. Velocity is damped every step and integrated with
semi-implicit Euler, so the surface can ring briefly after contact.

A step covering several reference frames is split into sub-steps of at most
one reference frame each, re-casting from the updated positions.
"""

from __future__ import annotations

import math

import torch

from ..collider import Collider, Transform
from ..grid import Grid
from .base import CollisionResponse, ResponseResult, decay_factor


def substeps(frames: float, limit: int) -> tuple[int, float]:
    """Split `frames` into (count, h) with h <= 1; time past `limit` frames is dropped."""
    frames = min(max(float(frames), 0.0), float(limit))
    # 3 * (1/60) * 60 is 3.0000000000000004; that is still three sub-steps
    count = max(1, math.ceil(frames - 1e-9))
    return count, frames / count


class CastPush(CollisionResponse):
    name = "cast"
    uses_velocity = True

    @property
    def probe_direction(self) -> tuple[float, float, float]:
        d = [float(c) for c in self.cfg.probe_direction]
        norm = math.sqrt(sum(c * c for c in d))
        return (d[0] / norm, d[1] / norm, d[2] / norm)

    def apply(self, grid: Grid, collider: Collider, pose: Transform, frames: float) -> ResponseResult:
        rest_z = grid.rest_view[:, 2]
        cur = grid.current.clone()
        vz = grid.velocity[:, 2].clone()
        dirs = torch.tensor(self.probe_direction, device=cur.device, dtype=cur.dtype).expand_as(cur)

        count, h = substeps(frames, self.cfg.max_substeps)
        decay = decay_factor(self.cfg.damping, h)
        hit = torch.zeros(cur.shape[0], dtype=torch.bool, device=cur.device)
        for _ in range(count):
            hit, dist = collider.shape.intersect(cur, dirs, pose, float(self.cfg.cast_range))
            dist = torch.where(hit, dist, torch.zeros_like(dist))

            z = cur[:, 2]
            force = torch.where(
                hit,
                (-dist - z) * float(self.cfg.attraction_rate),
                (rest_z - z) * float(self.cfg.restore_rate),
            )
            # v += F; v *= damping; z += v  (each scaled to h reference frames)
            vz = (vz + force * h) * decay
            cur[:, 2] = z + vz * h

        nxt_vel = torch.zeros_like(grid.velocity)
        nxt_vel[:, 2] = vz
        return ResponseResult(current=cur, velocity=nxt_vel, contacts=int(hit.sum()))
