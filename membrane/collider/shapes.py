"""Collider shapes: analytic sphere and triangle mesh.

Both answer the same two questions for the response strategies:
- where and how big is the body (`bounding_sphere`)
- where does a batch of world-space rays first hit it (`intersect`)
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import torch

from ..errors import ColliderUnavailable, InvalidConfiguration
from .bvh import TriangleBVH
from .transform import Transform


class Sphere:
    """Sphere of `radius` (local units) centred on the pose position."""

    def __init__(self, radius: float):
        radius = float(radius)
        if not (radius > 0.0) or not math.isfinite(radius):
            raise InvalidConfiguration(f"sphere radius must be a positive finite number, got {radius!r}")
        self.radius = radius

    def __repr__(self) -> str:
        return f"Sphere(radius={self.radius})"

    @property
    def available(self) -> bool:
        return True

    def require(self) -> None:
        return None

    def bounding_radius(self, pose: Optional[Transform] = None) -> float:
        return self.radius * (pose.scale if pose is not None else 1.0)

    def bounding_sphere(self, pose: Optional[Transform] = None) -> Tuple[torch.Tensor, float]:
        if pose is None:
            return torch.zeros(3, dtype=torch.float64), self.radius
        return pose.position, self.bounding_radius(pose)

    def intersect(
        self, origins: torch.Tensor, dirs: torch.Tensor, pose: Transform, max_distance: float
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        """First surface crossing along unit `dirs`; origins inside hit the exit point."""
        center = pose.center(origins.device, origins.dtype)
        r = self.bounding_radius(pose)
        oc = origins - center
        b = (oc * dirs).sum(dim=-1)
        c = (oc * oc).sum(dim=-1) - r * r
        disc = b * b - c
        real = disc >= 0.0
        root = torch.sqrt(torch.clamp(disc, min=0.0))
        t_near = -b - root
        t_far = -b + root
        t = torch.where(t_near >= 0.0, t_near, t_far)
        hit = real & (t >= 0.0) & (t <= float(max_distance))
        return hit, torch.where(hit, t, torch.full_like(t, float("inf")))


class Mesh:
    """Triangle mesh collider with a persistent BVH.

    The BVH lives in the mesh's local frame; per-frame motion only changes the
    pose used to move rays into that frame. `load()` (a geometry change) is the
    only thing that rebuilds it.
    """

    def __init__(
        self,
        vertices: Optional[torch.Tensor] = None,
        faces: Optional[torch.Tensor] = None,
        *,
        leaf_size: int = 8,
    ):
        self.leaf_size = int(leaf_size)
        self.vertices: Optional[torch.Tensor] = None
        self.faces: Optional[torch.Tensor] = None
        self.bvh: Optional[TriangleBVH] = None
        self.geometry_version = 0
        self._device_key: Optional[tuple] = None
        self._device_bvh: Optional[TriangleBVH] = None
        if vertices is not None or faces is not None:
            if vertices is None or faces is None:
                raise InvalidConfiguration("mesh needs both vertices and faces")
            self.load(vertices, faces)

    @classmethod
    def pending(cls, *, leaf_size: int = 8) -> "Mesh":
        """A mesh whose geometry is still loading."""
        return cls(leaf_size=leaf_size)

    @classmethod
    def uv_sphere(cls, radius: float = 1.0, width_segments: int = 32, height_segments: int = 16) -> "Mesh":
        """Latitude/longitude sphere triangulation."""
        if width_segments < 3 or height_segments < 2:
            raise InvalidConfiguration("uv_sphere needs width_segments >= 3 and height_segments >= 2")
        phi = torch.linspace(0.0, 2.0 * math.pi, width_segments + 1, dtype=torch.float64)
        theta = torch.linspace(0.0, math.pi, height_segments + 1, dtype=torch.float64)
        th, ph = torch.meshgrid(theta, phi, indexing="ij")
        verts = torch.stack(
            [
                -radius * torch.cos(ph) * torch.sin(th),
                radius * torch.cos(th),
                radius * torch.sin(ph) * torch.sin(th),
            ],
            dim=-1,
        ).reshape(-1, 3)

        faces = []
        row = width_segments + 1
        for iy in range(height_segments):
            for ix in range(width_segments):
                a = iy * row + ix + 1
                b = iy * row + ix
                c = (iy + 1) * row + ix
                d = (iy + 1) * row + ix + 1
                if iy != 0:
                    faces.append((a, b, d))
                if iy != height_segments - 1:
                    faces.append((b, c, d))
        return cls(verts, torch.tensor(faces, dtype=torch.long))

    def __repr__(self) -> str:
        if not self.available:
            return "Mesh(pending)"
        return f"Mesh(vertices={self.vertices.shape[0]}, faces={self.faces.shape[0]})"

    @property
    def available(self) -> bool:
        return self.bvh is not None

    def require(self) -> None:
        if not self.available:
            raise ColliderUnavailable("mesh collider geometry has not been loaded")

    def load(self, vertices: torch.Tensor, faces: torch.Tensor) -> None:
        verts = torch.as_tensor(vertices, dtype=torch.float64).cpu()
        tris = torch.as_tensor(faces, dtype=torch.long).cpu()
        if verts.ndim != 2 or verts.shape[1] != 3 or verts.shape[0] < 3:
            raise InvalidConfiguration(f"vertices must have shape (V>=3, 3), got {tuple(verts.shape)}")
        if tris.ndim != 2 or tris.shape[1] != 3 or tris.shape[0] < 1:
            raise InvalidConfiguration(f"faces must have shape (F>=1, 3), got {tuple(tris.shape)}")
        if int(tris.min()) < 0 or int(tris.max()) >= verts.shape[0]:
            raise InvalidConfiguration("faces reference vertices out of range")
        if not torch.isfinite(verts).all():
            raise InvalidConfiguration("vertices contain non-finite values")

        self.vertices = verts
        self.faces = tris
        self.bvh = TriangleBVH(verts, tris, leaf_size=self.leaf_size)
        self.geometry_version += 1
        self._device_key = None
        self._device_bvh = None

    def unload(self) -> None:
        self.vertices = None
        self.faces = None
        self.bvh = None
        self._device_key = None
        self._device_bvh = None

    def bounds(self) -> Tuple[torch.Tensor, torch.Tensor]:
        self.require()
        return self.vertices.amin(dim=0), self.vertices.amax(dim=0)

    def normalized_scale(self, target: float = 2.0) -> float:
        """Uniform scale that makes the largest bounding-box side equal `target`."""
        lo, hi = self.bounds()
        extent = float((hi - lo).max())
        if extent <= 0.0:
            raise InvalidConfiguration("mesh bounding box is degenerate")
        return float(target) / extent

    def bounding_sphere(self, pose: Optional[Transform] = None) -> Tuple[torch.Tensor, float]:
        """(centre, radius) of a sphere around the bounding-box centre enclosing every vertex."""
        lo, hi = self.bounds()
        center = (lo + hi) * 0.5
        r = float(torch.linalg.norm(self.vertices - center, dim=-1).max())
        if pose is None:
            return center, r
        return pose.to_world(center[None])[0], r * pose.scale

    def bounding_radius(self, pose: Optional[Transform] = None) -> float:
        return self.bounding_sphere(pose)[1]

    def intersect(
        self, origins: torch.Tensor, dirs: torch.Tensor, pose: Transform, max_distance: float
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        self.require()
        key = (origins.device, origins.dtype, self.geometry_version)
        if self._device_key != key:
            self._device_bvh = self.bvh.to(origins.device, origins.dtype)
            self._device_key = key
        local_o = pose.to_local(origins)
        local_d = pose.to_local_direction(dirs)
        return self._device_bvh.intersect(local_o, local_d, max_distance)
