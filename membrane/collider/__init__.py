"""Collider shapes, poses and trajectories."""

from __future__ import annotations

from .body import Collider, Shape
from .bvh import TriangleBVH
from .shapes import Mesh, Sphere
from .trajectory import KeyframeTrajectory, SinusoidalTrajectory, StaticTrajectory, Trajectory
from .transform import Transform

__all__ = [
    "Collider",
    "Shape",
    "Sphere",
    "Mesh",
    "TriangleBVH",
    "Transform",
    "Trajectory",
    "StaticTrajectory",
    "SinusoidalTrajectory",
    "KeyframeTrajectory",
]
