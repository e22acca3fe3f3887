"""Ready-made rigs for the three effects.

- `membrane`: a head-sized body pushing through a 200×200 membrane
- `drape`: a small sphere pressing into a 51×51 cloth
- `pull_through`: a pointer-driven sphere pulled through a 4×4 image plane
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional

from .collider import Collider, Mesh, SinusoidalTrajectory, Sphere
from .config import SimulationConfig
from .pull_through import PullThroughTrajectory
from .simulation import Simulation


def membrane_config(scale: float = 1.0, **overrides) -> SimulationConfig:
    base = SimulationConfig(
        grid_size=200,
        physical_size=10.0,
        response="analytic",
        influence_radius=1.5,
        max_displacement=2.0,
        stiffness=0.8,
        depth_threshold=-1.5,
        band_depth=3.0,
    ).scaled(scale)
    return replace(base, **overrides) if overrides else base


def membrane_trajectory(scale: float = 1.0) -> SinusoidalTrajectory:
    """10 s cycle, ±3·scale around z = -2·scale."""
    return SinusoidalTrajectory(amplitude=3.0 * scale, period=10.0, offset=-2.0 * scale, axis=2, scale=scale)


def membrane(mesh: Optional[Mesh] = None, *, target_size: float = 2.0, **overrides) -> Simulation:
    """Membrane rig. A loaded mesh sets the scene scale from its bounding box.

    Without a mesh the rig uses scale 1 and a unit sphere stand-in. A pending
    mesh starts at scale 1 and the rig is re-sized from the mesh bounds on the
    first step after it loads.
    """
    if mesh is None:
        return Simulation(membrane_config(1.0, **overrides), Collider(Sphere(1.0), membrane_trajectory(1.0)))
    if mesh.available:
        scale = mesh.normalized_scale(target_size)
        return Simulation(membrane_config(scale, **overrides), Collider(mesh, membrane_trajectory(scale)))

    def rescale(sim: Simulation) -> None:
        scale = mesh.normalized_scale(target_size)
        sim.collider.trajectory = membrane_trajectory(scale)
        sim.reconfigure(membrane_config(scale, **overrides))

    return Simulation(
        membrane_config(1.0, **overrides),
        Collider(mesh, membrane_trajectory(1.0)),
        on_collider_ready=rescale,
    )


def drape_config(**overrides) -> SimulationConfig:
    base = SimulationConfig(
        grid_size=51,
        physical_size=3.0,
        response="projection",
        relax_rate=0.1,
    )
    return replace(base, **overrides) if overrides else base


def drape(**overrides) -> Simulation:
    """Sphere of radius 0.5 swinging through the cloth: z = sin(t) * 0.5."""
    trajectory = SinusoidalTrajectory(amplitude=0.5, period=2.0 * math.pi, offset=0.0, axis=2)
    return Simulation(drape_config(**overrides), Collider(Sphere(0.5), trajectory))


def pull_through_config(**overrides) -> SimulationConfig:
    base = SimulationConfig(
        grid_size=64,
        physical_size=4.0,
        response="projection",
        relax_rate=0.1,
    )
    return replace(base, **overrides) if overrides else base


def pull_through(*, radius: float = 1.0, **overrides) -> Simulation:
    """Unit sphere behind the plane, driven by `sim.collider.trajectory` (move/press/release)."""
    trajectory = PullThroughTrajectory(radius=radius)
    return Simulation(pull_through_config(**overrides), Collider(Sphere(radius), trajectory))
