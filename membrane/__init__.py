"""Membrane.

Deformable particle-surface simulation: an N×N grid of surface points that
reacts to a moving collider (sphere or triangle mesh) each frame.

This package contains:
- **Core** (`Grid`, `Collider`, response strategies, `Integrator`, `SurfaceOutput`)
- **Assembly** (`SimulationConfig`, `Simulation`, `presets`)
- **Runners** (`run_simulation`, `python -m membrane`)

Keep this module light; names resolve lazily so importing `membrane.grid`
does not pull in the whole package.
"""

from __future__ import annotations

__all__ = [
    "SimulationConfig",
    "Simulation",
    "Grid",
    "Collider",
    "Sphere",
    "Mesh",
    "Transform",
    "SurfaceOutput",
    "Integrator",
    "InvalidConfiguration",
    "ColliderUnavailable",
    "run_simulation",
]


def __getattr__(name: str):  # pragma: no cover
    if name == "SimulationConfig":
        from .config import SimulationConfig as _SimulationConfig

        return _SimulationConfig
    if name == "Simulation":
        from .simulation import Simulation as _Simulation

        return _Simulation
    if name == "Grid":
        from .grid import Grid as _Grid

        return _Grid
    if name in ("Collider", "Sphere", "Mesh", "Transform"):
        from . import collider as _collider

        return getattr(_collider, name)
    if name == "SurfaceOutput":
        from .output import SurfaceOutput as _SurfaceOutput

        return _SurfaceOutput
    if name == "Integrator":
        from .integrator import Integrator as _Integrator

        return _Integrator
    if name in ("InvalidConfiguration", "ColliderUnavailable"):
        from . import errors as _errors

        return getattr(_errors, name)
    if name == "run_simulation":
        from .simulator import run_simulation as _run_simulation

        return _run_simulation
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
