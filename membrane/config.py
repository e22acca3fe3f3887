"""Simulation configuration.

One frozen dataclass holds every tuning constant of the membrane. Building a
`Simulation` validates it; changing any value means building a new one.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

import torch

from .errors import InvalidConfiguration
from .runtime import get_device

__all__ = [
    "RESPONSE_ALIASES",
    "RATE_MODES",
    "PROJECTION_MODES",
    "SimulationConfig",
    "canonical_response",
]

RESPONSE_ALIASES: dict[str, str] = {
    "analytic": "analytic",
    "analyticpush": "analytic",
    "cast": "cast",
    "castpush": "cast",
    "projection": "projection",
    "surfaceprojection": "projection",
}

RATE_MODES: tuple[str, ...] = ("per_frame", "normalized")
PROJECTION_MODES: tuple[str, ...] = ("depth", "radial")


def canonical_response(name: str) -> str:
    """Map `AnalyticPush`, `cast_push`, `projection`, ... to a canonical id."""
    key = str(name).replace("_", "").replace("-", "").lower()
    try:
        return RESPONSE_ALIASES[key]
    except KeyError:
        raise InvalidConfiguration(
            f"unknown response strategy {name!r}; expected one of "
            f"{sorted(set(RESPONSE_ALIASES.values()))}"
        ) from None


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration for the membrane simulation."""

    # Grid
    grid_size: int = 200
    physical_size: float = 10.0

    # Strategy selection: analytic | cast | projection
    response: str = "analytic"

    # Analytic push
    # [CHOICE] influence radius separate from the collider's visual radius
    # [REASON] the pushing volume is tuned independently of what is drawn
    # [NOTES] None falls back to the sphere radius or the mesh bounding radius.
    influence_radius: Optional[float] = None
    max_displacement: float = 2.0
    stiffness: float = 0.8
    # [CHOICE] depth gate + interaction band exposed as parameters
    # [REASON] the reference values were tuned to one asset's scale
    depth_threshold: float = -1.5
    band_depth: float = 3.0

    # Cast push
    probe_direction: tuple[float, float, float] = (0.0, 0.0, -1.0)
    cast_range: float = 10.0
    attraction_rate: float = 0.1
    restore_rate: float = 0.05
    damping: float = 0.99

    # Surface projection
    relax_rate: float = 0.1
    projection_mode: str = "depth"

    # Time stepping
    # [CHOICE] normalized by default
    # [FORMULA] frames = delta * reference_frame_rate; k' = 1 - (1 - k)^frames
    # [NOTES] per_frame reproduces the fixed per-frame constants exactly.
    rate_mode: str = "normalized"
    reference_frame_rate: float = 60.0
    # [CHOICE] velocity strategies sub-step at most one reference frame at a time
    # [REASON] semi-implicit Euler is only stable for gain * h^2 < 4
    # [NOTES] a slow frame longer than max_substeps reference frames drops the excess time.
    max_substeps: int = 16

    # Device
    device: str = field(default_factory=get_device)
    dtype: torch.dtype = torch.float32

    # Profiling
    profile_enabled: bool = False
    profile_warmup_steps: int = 10
    profile_output_dir: Path = field(default_factory=lambda: Path("artifacts/profiles"))

    def __post_init__(self) -> None:
        object.__setattr__(self, "response", canonical_response(self.response))
        self.validate()

    def validate(self) -> None:
        for name in ("grid_size", "max_substeps"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
        if self.grid_size < 2:
            raise InvalidConfiguration(f"grid_size must be >= 2, got {self.grid_size!r}")
        if self.max_substeps < 1:
            raise InvalidConfiguration(f"max_substeps must be >= 1, got {self.max_substeps!r}")
        physical_size = float(self.physical_size)
        if not (physical_size > 0.0) or not math.isfinite(physical_size):
            raise InvalidConfiguration(f"physical_size must be a positive finite number, got {self.physical_size!r}")
        if self.influence_radius is not None and not (float(self.influence_radius) > 0.0):
            raise InvalidConfiguration(f"influence_radius must be > 0, got {self.influence_radius!r}")

        for name in ("max_displacement", "band_depth", "cast_range", "reference_frame_rate"):
            value = float(getattr(self, name))
            if not (value > 0.0) or not math.isfinite(value):
                raise InvalidConfiguration(f"{name} must be a positive finite number, got {value!r}")
        for name in ("stiffness", "relax_rate", "attraction_rate", "restore_rate"):
            value = float(getattr(self, name))
            if not (0.0 <= value <= 1.0):
                raise InvalidConfiguration(f"{name} must lie in [0, 1], got {value!r}")
        if not (0.0 < float(self.damping) < 1.0):
            raise InvalidConfiguration(f"damping must lie in (0, 1), got {self.damping!r}")

        if len(self.probe_direction) != 3:
            raise InvalidConfiguration("probe_direction must have three components")
        norm = math.sqrt(sum(float(c) * float(c) for c in self.probe_direction))
        if not (norm > 0.0) or not math.isfinite(norm):
            raise InvalidConfiguration(f"probe_direction must be non-zero, got {self.probe_direction!r}")

        if self.rate_mode not in RATE_MODES:
            raise InvalidConfiguration(f"rate_mode must be one of {RATE_MODES}, got {self.rate_mode!r}")
        if self.projection_mode not in PROJECTION_MODES:
            raise InvalidConfiguration(
                f"projection_mode must be one of {PROJECTION_MODES}, got {self.projection_mode!r}"
            )

    @property
    def torch_device(self) -> torch.device:
        return torch.device(self.device)

    def frames(self, delta: float) -> float:
        """Number of reference frames represented by a step of `delta` seconds."""
        if self.rate_mode == "per_frame":
            return 1.0
        delta = float(delta)
        if not math.isfinite(delta) or delta <= 0.0:
            return 0.0
        return delta * float(self.reference_frame_rate)

    def scaled(self, scale: float) -> "SimulationConfig":
        """Scale every length-like parameter by `scale`.

        The membrane scene derives a single scale from the collider asset's
        bounding box and sizes the whole rig from it.
        """
        scale = float(scale)
        if not (scale > 0.0) or not math.isfinite(scale):
            raise InvalidConfiguration(f"scale must be a positive finite number, got {scale!r}")
        return replace(
            self,
            physical_size=self.physical_size * scale,
            influence_radius=None if self.influence_radius is None else self.influence_radius * scale,
            max_displacement=self.max_displacement * scale,
            depth_threshold=self.depth_threshold * scale,
            band_depth=self.band_depth * scale,
            cast_range=self.cast_range * scale,
        )
