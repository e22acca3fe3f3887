"""Collision response strategies.

- `analytic`: closed-form proximity push (stateless)
- `cast`: ray-sampled push with damped velocity
- `projection`: project onto the collider surface (draping)
"""

from __future__ import annotations

from ..config import SimulationConfig, canonical_response
from .analytic import AnalyticPush
from .base import CollisionResponse, ResponseResult
from .cast import CastPush
from .projection import SurfaceProjection

RESPONSES: dict[str, type[CollisionResponse]] = {
    AnalyticPush.name: AnalyticPush,
    CastPush.name: CastPush,
    SurfaceProjection.name: SurfaceProjection,
}

__all__ = [
    "RESPONSES",
    "AnalyticPush",
    "CastPush",
    "CollisionResponse",
    "ResponseResult",
    "SurfaceProjection",
    "build_response",
]


def build_response(config: SimulationConfig) -> CollisionResponse:
    """Instantiate the strategy named by `config.response`."""
    return RESPONSES[canonical_response(config.response)](config)
