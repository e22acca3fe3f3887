"""Exception types raised by the membrane simulation.

- `InvalidConfiguration` is fatal and raised while building a simulation.
- `ColliderUnavailable` is recoverable: the integrator skips steps until the
  collider geometry shows up.
"""

from __future__ import annotations

__all__ = [
    "MembraneError",
    "InvalidConfiguration",
    "ColliderUnavailable",
]


class MembraneError(Exception):
    """Base class for all membrane errors."""


class InvalidConfiguration(MembraneError, ValueError):
    """Raised when a grid, collider or simulation config cannot be built."""


class ColliderUnavailable(MembraneError, RuntimeError):
    """Raised when a collider is queried before its geometry is loaded."""
