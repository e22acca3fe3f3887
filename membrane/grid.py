"""Regular N×N lattice of surface points.

Point `i` lives at lattice coordinate `(row, col) = divmod(i, N)`. The same
ordering is used by `faces()` so a renderer can triangulate the buffer
without any reindexing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import torch

from .errors import InvalidConfiguration


@dataclass
class Grid:
    """Rest / current / velocity state of every surface point.

    All three tensors have shape (N*N, 3). `rest` is fixed at construction;
    only the integrator replaces `current` and `velocity` (via `commit`).
    """
    grid_size: int
    physical_size: float
    _rest: torch.Tensor
    current: torch.Tensor
    velocity: torch.Tensor

    @classmethod
    def create(
        cls,
        grid_size: int,
        physical_size: float,
        *,
        device: str | torch.device = "cpu",
        dtype: torch.dtype = torch.float32,
    ) -> "Grid":
        if isinstance(grid_size, bool) or not isinstance(grid_size, int) or grid_size < 2:
            raise InvalidConfiguration(f"grid_size must be an integer >= 2, got {grid_size!r}")
        if not (float(physical_size) > 0.0):
            raise InvalidConfiguration(f"physical_size must be > 0, got {physical_size!r}")
        n = int(grid_size)
        size = float(physical_size)

        # x = (col / (N-1) - 0.5) * S, y = (row / (N-1) - 0.5) * S
        ticks = (torch.arange(n, device=device, dtype=torch.float64) / (n - 1) - 0.5) * size
        rows, cols = torch.meshgrid(ticks, ticks, indexing="ij")
        rest = torch.stack(
            [cols.reshape(-1), rows.reshape(-1), torch.zeros(n * n, device=device, dtype=torch.float64)],
            dim=-1,
        ).to(dtype)

        return cls(
            grid_size=n,
            physical_size=size,
            _rest=rest,
            current=rest.clone(),
            velocity=torch.zeros_like(rest),
        )

    @property
    def num_points(self) -> int:
        return self.grid_size * self.grid_size

    @property
    def device(self) -> torch.device:
        return self._rest.device

    @property
    def dtype(self) -> torch.dtype:
        return self._rest.dtype

    @property
    def rest(self) -> torch.Tensor:
        """Read-only view of the rest positions (a copy; writes do not stick)."""
        return self._rest.clone()

    @property
    def rest_view(self) -> torch.Tensor:
        """Rest positions without copying. Callers must not write into it."""
        return self._rest

    def reset(self) -> None:
        self.current = self._rest.clone()
        self.velocity = torch.zeros_like(self._rest)

    def commit(self, current: torch.Tensor, velocity: Optional[torch.Tensor] = None) -> None:
        """Replace the mutable state in one go."""
        if current.shape != self._rest.shape:
            raise ValueError(f"current must have shape {tuple(self._rest.shape)}, got {tuple(current.shape)}")
        if velocity is not None and velocity.shape != self._rest.shape:
            raise ValueError(f"velocity must have shape {tuple(self._rest.shape)}, got {tuple(velocity.shape)}")
        self.current = current
        if velocity is not None:
            self.velocity = velocity

    def displacement(self) -> torch.Tensor:
        """Depth offset from rest for every point, shape (N*N,)."""
        return self.current[:, 2] - self._rest[:, 2]

    def index(self, row: int, col: int) -> int:
        n = self.grid_size
        if not (0 <= row < n and 0 <= col < n):
            raise IndexError(f"lattice coordinate ({row}, {col}) outside {n}x{n} grid")
        return row * n + col

    def faces(self) -> torch.Tensor:
        """Two counter-clockwise triangles per lattice cell, shape (2*(N-1)^2, 3)."""
        n = self.grid_size
        r = torch.arange(n - 1, device=self.device)
        rows, cols = torch.meshgrid(r, r, indexing="ij")
        a = (rows * n + cols).reshape(-1)
        b = a + 1
        c = a + n
        d = c + 1
        lower = torch.stack([a, b, d], dim=-1)
        upper = torch.stack([a, d, c], dim=-1)
        return torch.stack([lower, upper], dim=1).reshape(-1, 3)
