"""Renderer-facing view of the grid.

The renderer gets a flat `3*N*N` float32 buffer (x, y, z interleaved), a
dirty flag, and the triangulation that matches the buffer order.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import torch

from .grid import Grid


class SurfaceOutput:
    def __init__(self, grid: Grid):
        self.grid = grid
        self.needs_update = True
        self.version = 0
        self._faces: Optional[torch.Tensor] = None

    def __len__(self) -> int:
        return 3 * self.grid.num_points

    def mark_dirty(self) -> None:
        self.needs_update = True
        self.version += 1

    def acknowledge(self) -> None:
        """Renderer has uploaded the current buffer."""
        self.needs_update = False

    @property
    def buffer(self) -> np.ndarray:
        """Read-only flat float32 positions, length 3*N*N."""
        flat = self.grid.current.detach().to("cpu", torch.float32).reshape(-1).numpy().copy()
        flat.setflags(write=False)
        return flat

    def positions(self) -> torch.Tensor:
        """Positions as an (N*N, 3) tensor copy."""
        return self.grid.current.detach().clone()

    def faces(self) -> torch.Tensor:
        if self._faces is None:
            self._faces = self.grid.faces()
        return self._faces

    def index_buffer(self) -> np.ndarray:
        """Flat uint32 triangle indices matching `buffer`."""
        return self.faces().to("cpu").reshape(-1).numpy().astype(np.uint32)

    def vertex_normals(self) -> torch.Tensor:
        """Area-weighted vertex normals, (N*N, 3). Degenerate normals become +z."""
        pos = self.grid.current
        faces = self.faces()
        a, b, c = pos[faces[:, 0]], pos[faces[:, 1]], pos[faces[:, 2]]
        face_n = torch.linalg.cross(b - a, c - a, dim=-1)

        normals = torch.zeros_like(pos)
        for k in range(3):
            normals.index_add_(0, faces[:, k], face_n)
        length = torch.linalg.norm(normals, dim=-1, keepdim=True)
        up = torch.zeros_like(normals)
        up[:, 2] = 1.0
        ok = (length > 1e-12) & torch.isfinite(length)
        return torch.where(ok, normals / torch.where(ok, length, torch.ones_like(length)), up)
