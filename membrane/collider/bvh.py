"""Bounding-volume hierarchy over a static triangle soup.

Built once per geometry (in the collider's local frame) and queried every
frame with rays that were moved into that frame, so a moving collider never
rebuilds it.

Traversal is breadth-first and batched: the frontier is a list of
(ray, node) pairs, each level is one slab test over all pairs, and leaf pairs
expand into (ray, triangle) pairs for a single Möller–Trumbore pass.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Tuple

import torch

# [CHOICE] determinant / parallel-ray epsilon (local units)
# [REASON] below this the ray is treated as parallel to the triangle (no hit)
_DET_EPS = 1e-12
_T_EPS = 1e-9


@dataclass
class _Node:
    lo: torch.Tensor
    hi: torch.Tensor
    left: int = -1
    right: int = -1
    start: int = 0
    count: int = 0


class TriangleBVH:
    """Median-split BVH with flattened node arrays."""

    def __init__(self, vertices: torch.Tensor, faces: torch.Tensor, *, leaf_size: int = 8):
        if leaf_size < 1:
            raise ValueError(f"leaf_size must be >= 1, got {leaf_size}")
        verts = torch.as_tensor(vertices, dtype=torch.float64).cpu()
        tris = torch.as_tensor(faces, dtype=torch.long).cpu()
        self.leaf_size = int(leaf_size)

        corners = verts[tris]                      # (F, 3, 3)
        centroids = corners.mean(dim=1)            # (F, 3)
        tri_lo = corners.amin(dim=1)
        tri_hi = corners.amax(dim=1)

        nodes: list[_Node] = []
        order: list[torch.Tensor] = []
        cursor = 0

        # Iterative build; children are appended after their parent.
        stack: list[tuple[int, torch.Tensor]] = []
        nodes.append(_Node(lo=tri_lo.amin(dim=0), hi=tri_hi.amax(dim=0)))
        stack.append((0, torch.arange(tris.shape[0])))
        while stack:
            node_id, idx = stack.pop()
            node = nodes[node_id]
            if idx.numel() <= self.leaf_size:
                node.start = cursor
                node.count = int(idx.numel())
                order.append(idx)
                cursor += node.count
                continue

            extent = centroids[idx].amax(dim=0) - centroids[idx].amin(dim=0)
            axis = int(torch.argmax(extent))
            sorted_idx = idx[torch.argsort(centroids[idx, axis])]
            half = sorted_idx.numel() // 2
            left_idx, right_idx = sorted_idx[:half], sorted_idx[half:]

            node.left = len(nodes)
            nodes.append(_Node(lo=tri_lo[left_idx].amin(dim=0), hi=tri_hi[left_idx].amax(dim=0)))
            node.right = len(nodes)
            nodes.append(_Node(lo=tri_lo[right_idx].amin(dim=0), hi=tri_hi[right_idx].amax(dim=0)))
            stack.append((node.right, right_idx))
            stack.append((node.left, left_idx))

        perm = torch.cat(order) if order else torch.empty(0, dtype=torch.long)
        ordered = corners[perm]

        self.num_triangles = int(tris.shape[0])
        self.num_nodes = len(nodes)
        self.node_lo = torch.stack([n.lo for n in nodes])
        self.node_hi = torch.stack([n.hi for n in nodes])
        self.node_left = torch.tensor([n.left for n in nodes], dtype=torch.long)
        self.node_right = torch.tensor([n.right for n in nodes], dtype=torch.long)
        self.node_start = torch.tensor([n.start for n in nodes], dtype=torch.long)
        self.node_count = torch.tensor([n.count for n in nodes], dtype=torch.long)
        self.v0 = ordered[:, 0]
        self.e1 = ordered[:, 1] - ordered[:, 0]
        self.e2 = ordered[:, 2] - ordered[:, 0]
        self.triangle_order = perm

    @property
    def depth(self) -> int:
        depth = 0
        frontier = [0]
        while frontier:
            depth += 1
            nxt: list[int] = []
            for k in frontier:
                if int(self.node_count[k]) == 0 and int(self.node_left[k]) >= 0:
                    nxt.extend((int(self.node_left[k]), int(self.node_right[k])))
            frontier = nxt
        return depth

    def to(self, device: str | torch.device, dtype: torch.dtype) -> "TriangleBVH":
        """Copy of this BVH with node/triangle arrays on `device` as `dtype`."""
        moved = copy.copy(self)
        for name in ("node_lo", "node_hi", "v0", "e1", "e2"):
            setattr(moved, name, getattr(self, name).to(device=device, dtype=dtype))
        for name in ("node_left", "node_right", "node_start", "node_count", "triangle_order"):
            setattr(moved, name, getattr(self, name).to(device=device))
        return moved

    def _slab(
        self, origins: torch.Tensor, inv_dirs: torch.Tensor, node: torch.Tensor, max_t: torch.Tensor
    ) -> torch.Tensor:
        t1 = (self.node_lo[node] - origins) * inv_dirs
        t2 = (self.node_hi[node] - origins) * inv_dirs
        t_near = torch.minimum(t1, t2).amax(dim=-1)
        t_far = torch.maximum(t1, t2).amin(dim=-1)
        return (t_far >= torch.clamp(t_near, min=0.0)) & (t_near <= max_t)

    def intersect(
        self, origins: torch.Tensor, dirs: torch.Tensor, max_distance: float
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        """Nearest hit along each ray.

        Args:
            origins: (R, 3) ray origins in the BVH frame
            dirs: (R, 3) ray directions in the BVH frame (need not be unit;
                distances are returned in units of the direction length)
            max_distance: hits with t > max_distance are ignored

        Returns:
            (hit, t) where `hit` is (R,) bool and `t` is (R,) with +inf on miss.
        """
        num_rays = origins.shape[0]
        best = torch.full((num_rays,), float("inf"), device=origins.device, dtype=origins.dtype)
        if num_rays == 0 or self.num_triangles == 0:
            return best.isfinite(), best

        eps = torch.full_like(dirs, _DET_EPS)
        safe = torch.where(dirs.abs() < _DET_EPS, torch.where(dirs < 0, -eps, eps), dirs)
        inv_dirs = 1.0 / safe
        limit = torch.full_like(best, float(max_distance))

        rays = torch.arange(num_rays, device=origins.device)
        nodes = torch.zeros(num_rays, dtype=torch.long, device=origins.device)
        while rays.numel() > 0:
            cap = torch.minimum(best[rays], limit[rays])
            keep = self._slab(origins[rays], inv_dirs[rays], nodes, cap)
            rays, nodes = rays[keep], nodes[keep]
            if rays.numel() == 0:
                break

            is_leaf = self.node_count[nodes] > 0
            leaf_rays, leaf_nodes = rays[is_leaf], nodes[is_leaf]
            if leaf_rays.numel() > 0:
                self._leaf_pass(origins, dirs, leaf_rays, leaf_nodes, best, float(max_distance))

            inner_rays, inner_nodes = rays[~is_leaf], nodes[~is_leaf]
            rays = torch.cat([inner_rays, inner_rays])
            nodes = torch.cat([self.node_left[inner_nodes], self.node_right[inner_nodes]])

        return best.isfinite(), best

    def _leaf_pass(
        self,
        origins: torch.Tensor,
        dirs: torch.Tensor,
        rays: torch.Tensor,
        nodes: torch.Tensor,
        best: torch.Tensor,
        max_distance: float,
    ) -> None:
        counts = self.node_count[nodes]
        total = int(counts.sum())
        ray_idx = rays.repeat_interleave(counts)
        offsets = torch.cumsum(counts, dim=0) - counts
        local = torch.arange(total, device=rays.device) - offsets.repeat_interleave(counts)
        tri = self.node_start[nodes].repeat_interleave(counts) + local

        t = moller_trumbore(origins[ray_idx], dirs[ray_idx], self.v0[tri], self.e1[tri], self.e2[tri])
        t = torch.where(t <= max_distance, t, torch.full_like(t, float("inf")))
        best.scatter_reduce_(0, ray_idx, t, reduce="amin")


def moller_trumbore(
    o: torch.Tensor, d: torch.Tensor, v0: torch.Tensor, e1: torch.Tensor, e2: torch.Tensor
) -> torch.Tensor:
    """Double-sided ray/triangle test; returns t per pair, +inf on miss."""
    p = torch.linalg.cross(d, e2, dim=-1)
    det = (e1 * p).sum(dim=-1)
    ok = det.abs() > _DET_EPS
    inv_det = 1.0 / torch.where(ok, det, torch.ones_like(det))

    s = o - v0
    u = (s * p).sum(dim=-1) * inv_det
    q = torch.linalg.cross(s, e1, dim=-1)
    v = (d * q).sum(dim=-1) * inv_det
    t = (e2 * q).sum(dim=-1) * inv_det

    hit = ok & (u >= 0.0) & (v >= 0.0) & (u + v <= 1.0) & (t > _T_EPS)
    return torch.where(hit, t, torch.full_like(t, float("inf")))
