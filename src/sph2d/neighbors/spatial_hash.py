from __future__ import annotations

import numpy as np
from collections import defaultdict
from typing import Dict, List, Tuple


class SpatialHash:
    """
    Uniform grid spatial hash for neighbor search.

    Cell size equals the smoothing radius h. The grid origin is the minimum
    active position minus one cell, recomputed on every build, so the grid
    always covers the current particle cloud.

    query() returns candidates from the 3x3 block of cells around a point.
    That is a superset of the particles within h; callers re-filter by the
    true distance.
    """

    def __init__(self, support_radius: float):
        self.h = float(support_radius)
        if not self.h > 0.0:
            raise ValueError("support_radius must be > 0")
        self.cell_size = self.h
        self.origin = np.zeros((2,), dtype=np.float64)
        self.grid: Dict[Tuple[int, int], List[int]] = defaultdict(list)

    def _cell_index(self, position: np.ndarray) -> Tuple[int, int]:
        cx = int(np.floor((position[0] - self.origin[0]) / self.cell_size))
        cy = int(np.floor((position[1] - self.origin[1]) / self.cell_size))
        return cx, cy

    def build(self, positions: np.ndarray, active: np.ndarray) -> None:
        self.grid.clear()

        ids = np.flatnonzero(active)
        if ids.size == 0:
            self.origin = np.zeros((2,), dtype=np.float64)
            return

        self.origin = positions[ids].min(axis=0) - self.cell_size

        for i in ids:
            self.grid[self._cell_index(positions[i])].append(int(i))

    def query(self, point: np.ndarray) -> List[int]:
        cx, cy = self._cell_index(point)

        candidates: List[int] = []
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                bucket = self.grid.get((cx + dx, cy + dy))
                if bucket:
                    candidates.extend(bucket)

        return candidates


class BruteForceNeighbors:
    """
    Non-hashed O(n^2) fallback with the same interface as SpatialHash.

    Every active particle is a candidate for every query.
    """

    def __init__(self, support_radius: float):
        self.h = float(support_radius)
        self._ids: List[int] = []

    def build(self, positions: np.ndarray, active: np.ndarray) -> None:
        self._ids = [int(i) for i in np.flatnonzero(active)]

    def query(self, point: np.ndarray) -> List[int]:
        return self._ids


def make_neighbor_search(support_radius: float, use_spatial_hash: bool):
    if use_spatial_hash:
        return SpatialHash(support_radius)
    return BruteForceNeighbors(support_radius)
