"""Spatial-partition service: adjacency-restricted Voronoi cells in CIELAB.

Each site owns the grid points of the bounding box that are at least as close
to it as to any site it is adjacent to. Sites that are not adjacent do not
compete, so a slot's cell only reflects the colours it must stay apart from.

Grid points are spaced `resolution` apart along each axis, starting at the
box minimum. Grids are cached per (bounds, resolution).
"""

from __future__ import annotations

from functools import lru_cache

import numpy as np
from sklearn.metrics import pairwise_distances_argmin

from cosaf.core.colour import LAB_BOUNDS
from cosaf.core.types import Triplet


@lru_cache(maxsize=8)
def _box_grid(bounds: tuple[tuple[float, float], ...], resolution: float) -> np.ndarray:
    axes = [np.arange(lo, hi + 1e-9, resolution) for lo, hi in bounds]
    mesh = np.meshgrid(*axes, indexing='ij')
    grid = np.stack([m.ravel() for m in mesh], axis=-1)
    grid.flags.writeable = False
    return grid


class Partition:
    """Sites in a bounded box, partitioned into cells by an adjacency table."""

    def __init__(self, bounds: tuple[tuple[float, float], ...] = LAB_BOUNDS):
        self.bounds = bounds
        self._sites: list[Triplet] = []
        self._table: list[list[int]] | None = None
        self._cells: dict[tuple[int, float], np.ndarray] = {}

    def add_site(self, coord: Triplet) -> None:
        self._sites.append(tuple(coord))
        self._table = None
        self._cells.clear()

    def create_cells(self, adjacency_table: list[list[int]]) -> None:
        if len(adjacency_table) != len(self._sites):
            raise ValueError(f'Adjacency table has {len(adjacency_table)} rows for {len(self._sites)} sites')
        self._table = [list(row) for row in adjacency_table]
        self._cells.clear()

    def grids(self, index: int, resolution: float) -> np.ndarray:
        """Grid points (N, 3) inside the cell of site `index`."""
        if self._table is None:
            raise RuntimeError('create_cells() must be called before sampling')
        key = (index, float(resolution))
        if key not in self._cells:
            self._cells[key] = self._sample(index, float(resolution))
        return self._cells[key]

    def count_grids(self, index: int, resolution: float) -> int:
        """Coarse cell size: number of grid points in the cell of site `index`."""
        return len(self.grids(index, resolution))

    def _sample(self, index: int, resolution: float) -> np.ndarray:
        grid = _box_grid(self.bounds, resolution)
        rivals = [index] + [j for j in self._table[index] if j != index]
        if len(rivals) == 1:
            return grid
        sites = np.asarray([self._sites[j] for j in rivals], dtype=float)
        # row 0 is `index`; argmin prefers the first minimum
        nearest = pairwise_distances_argmin(grid, sites)
        return grid[nearest == 0]

    def __len__(self) -> int:
        return len(self._sites)
