"""Voronoi cell lattice."""

from __future__ import annotations

import numpy as np

from delve import config
from delve.environment.generators.base import MapBuilder
from delve.environment.generators.common import (
    find_start_walking_left,
    finish_open_level,
)
from delve.environment.map import Grid
from delve.environment.tile_types import TileType
from delve.types import WorldTilePos


def voronoi_membership(
    width: int, height: int, seeds: list[WorldTilePos]
) -> np.ndarray:
    """Index of the nearest seed for every cell, shaped (width, height).

    Distance is squared Euclidean; ties go to the lowest seed index.
    """
    xs, ys = np.meshgrid(np.arange(width), np.arange(height), indexing="ij")
    seed_xy = np.asarray(seeds, dtype=np.int64)
    dx = xs[np.newaxis, :, :] - seed_xy[:, 0, np.newaxis, np.newaxis]
    dy = ys[np.newaxis, :, :] - seed_xy[:, 1, np.newaxis, np.newaxis]
    return np.argmin(dx * dx + dy * dy, axis=0)


def boundary_mask(membership: np.ndarray) -> np.ndarray:
    """True for interior cells with at least two 4-neighbours in another cell.

    Returns an array shaped like ``membership[1:-1, 1:-1]``.
    """
    center = membership[1:-1, 1:-1]
    differing = (
        (membership[:-2, 1:-1] != center).astype(np.int8)
        + (membership[2:, 1:-1] != center)
        + (membership[1:-1, :-2] != center)
        + (membership[1:-1, 2:] != center)
    )
    return differing >= 2


class VoronoiBuilder(MapBuilder):
    """Chambers bounded by the edges of a Voronoi diagram.

    A cell with two or more 4-neighbours in another seed's area is wall.
    """

    n_seeds = config.VORONOI_SEEDS

    def build(self) -> Grid:
        grid = self.grid
        n_seeds = min(self.n_seeds, (grid.width - 1) * (grid.height - 1))

        seeds: list[WorldTilePos] = []
        while len(seeds) < n_seeds:
            candidate = (
                self.rng.randint(1, grid.width - 1),
                self.rng.randint(1, grid.height - 1),
            )
            if candidate not in seeds:
                seeds.append(candidate)

        membership = voronoi_membership(grid.width, grid.height, seeds)
        walls = boundary_mask(membership)
        grid.tiles[1:-1, 1:-1] = np.where(walls, TileType.WALL, TileType.FLOOR)
        grid.invalidate_caches()
        self.take_snapshot()

        start = find_start_walking_left(grid)
        finish_open_level(grid, self.rng, start)
        return grid
