"""Cave levels grown with a cellular automaton."""

from __future__ import annotations

import logging

import numpy as np

from delve import config
from delve.environment.generators.base import MapBuilder
from delve.environment.generators.common import (
    find_start_walking_left,
    finish_open_level,
)
from delve.environment.map import Grid
from delve.environment.tile_types import TileType

logger = logging.getLogger(__name__)


def count_wall_neighbors(tiles: np.ndarray) -> np.ndarray:
    """Wall count in the 8-neighbourhood of every interior cell.

    Returns an array shaped like ``tiles[1:-1, 1:-1]``.
    """
    walls = (tiles == TileType.WALL).astype(np.int8)
    width, height = walls.shape
    counts = np.zeros((width - 2, height - 2), dtype=np.int8)
    for dx in (-1, 0, 1):
        for dy in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            counts += walls[1 + dx : width - 1 + dx, 1 + dy : height - 1 + dy]
    return counts


def cellular_step(tiles: np.ndarray) -> np.ndarray:
    """One smoothing generation computed from a copy of ``tiles``.

    An interior cell becomes wall when more than four of its neighbours are
    walls or when none are, and floor otherwise. The outer ring is untouched.
    """
    neighbors = count_wall_neighbors(tiles)
    new_tiles = tiles.copy(order="F")
    new_tiles[1:-1, 1:-1] = np.where(
        (neighbors > 4) | (neighbors == 0), TileType.WALL, TileType.FLOOR
    )
    return new_tiles


class CellularAutomataBuilder(MapBuilder):
    """Random noise smoothed into caverns."""

    iterations = config.CELLULAR_ITERATIONS

    def build(self) -> Grid:
        grid = self.grid

        for y in range(1, grid.height - 1):
            for x in range(1, grid.width - 1):
                if self.rng.randint(1, 100) > config.CELLULAR_FLOOR_ROLL:
                    grid.tiles[x, y] = TileType.FLOOR
                else:
                    grid.tiles[x, y] = TileType.WALL
        grid.invalidate_caches()
        self.take_snapshot()

        for _ in range(self.iterations):
            grid.tiles = cellular_step(grid.tiles)
            grid.invalidate_caches()
            self.take_snapshot()

        start = find_start_walking_left(grid)
        logger.debug(f"Cellular automata start at {start}")
        finish_open_level(grid, self.rng, start)
        return grid
