"""Reachability analysis for freshly generated levels.

Every level must be fully connected from its entry point. The analyzer runs a
weighted Dijkstra flood from the entry over 8-directional movement, turns any
floor the flood cannot reach into wall, and reports the most distant floor
cell so builders can place the exit there.
"""

from __future__ import annotations

import logging

import numpy as np
import tcod.path

from delve import config
from delve.environment.generators.base import GenerationError
from delve.environment.map import Grid
from delve.environment.tile_types import TileType
from delve.types import TileIndex, WorldTilePos

logger = logging.getLogger(__name__)


def _raw_distances(grid: Grid, start: WorldTilePos) -> np.ndarray:
    """Integer Dijkstra costs (scaled by the cardinal cost) from ``start``.

    Unreached cells hold the int32 maximum. Entering a cell is allowed when it
    is anything but a wall, including diagonal moves past wall corners.
    """
    cost = (grid.tiles != TileType.WALL).astype(np.int32)
    dist = tcod.path.maxarray((grid.width, grid.height), dtype=np.int32, order="F")
    dist[start] = 0
    tcod.path.dijkstra2d(
        dist,
        cost,
        config.DIJKSTRA_CARDINAL_COST,
        config.DIJKSTRA_DIAGONAL_COST,
        out=dist,
    )
    return dist


def _depth_limit(max_depth: float | None = config.DIJKSTRA_MAX_DEPTH) -> int:
    if max_depth is None:
        return np.iinfo(np.int32).max - 1
    return round(max_depth * config.DIJKSTRA_CARDINAL_COST)


def dijkstra_distances(grid: Grid, start: WorldTilePos) -> np.ndarray:
    """Shortest-path cost from ``start`` to every cell, in tiles.

    Cardinal steps cost 1.0 and diagonal steps 1.45. Cells that are unreached
    or lie beyond the search radius are ``inf``.
    """
    dist = _raw_distances(grid, start)
    result = dist.astype(np.float64) / config.DIJKSTRA_CARDINAL_COST
    result[dist > _depth_limit()] = np.inf
    return result


def reachable_mask(grid: Grid, start: WorldTilePos) -> np.ndarray:
    """Boolean (width, height) map of the cells reachable from ``start``."""
    return _raw_distances(grid, start) <= _depth_limit()


def remove_unreachable_areas_returning_most_distant(
    grid: Grid,
    start_idx: TileIndex,
    max_depth: float | None = config.DIJKSTRA_MAX_DEPTH,
) -> TileIndex:
    """Wall off floor the entry cannot reach and return the exit cell index.

    The exit is the reachable floor cell with the greatest path cost from the
    start. Ties go to the lowest cell index. Floor further than ``max_depth``
    tiles from the start counts as unreachable; ``None`` lifts the cutoff.

    Raises:
        GenerationError: If no floor cell other than the start is reachable.
    """
    start = grid.idx_xy(start_idx)
    dist = _raw_distances(grid, start)
    reachable = dist <= _depth_limit(max_depth)

    orphaned = (grid.tiles == TileType.FLOOR) & ~reachable
    orphan_count = int(np.count_nonzero(orphaned))
    if orphan_count:
        grid.tiles[orphaned] = TileType.WALL
        grid.invalidate_caches()
        logger.debug(f"Walled off {orphan_count} unreachable floor tiles")

    candidates = (grid.tiles == TileType.FLOOR) & reachable
    scored = np.where(candidates, dist, -1).ravel(order="F")
    exit_idx = int(np.argmax(scored))
    if scored[exit_idx] <= 0:
        raise GenerationError(
            f"No reachable floor from start {start} on a "
            f"{grid.width}x{grid.height} map"
        )
    return exit_idx
