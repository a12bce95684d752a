"""Independent level checks shared by the generator tests.

These deliberately avoid the connectivity analyzer so they can be used to
verify it.
"""

from __future__ import annotations

from collections import deque

import numpy as np

from delve.environment.map import Grid
from delve.environment.tile_types import TileType
from delve.types import WorldTilePos

NEIGHBOR_OFFSETS = [
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
]


def bfs_reachable(grid: Grid, start: WorldTilePos) -> set[WorldTilePos]:
    """Cells reachable from ``start`` moving 8-ways through non-wall cells."""
    seen = {start}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if (nx, ny) in seen or not grid.in_bounds(nx, ny):
                continue
            if grid.tiles[nx, ny] == TileType.WALL:
                continue
            seen.add((nx, ny))
            queue.append((nx, ny))
    return seen


def positions_of(grid: Grid, tile_type: TileType) -> set[WorldTilePos]:
    xs, ys = np.nonzero(grid.tiles == tile_type)
    return {(int(x), int(y)) for x, y in zip(xs, ys, strict=True)}


def assert_level_invariants(grid: Grid) -> None:
    """Check everything a finished level must satisfy."""
    up = positions_of(grid, TileType.UP_STAIRS)
    down = positions_of(grid, TileType.DOWN_STAIRS)
    assert len(up) == 1, f"expected one up staircase, found {sorted(up)}"
    assert len(down) == 1, f"expected one down staircase, found {sorted(down)}"
    assert grid.entry_point() in up
    assert grid.exit_point() in down

    assert (grid.tiles[0, :] == TileType.WALL).all()
    assert (grid.tiles[-1, :] == TileType.WALL).all()
    assert (grid.tiles[:, 0] == TileType.WALL).all()
    assert (grid.tiles[:, -1] == TileType.WALL).all()

    entry = grid.entry_point()
    assert entry is not None
    reachable = bfs_reachable(grid, entry)
    floor = positions_of(grid, TileType.FLOOR)
    unreachable = floor - reachable
    assert not unreachable, f"{len(unreachable)} floor cells are unreachable"
    assert grid.exit_point() in reachable

    flat = grid.flat_tiles()
    seen: set[int] = set()
    for region_id, cells in grid.iter_regions():
        for idx in cells:
            assert flat[idx] == TileType.FLOOR, f"region {region_id} holds {idx}"
            assert idx not in seen, f"cell {idx} is in two regions"
            seen.add(idx)
