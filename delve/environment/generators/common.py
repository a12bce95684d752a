"""Carving, painting and finishing helpers shared by the builders."""

from __future__ import annotations

from collections.abc import Sequence

from delve.environment import connectivity, regions
from delve.environment.generators.base import GenerationError, Symmetry
from delve.environment.map import Grid
from delve.environment.tile_types import TileType
from delve.types import TileCoord, WorldTilePos
from delve.util.coordinates import Rect
from delve.util.rng import RNG

# =============================================================================
# ROOMS AND CORRIDORS
# =============================================================================


def apply_room_to_map(grid: Grid, room: Rect) -> None:
    """Carve the inside of ``room``: x1+1..=x2, y1+1..=y2."""
    for x, y in room.interior():
        grid.tiles[x, y] = TileType.FLOOR
    grid.invalidate_caches()


def apply_horizontal_tunnel(
    grid: Grid, x1: TileCoord, x2: TileCoord, y: TileCoord
) -> None:
    for x in range(min(x1, x2), max(x1, x2) + 1):
        if grid.in_bounds(x, y):
            grid.tiles[x, y] = TileType.FLOOR
    grid.invalidate_caches()


def apply_vertical_tunnel(
    grid: Grid, y1: TileCoord, y2: TileCoord, x: TileCoord
) -> None:
    for y in range(min(y1, y2), max(y1, y2) + 1):
        if grid.in_bounds(x, y):
            grid.tiles[x, y] = TileType.FLOOR
    grid.invalidate_caches()


def connect_l_shaped(
    grid: Grid, start: WorldTilePos, end: WorldTilePos, horizontal_first: bool
) -> None:
    """Join two points with one horizontal and one vertical tunnel."""
    (x1, y1), (x2, y2) = start, end
    if horizontal_first:
        apply_horizontal_tunnel(grid, x1, x2, y1)
        apply_vertical_tunnel(grid, y1, y2, x2)
    else:
        apply_vertical_tunnel(grid, y1, y2, x1)
        apply_horizontal_tunnel(grid, x1, x2, y2)


def draw_corridor(
    grid: Grid, x1: TileCoord, y1: TileCoord, x2: TileCoord, y2: TileCoord
) -> None:
    """Step from (x1, y1) to (x2, y2), closing the x gap before the y gap."""
    x, y = x1, y1
    grid.tiles[x, y] = TileType.FLOOR
    while x != x2 or y != y2:
        if x < x2:
            x += 1
        elif x > x2:
            x -= 1
        elif y < y2:
            y += 1
        else:
            y -= 1
        grid.tiles[x, y] = TileType.FLOOR
    grid.invalidate_caches()


def make_boundary_walls(grid: Grid) -> None:
    grid.tiles[0, :] = TileType.WALL
    grid.tiles[-1, :] = TileType.WALL
    grid.tiles[:, 0] = TileType.WALL
    grid.tiles[:, -1] = TileType.WALL
    grid.invalidate_caches()


# =============================================================================
# WALKERS
# =============================================================================


def apply_paint(grid: Grid, brush_size: int, x: TileCoord, y: TileCoord) -> None:
    """Paint floor at (x, y) with a square brush.

    A brush of 1 paints the single cell. Larger brushes cover
    ``[x - b//2, x + b//2)`` by ``[y - b//2, y + b//2)``, skipping anything
    within two cells of the map edge.
    """
    if brush_size == 1:
        if 0 < x < grid.width - 1 and 0 < y < grid.height - 1:
            grid.tiles[x, y] = TileType.FLOOR
        return

    half = brush_size // 2
    for brush_y in range(y - half, y + half):
        for brush_x in range(x - half, x + half):
            if 1 < brush_x < grid.width - 1 and 1 < brush_y < grid.height - 1:
                grid.tiles[brush_x, brush_y] = TileType.FLOOR


def paint(
    grid: Grid, symmetry: Symmetry, brush_size: int, x: TileCoord, y: TileCoord
) -> None:
    """Paint at (x, y) and at its mirror images about the map centre."""
    center_x = grid.width // 2
    center_y = grid.height // 2
    match symmetry:
        case Symmetry.NONE:
            apply_paint(grid, brush_size, x, y)
        case Symmetry.HORIZONTAL:
            if x == center_x:
                apply_paint(grid, brush_size, x, y)
            else:
                dist_x = abs(center_x - x)
                apply_paint(grid, brush_size, center_x + dist_x, y)
                apply_paint(grid, brush_size, center_x - dist_x, y)
        case Symmetry.VERTICAL:
            if y == center_y:
                apply_paint(grid, brush_size, x, y)
            else:
                dist_y = abs(center_y - y)
                apply_paint(grid, brush_size, x, center_y + dist_y)
                apply_paint(grid, brush_size, x, center_y - dist_y)
        case Symmetry.BOTH:
            if x == center_x and y == center_y:
                apply_paint(grid, brush_size, x, y)
            else:
                dist_x = abs(center_x - x)
                dist_y = abs(center_y - y)
                apply_paint(grid, brush_size, center_x + dist_x, y)
                apply_paint(grid, brush_size, center_x - dist_x, y)
                apply_paint(grid, brush_size, x, center_y + dist_y)
                apply_paint(grid, brush_size, x, center_y - dist_y)
    grid.invalidate_caches()


def stagger(
    rng: RNG, x: TileCoord, y: TileCoord, width: TileCoord, height: TileCoord
) -> WorldTilePos:
    """Take one random cardinal step, staying inside [2, width-2] x [2, height-2]."""
    match rng.randint(1, 4):
        case 1:
            if x > 2:
                x -= 1
        case 2:
            if x < width - 2:
                x += 1
        case 3:
            if y > 2:
                y -= 1
        case _:
            if y < height - 2:
                y += 1
    return (x, y)


# =============================================================================
# FINISHING
# =============================================================================


def find_start_walking_left(grid: Grid) -> WorldTilePos:
    """Walk left from the map centre until a floor cell is found.

    Raises:
        GenerationError: If the walk reaches the left edge without finding floor.
    """
    x = grid.width // 2
    y = grid.height // 2
    while grid.tiles[x, y] != TileType.FLOOR:
        x -= 1
        if x < 1:
            raise GenerationError(f"No floor to the left of the centre on row {y}")
    return (x, y)


def finish_room_level(grid: Grid, rooms: Sequence[Rect]) -> None:
    """Place stairs at the first and last rooms and use the rooms as regions.

    Pruning runs without the search radius, since room builders join every
    room with corridors.

    Raises:
        GenerationError: If no rooms were placed or the last room is cut off.
    """
    if not rooms:
        raise GenerationError("No rooms were placed")

    grid.set_upstairs(rooms[0].center())
    exit_idx = connectivity.remove_unreachable_areas_returning_most_distant(
        grid, grid.xy_idx(*rooms[0].center()), max_depth=None
    )
    last_center = rooms[-1].center()
    if last_center == grid.upstairs:
        last_center = grid.idx_xy(exit_idx)
    elif grid.tiles[last_center] != TileType.FLOOR:
        raise GenerationError(
            f"Last room centre {last_center} is {grid.tile_name(*last_center)}, "
            "not reachable floor"
        )
    grid.set_downstairs(last_center)
    grid.take_snapshot()

    grid.regions = regions.rooms_to_regions(grid, rooms)


def finish_open_level(grid: Grid, rng: RNG, start: WorldTilePos) -> None:
    """Prune from ``start``, put the exit at the most distant floor, add regions."""
    exit_idx = connectivity.remove_unreachable_areas_returning_most_distant(
        grid, grid.xy_idx(*start)
    )
    grid.take_snapshot()

    grid.set_upstairs(start)
    grid.set_downstairs(grid.idx_xy(exit_idx))
    grid.take_snapshot()

    grid.regions = regions.noise_regions(grid, rng)
