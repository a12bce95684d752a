"""Recursive backtracker maze."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from delve import config
from delve.environment.generators.base import MapBuilder
from delve.environment.generators.common import finish_open_level
from delve.environment.map import Grid
from delve.environment.tile_types import TileType
from delve.util.rng import RNG

logger = logging.getLogger(__name__)

# Wall slots of a maze cell.
TOP = 0
RIGHT = 1
BOTTOM = 2
LEFT = 3


@dataclass
class MazeCell:
    row: int
    column: int
    walls: list[bool] = field(default_factory=lambda: [True, True, True, True])
    visited: bool = False

    def remove_walls(self, other: MazeCell) -> None:
        """Open the shared wall between this cell and an adjacent one."""
        dx = self.column - other.column
        dy = self.row - other.row
        if dx == 1:
            self.walls[LEFT] = False
            other.walls[RIGHT] = False
        elif dx == -1:
            self.walls[RIGHT] = False
            other.walls[LEFT] = False
        elif dy == 1:
            self.walls[TOP] = False
            other.walls[BOTTOM] = False
        elif dy == -1:
            self.walls[BOTTOM] = False
            other.walls[TOP] = False


class MazeGrid:
    """Coarse maze cells stored in a flat list and addressed by index."""

    def __init__(self, width: int, height: int, rng: RNG) -> None:
        self.width = width
        self.height = height
        self.rng = rng
        self.cells = [
            MazeCell(row, column) for row in range(height) for column in range(width)
        ]
        self.backtrace: list[int] = []
        self.current = 0

    def index_of(self, row: int, column: int) -> int | None:
        if not (0 <= row < self.height and 0 <= column < self.width):
            return None
        return column + row * self.width

    def available_neighbors(self) -> list[int]:
        cell = self.cells[self.current]
        neighbors = []
        for row, column in (
            (cell.row - 1, cell.column),
            (cell.row, cell.column + 1),
            (cell.row + 1, cell.column),
            (cell.row, cell.column - 1),
        ):
            idx = self.index_of(row, column)
            if idx is not None and not self.cells[idx].visited:
                neighbors.append(idx)
        return neighbors

    def find_next_cell(self) -> int | None:
        neighbors = self.available_neighbors()
        if not neighbors:
            return None
        return self.rng.choice(neighbors)

    def generate(self, builder: MazeBuilder) -> None:
        """Carve the whole maze, snapshotting ``builder``'s grid as it goes."""
        step = 0
        while True:
            self.cells[self.current].visited = True
            next_idx = self.find_next_cell()

            if next_idx is not None:
                self.cells[next_idx].visited = True
                self.backtrace.append(self.current)
                self.cells[self.current].remove_walls(self.cells[next_idx])
                self.current = next_idx
            elif self.backtrace:
                self.current = self.backtrace.pop()
            else:
                break

            if step % config.MAZE_SNAPSHOT_INTERVAL == 0:
                self.copy_to_map(builder.grid)
                builder.take_snapshot()
            step += 1

        self.copy_to_map(builder.grid)
        logger.debug(f"Maze of {len(self.cells)} cells carved in {step} steps")

    def copy_to_map(self, grid: Grid) -> None:
        """Render every cell at ((column+1)*2, (row+1)*2) and punch open walls."""
        grid.tiles[:, :] = TileType.WALL
        for cell in self.cells:
            x = (cell.column + 1) * 2
            y = (cell.row + 1) * 2
            grid.tiles[x, y] = TileType.FLOOR
            if not cell.walls[TOP]:
                grid.tiles[x, y - 1] = TileType.FLOOR
            if not cell.walls[RIGHT]:
                grid.tiles[x + 1, y] = TileType.FLOOR
            if not cell.walls[BOTTOM]:
                grid.tiles[x, y + 1] = TileType.FLOOR
            if not cell.walls[LEFT]:
                grid.tiles[x - 1, y] = TileType.FLOOR
        grid.invalidate_caches()


class MazeBuilder(MapBuilder):
    """A perfect maze on a half-resolution grid, entered at its top-left cell."""

    def build(self) -> Grid:
        grid = self.grid
        maze = MazeGrid(grid.width // 2 - 2, grid.height // 2 - 2, self.rng)
        maze.generate(self)
        self.take_snapshot()

        finish_open_level(grid, self.rng, (2, 2))
        return grid
