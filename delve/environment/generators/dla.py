"""Diffusion-limited aggregation caves."""

from __future__ import annotations

import logging

import tcod.los

from delve import config
from delve.environment.generators.base import (
    BuilderSettings,
    DLAAlgorithm,
    MapBuilder,
    Symmetry,
)
from delve.environment.generators.common import finish_open_level, paint, stagger
from delve.environment.map import Grid
from delve.environment.tile_types import TileType
from delve.types import WorldTilePos

logger = logging.getLogger(__name__)

WALK_INWARDS = BuilderSettings(
    algorithm=DLAAlgorithm.WALK_INWARDS,
    floor_percent=0.25,
    symmetry=Symmetry.NONE,
    brush_size=1,
)
WALK_OUTWARDS = BuilderSettings(
    algorithm=DLAAlgorithm.WALK_OUTWARDS,
    floor_percent=0.25,
    symmetry=Symmetry.NONE,
    brush_size=2,
)
CENTRAL_ATTRACTOR = BuilderSettings(
    algorithm=DLAAlgorithm.CENTRAL_ATTRACTOR,
    floor_percent=0.25,
    symmetry=Symmetry.NONE,
    brush_size=2,
)
INSECTOID = BuilderSettings(
    algorithm=DLAAlgorithm.CENTRAL_ATTRACTOR,
    floor_percent=0.25,
    symmetry=Symmetry.HORIZONTAL,
    brush_size=2,
)


class DLABuilder(MapBuilder):
    """Grow a cave by sticking wandering particles onto a central seed.

    Each iteration releases one digger and paints a single contact point:

    * walk inwards: start anywhere, wander until floor is touched, paint the
      last wall cell visited;
    * walk outwards: start on the seed, wander until wall is reached, paint it;
    * central attractor: start anywhere and move along a straight line to the
      seed, painting the last wall cell before floor.
    """

    REQUIRED_SETTINGS = ("algorithm", "floor_percent", "symmetry", "brush_size")
    DEFAULT_SETTINGS = WALK_INWARDS

    max_iterations = config.DLA_MAX_ITERATIONS

    def build(self) -> Grid:
        settings = self.settings
        assert settings is not None
        assert settings.algorithm is not None
        assert settings.floor_percent is not None
        assert settings.symmetry is not None
        assert settings.brush_size is not None

        grid = self.grid
        start = (grid.width // 2, grid.height // 2)
        sx, sy = start
        for x, y in (start, (sx - 1, sy), (sx + 1, sy), (sx, sy - 1), (sx, sy + 1)):
            grid.tiles[x, y] = TileType.FLOOR
        grid.invalidate_caches()
        self.take_snapshot()

        desired_floor = int(settings.floor_percent * grid.width * grid.height)
        floor_count = grid.count(TileType.FLOOR)
        iterations = 0

        while floor_count < desired_floor:
            if iterations >= self.max_iterations:
                logger.warning(
                    f"DLA stopped after {iterations} iterations at "
                    f"{floor_count}/{desired_floor} floor tiles"
                )
                break

            match settings.algorithm:
                case DLAAlgorithm.WALK_INWARDS:
                    target = self._walk_inwards()
                case DLAAlgorithm.WALK_OUTWARDS:
                    target = self._walk_outwards(start)
                case DLAAlgorithm.CENTRAL_ATTRACTOR:
                    target = self._central_attractor(start)
            paint(grid, settings.symmetry, settings.brush_size, *target)
            self.take_snapshot()

            iterations += 1
            floor_count = grid.count(TileType.FLOOR)

        logger.debug(f"DLA finished after {iterations} iterations")
        finish_open_level(grid, self.rng, start)
        return grid

    def _random_interior_point(self) -> WorldTilePos:
        x = self.rng.randint(1, self.grid.width - 3) + 1
        y = self.rng.randint(1, self.grid.height - 3) + 1
        return (x, y)

    def _walk_inwards(self) -> WorldTilePos:
        grid = self.grid
        x, y = self._random_interior_point()
        prev = (x, y)
        while grid.tiles[x, y] == TileType.WALL:
            prev = (x, y)
            x, y = stagger(self.rng, x, y, grid.width, grid.height)
        return prev

    def _walk_outwards(self, start: WorldTilePos) -> WorldTilePos:
        grid = self.grid
        x, y = start
        while grid.tiles[x, y] == TileType.FLOOR:
            x, y = stagger(self.rng, x, y, grid.width, grid.height)
        return (x, y)

    def _central_attractor(self, start: WorldTilePos) -> WorldTilePos:
        grid = self.grid
        x, y = self._random_interior_point()
        prev = (x, y)
        # The first point of the line is the digger itself.
        path = tcod.los.bresenham((x, y), start).tolist()[1:]
        for next_x, next_y in path:
            if grid.tiles[x, y] != TileType.WALL:
                break
            prev = (x, y)
            x, y = next_x, next_y
        return prev
