"""Drunkard's walk: random walkers dig out the level."""

from __future__ import annotations

import logging

from delve import config
from delve.environment.generators.base import (
    BuilderSettings,
    DrunkSpawnMode,
    MapBuilder,
    Symmetry,
)
from delve.environment.generators.common import finish_open_level, paint, stagger
from delve.environment.map import Grid
from delve.environment.tile_types import TileType

logger = logging.getLogger(__name__)

# Named presets used by the level table.
OPEN_AREA = BuilderSettings(
    spawn_mode=DrunkSpawnMode.STARTING_POINT,
    lifetime=400,
    floor_percent=0.5,
    symmetry=Symmetry.NONE,
    brush_size=1,
)
OPEN_HALLS = BuilderSettings(
    spawn_mode=DrunkSpawnMode.RANDOM,
    lifetime=400,
    floor_percent=0.5,
    symmetry=Symmetry.NONE,
    brush_size=1,
)
WINDING_PASSAGES = BuilderSettings(
    spawn_mode=DrunkSpawnMode.RANDOM,
    lifetime=100,
    floor_percent=0.4,
    symmetry=Symmetry.NONE,
    brush_size=1,
)
FAT_PASSAGES = BuilderSettings(
    spawn_mode=DrunkSpawnMode.RANDOM,
    lifetime=150,
    floor_percent=0.45,
    symmetry=Symmetry.NONE,
    brush_size=2,
)
FEARFUL_SYMMETRY = BuilderSettings(
    spawn_mode=DrunkSpawnMode.RANDOM,
    lifetime=100,
    floor_percent=0.4,
    symmetry=Symmetry.BOTH,
    brush_size=2,
)


class DrunkardsWalkBuilder(MapBuilder):
    """Release walkers that wander for a fixed lifetime, painting floor.

    Walkers keep spawning until the requested share of the map is floor or
    the walker budget runs out. In ``STARTING_POINT`` mode every walker starts
    at the map centre; in ``RANDOM`` mode only the first one does.
    """

    REQUIRED_SETTINGS = (
        "spawn_mode",
        "lifetime",
        "floor_percent",
        "symmetry",
        "brush_size",
    )
    DEFAULT_SETTINGS = OPEN_AREA

    max_walkers = config.DRUNKARD_MAX_WALKERS

    def build(self) -> Grid:
        settings = self.settings
        assert settings is not None
        assert settings.spawn_mode is not None
        assert settings.lifetime is not None
        assert settings.floor_percent is not None
        assert settings.symmetry is not None
        assert settings.brush_size is not None

        grid = self.grid
        start = (grid.width // 2, grid.height // 2)
        grid.tiles[start] = TileType.FLOOR
        grid.invalidate_caches()

        desired_floor = int(settings.floor_percent * grid.width * grid.height)
        floor_count = grid.count(TileType.FLOOR)
        walkers = 0

        while floor_count < desired_floor:
            if walkers >= self.max_walkers:
                logger.warning(
                    f"Drunkard's walk stopped after {walkers} walkers at "
                    f"{floor_count}/{desired_floor} floor tiles"
                )
                break

            if settings.spawn_mode is DrunkSpawnMode.RANDOM and walkers > 0:
                x = self.rng.randint(1, grid.width - 3) + 1
                y = self.rng.randint(1, grid.height - 3) + 1
            else:
                x, y = start

            dug = False
            for _ in range(settings.lifetime):
                if grid.tiles[x, y] == TileType.WALL:
                    dug = True
                paint(grid, settings.symmetry, settings.brush_size, x, y)
                x, y = stagger(self.rng, x, y, grid.width, grid.height)

            if dug:
                self.take_snapshot()
            walkers += 1
            floor_count = grid.count(TileType.FLOOR)

        logger.debug(f"Drunkard's walk used {walkers} walkers")
        finish_open_level(grid, self.rng, start)
        return grid
