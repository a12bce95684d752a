"""Resynthesize a finished level with Wave Function Collapse."""

from __future__ import annotations

import logging

from delve import config
from delve.environment.generators.base import (
    BuilderSettings,
    GenerationError,
    MapBuilder,
)
from delve.environment.generators.common import (
    find_start_walking_left,
    finish_open_level,
    make_boundary_walls,
)
from delve.environment.generators.wfc.patterns import (
    build_patterns,
    patterns_to_constraints,
    render_pattern_gallery,
)
from delve.environment.generators.wfc.solver import ChunkSolver
from delve.environment.map import Grid
from delve.environment.tile_types import TileType
from delve.util.rng import RNG

logger = logging.getLogger(__name__)


class WaveFunctionCollapseBuilder(MapBuilder):
    """Learn the chunk patterns of a source level and build a new level from them.

    The source is supplied with `with_source`. Solver runs that hit a
    contradiction are thrown away and restarted from scratch, up to
    ``max_attempts`` times.
    """

    chunk_size = config.WFC_CHUNK_SIZE
    include_mirrors = config.WFC_INCLUDE_MIRRORS
    include_rotations = config.WFC_INCLUDE_ROTATIONS
    max_attempts = config.WFC_MAX_ATTEMPTS

    def __init__(
        self, grid: Grid, rng: RNG, settings: BuilderSettings | None = None
    ) -> None:
        super().__init__(grid, rng, settings)
        self.source: Grid | None = None

    def with_source(self, grid: Grid) -> WaveFunctionCollapseBuilder:
        clone = self._clone()
        clone.source = grid.copy()
        clone.grid = Grid(
            grid.width,
            grid.height,
            grid.depth,
            record_history=self.grid.record_history,
            history_limit=self.grid.history_limit,
        )
        # Keep the source level's playback ahead of the resynthesis.
        clone.grid.history = list(clone.source.history)
        return clone

    def build(self) -> Grid:
        if self.source is None:
            raise GenerationError("Wave function collapse needs a source level")

        grid = self.grid
        self.take_snapshot(self.source.tiles)

        patterns = build_patterns(
            self.source.tiles,
            self.chunk_size,
            include_mirrors=self.include_mirrors,
            include_rotations=self.include_rotations,
        )
        if not patterns:
            raise GenerationError(
                f"Source level is smaller than one {self.chunk_size}x"
                f"{self.chunk_size} chunk"
            )
        constraints = patterns_to_constraints(patterns)
        logger.debug(f"WFC extracted {len(constraints)} patterns")

        if grid.record_history:
            for page in render_pattern_gallery(constraints, grid.width, grid.height):
                self.take_snapshot(page)

        for attempt in range(1, self.max_attempts + 1):
            grid.tiles[:, :] = TileType.WALL
            grid.invalidate_caches()
            solver = ChunkSolver(
                constraints, self.chunk_size, grid.width, grid.height, self.rng
            )
            while not solver.iteration(grid):
                self.take_snapshot()
            self.take_snapshot()

            if solver.possible:
                logger.debug(f"WFC solved on attempt {attempt}")
                break
            logger.debug(f"WFC contradiction on attempt {attempt}, restarting")
        else:
            raise GenerationError(
                f"Wave function collapse failed after {self.max_attempts} attempts"
            )

        make_boundary_walls(grid)
        start = find_start_walking_left(grid)
        self.take_snapshot()

        finish_open_level(grid, self.rng, start)
        return grid
