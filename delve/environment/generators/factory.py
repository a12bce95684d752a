"""Level selection: the weighted builder table and the `generate` entry point.

Each dungeon level is made by one builder picked at random from
`BUILDER_TABLE`. Some levels are then fed through wave function collapse,
which keeps the local look of the level while rearranging it.

Available builders:
- Room based: "Simple Map", "BSP Dungeon Builder", "BSP Interior"
- Caves: "Cellular Automata", the "Drunkards Walk - *" and "DLA - *" presets
- Other: "Maze", "Voronoi Map Builder"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from delve import config
from delve.environment.map import Grid
from delve.util import rng
from delve.util.rng import RNG

from . import dla, drunkards_walk
from .base import (
    BuilderConfigurationError,
    BuilderSettings,
    GenerationError,
    MapBuilder,
)
from .bsp_dungeon import BspDungeonBuilder
from .bsp_interior import BspInteriorBuilder
from .cellular_automata import CellularAutomataBuilder
from .dla import DLABuilder
from .drunkards_walk import DrunkardsWalkBuilder
from .dungeon import RoomsAndCorridorsBuilder
from .maze import MazeBuilder
from .voronoi import VoronoiBuilder
from .wfc import WaveFunctionCollapseBuilder

logger = logging.getLogger(__name__)

_rng = rng.get("map.generation")


@dataclass(frozen=True)
class BuilderEntry:
    """One row of the level table."""

    name: str
    weight: int
    builder_class: type[MapBuilder]
    settings: BuilderSettings | None = None
    # Whether the result may be resynthesized with wave function collapse.
    wfc_compatible: bool = True

    def create(self, depth: int, *, rng: RNG, record_history: bool) -> MapBuilder:
        builder = self.builder_class.construct(
            depth, rng=rng, record_history=record_history
        )
        if self.settings is not None:
            builder = builder.configure(self.settings)
        return builder


BUILDER_TABLE: tuple[BuilderEntry, ...] = (
    BuilderEntry("BSP Dungeon Builder", 4, BspDungeonBuilder),
    BuilderEntry("Simple Map", 4, RoomsAndCorridorsBuilder, wfc_compatible=False),
    BuilderEntry("BSP Interior", 2, BspInteriorBuilder),
    BuilderEntry("Cellular Automata", 2, CellularAutomataBuilder),
    BuilderEntry(
        "Drunkards Walk - Open Area",
        1,
        DrunkardsWalkBuilder,
        drunkards_walk.OPEN_AREA,
    ),
    BuilderEntry(
        "Drunkards Walk - Open Halls",
        4,
        DrunkardsWalkBuilder,
        drunkards_walk.OPEN_HALLS,
    ),
    BuilderEntry(
        "Drunkards Walk - Winding Passages",
        4,
        DrunkardsWalkBuilder,
        drunkards_walk.WINDING_PASSAGES,
    ),
    BuilderEntry(
        "Drunkards Walk - Fat Passages",
        4,
        DrunkardsWalkBuilder,
        drunkards_walk.FAT_PASSAGES,
    ),
    BuilderEntry(
        "Drunkards Walk - Fearful Symmetry",
        4,
        DrunkardsWalkBuilder,
        drunkards_walk.FEARFUL_SYMMETRY,
    ),
    BuilderEntry("Maze", 2, MazeBuilder, wfc_compatible=False),
    BuilderEntry("DLA - Walk Inwards", 4, DLABuilder, dla.WALK_INWARDS),
    BuilderEntry("DLA - Walk Outwards", 1, DLABuilder, dla.WALK_OUTWARDS),
    BuilderEntry("DLA - Central Attractor", 1, DLABuilder, dla.CENTRAL_ATTRACTOR),
    BuilderEntry("DLA - Insectoid", 1, DLABuilder, dla.INSECTOID),
    BuilderEntry("Voronoi Map Builder", 1, VoronoiBuilder),
)


def builder_names() -> list[str]:
    return [entry.name for entry in BUILDER_TABLE]


def get_entry(name: str) -> BuilderEntry:
    """Look up a table row by name.

    Raises:
        BuilderConfigurationError: If the name is not in the table.
    """
    for entry in BUILDER_TABLE:
        if entry.name == name:
            return entry
    raise BuilderConfigurationError(f"Unknown builder name: {name!r}")


def create_builder(
    name: str,
    depth: int,
    *,
    rng: RNG | None = None,
    record_history: bool = False,
) -> MapBuilder:
    """Create a configured builder for one table entry.

    Raises:
        BuilderConfigurationError: If the name is not in the table.
    """
    return get_entry(name).create(
        depth, rng=rng if rng is not None else _rng, record_history=record_history
    )


def generate(
    depth: int,
    *,
    rng: RNG | None = None,
    record_history: bool | None = None,
    builder_name: str | None = None,
    use_wfc: bool | None = None,
) -> Grid:
    """Generate a finished dungeon level.

    Args:
        depth: Dungeon depth the level is built for.
        rng: Random source. Defaults to the "map.generation" stream.
        record_history: Record debug snapshots. Defaults to
            `config.SHOW_MAPGEN_VISUALIZER`.
        builder_name: Use this table entry instead of a weighted random pick.
        use_wfc: Force (True) or suppress (False) wave function collapse
            instead of the one-in-three roll. Entries that are not WFC
            compatible are never resynthesized.

    Returns:
        A grid with both stairs placed, every floor tile reachable from the
        entry and spawn regions filled in.

    Raises:
        BuilderConfigurationError: If ``builder_name`` is not in the table.
        GenerationError: If every attempt failed.
    """
    if rng is None:
        rng = _rng
    if record_history is None:
        record_history = config.SHOW_MAPGEN_VISUALIZER
    forced_entry = get_entry(builder_name) if builder_name is not None else None

    last_error: GenerationError | None = None
    for attempt in range(1, config.MAX_GENERATION_ATTEMPTS + 1):
        entry = forced_entry or rng.choices(
            BUILDER_TABLE, weights=[e.weight for e in BUILDER_TABLE]
        )[0]
        logger.debug(f"Depth {depth}: building '{entry.name}' (attempt {attempt})")

        try:
            grid = entry.create(depth, rng=rng, record_history=record_history).build()
        except GenerationError as exc:
            logger.warning(f"'{entry.name}' failed: {exc}")
            last_error = exc
            continue

        roll_wfc = rng.randint(1, config.WFC_CHANCE_SIDES) == 1
        if entry.wfc_compatible and (use_wfc if use_wfc is not None else roll_wfc):
            grid = _resynthesize(grid, rng)
        return grid

    assert last_error is not None
    raise last_error


def _resynthesize(source: Grid, rng: RNG) -> Grid:
    """Run wave function collapse over ``source``, keeping it on failure."""
    builder = WaveFunctionCollapseBuilder.construct(
        source.depth,
        rng=rng,
        record_history=source.record_history,
        width=source.width,
        height=source.height,
    ).with_source(source)
    try:
        return builder.build()
    except GenerationError as exc:
        logger.warning(f"Wave function collapse failed, keeping source level: {exc}")
        return source
