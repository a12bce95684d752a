"""Level builders for Delve.

This package provides interchangeable builders behind the `MapBuilder`
interface:
- Room based: RoomsAndCorridorsBuilder, BspDungeonBuilder, BspInteriorBuilder
- Organic: CellularAutomataBuilder, DrunkardsWalkBuilder, DLABuilder
- Other: MazeBuilder, VoronoiBuilder

And a post-processor that resynthesizes a finished level:
- WaveFunctionCollapseBuilder

`generate` picks a builder from the weighted level table and runs it.
"""

# base must load before the builders: the connectivity analyzer imports its
# error types while the builder modules are still being imported.
from .base import (
    BuilderConfigurationError,
    BuilderSettings,
    DLAAlgorithm,
    DrunkSpawnMode,
    GenerationError,
    MapBuilder,
    Symmetry,
)
from .bsp_dungeon import BspDungeonBuilder
from .bsp_interior import BspInteriorBuilder
from .cellular_automata import CellularAutomataBuilder
from .dla import DLABuilder
from .drunkards_walk import DrunkardsWalkBuilder
from .dungeon import RoomsAndCorridorsBuilder
from .factory import BUILDER_TABLE, BuilderEntry, create_builder, generate
from .maze import MazeBuilder
from .voronoi import VoronoiBuilder
from .wfc import WaveFunctionCollapseBuilder, WFCContradiction

__all__ = [
    "BUILDER_TABLE",
    "BspDungeonBuilder",
    "BspInteriorBuilder",
    "BuilderConfigurationError",
    "BuilderEntry",
    "BuilderSettings",
    "CellularAutomataBuilder",
    "DLAAlgorithm",
    "DLABuilder",
    "DrunkSpawnMode",
    "DrunkardsWalkBuilder",
    "GenerationError",
    "MapBuilder",
    "MazeBuilder",
    "RoomsAndCorridorsBuilder",
    "Symmetry",
    "VoronoiBuilder",
    "WFCContradiction",
    "WaveFunctionCollapseBuilder",
    "create_builder",
    "generate",
]
