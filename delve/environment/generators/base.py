"""Base classes and shared types for map builders."""

from __future__ import annotations

import abc
import copy
from dataclasses import dataclass, fields
from enum import Enum, auto
from typing import ClassVar, Self

import numpy as np

from delve import config
from delve.environment.map import Grid
from delve.types import TileCoord
from delve.util import rng
from delve.util.rng import RNG

_rng = rng.get("map.generation")


# =============================================================================
# ERRORS
# =============================================================================


class GenerationError(Exception):
    """A builder could not produce a valid level.

    Raised for defects such as no room being placed, no reachable exit, no start
    cell, or wave function collapse running out of attempts.
    """


class BuilderConfigurationError(GenerationError, ValueError):
    """A builder was asked for by an unknown name or given incomplete settings."""


# =============================================================================
# SETTINGS
# =============================================================================


class DrunkSpawnMode(Enum):
    STARTING_POINT = auto()
    RANDOM = auto()


class DLAAlgorithm(Enum):
    WALK_INWARDS = auto()
    WALK_OUTWARDS = auto()
    CENTRAL_ATTRACTOR = auto()


class Symmetry(Enum):
    NONE = auto()
    HORIZONTAL = auto()
    VERTICAL = auto()
    BOTH = auto()


@dataclass(frozen=True)
class BuilderSettings:
    """Tuning knobs for the walker builders. Unused fields stay ``None``."""

    spawn_mode: DrunkSpawnMode | None = None
    lifetime: int | None = None
    floor_percent: float | None = None
    algorithm: DLAAlgorithm | None = None
    symmetry: Symmetry | None = None
    brush_size: int | None = None

    def missing(self, required: tuple[str, ...]) -> list[str]:
        """Names from ``required`` that have no value."""
        present = {f.name for f in fields(self) if getattr(self, f.name) is not None}
        return [name for name in required if name not in present]


# =============================================================================
# BUILDER CONTRACT
# =============================================================================


class MapBuilder(abc.ABC):
    """Abstract base class for level building algorithms.

    A builder owns exactly one grid. ``configure`` and ``with_source`` return
    reconfigured copies with their own grid, so a builder can be used as a
    template for several variants.
    """

    # Settings fields that must be present for ``configure`` to succeed.
    REQUIRED_SETTINGS: ClassVar[tuple[str, ...]] = ()
    DEFAULT_SETTINGS: ClassVar[BuilderSettings | None] = None

    def __init__(
        self, grid: Grid, rng: RNG, settings: BuilderSettings | None = None
    ) -> None:
        self.grid = grid
        self.rng = rng
        self.settings = settings

    @classmethod
    def construct(
        cls,
        depth: int,
        *,
        rng: RNG | None = None,
        record_history: bool = False,
        width: TileCoord = config.MAP_WIDTH,
        height: TileCoord = config.MAP_HEIGHT,
    ) -> Self:
        """Create a builder with default settings over a fresh wall-filled grid."""
        grid = Grid(width, height, depth, record_history=record_history)
        return cls(grid, rng if rng is not None else _rng, cls.DEFAULT_SETTINGS)

    def _clone(self) -> Self:
        clone = copy.copy(self)
        clone.grid = self.grid.copy()
        return clone

    def configure(self, settings: BuilderSettings) -> Self:
        """Return a copy of this builder using ``settings``.

        Raises:
            BuilderConfigurationError: If a required setting is missing.
        """
        missing = settings.missing(self.REQUIRED_SETTINGS)
        if missing:
            raise BuilderConfigurationError(
                f"{type(self).__name__} requires settings: {', '.join(missing)}"
            )
        clone = self._clone()
        clone.settings = settings
        return clone

    def with_source(self, grid: Grid) -> Self:
        """Hand a finished level to a post-processing builder.

        Only post-processors read the source; other builders return an
        unchanged copy.
        """
        return self._clone()

    def take_snapshot(self, tiles: np.ndarray | None = None) -> None:
        self.grid.take_snapshot(tiles)

    @abc.abstractmethod
    def build(self) -> Grid:
        """Run the algorithm and return the finished level."""
        raise NotImplementedError
