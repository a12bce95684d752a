from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import numpy as np

from delve import config
from delve.environment import tile_types
from delve.environment.tile_types import TileType
from delve.types import RegionID, TileCoord, TileIndex, WorldTilePos


class Grid:
    """A single dungeon level.

    Tiles are stored as a uint8 array of `TileType` values shaped
    (width, height) in Fortran order, so ``tiles.ravel(order="F")`` lists the
    cells in row-major scan order and the flat index of (x, y) is
    ``y * width + x``. Region tables and blood stains use these flat indices.
    """

    def __init__(
        self,
        width: TileCoord = config.MAP_WIDTH,
        height: TileCoord = config.MAP_HEIGHT,
        depth: int = 1,
        *,
        record_history: bool = False,
        history_limit: int = config.MAPGEN_HISTORY_LIMIT,
    ) -> None:
        self.width: TileCoord = width
        self.height: TileCoord = height
        self.depth = depth

        self.tiles = np.full(
            (width, height), fill_value=TileType.WALL, dtype=np.uint8, order="F"
        )

        # Visibility state belongs to gameplay; generation never writes it.
        self.revealed = np.full(
            (width, height), fill_value=False, dtype=bool, order="F"
        )
        self.visible = np.full((width, height), fill_value=False, dtype=bool, order="F")

        self.upstairs: WorldTilePos | None = None
        self.downstairs: WorldTilePos | None = None
        self.regions: dict[RegionID, list[TileIndex]] = {}
        self.blood_stains: set[TileIndex] = set()

        # Debug playback of the generation process.
        self.record_history = record_history
        self.history_limit = history_limit
        self.history: list[np.ndarray] = []

        self._blocked_cache: np.ndarray | None = None

    # -------------------------------------------------------------------------
    # Indexing
    # -------------------------------------------------------------------------

    def xy_idx(self, x: TileCoord, y: TileCoord) -> TileIndex:
        return y * self.width + x

    def idx_xy(self, idx: TileIndex) -> WorldTilePos:
        return (idx % self.width, idx // self.width)

    def in_bounds(self, x: TileCoord, y: TileCoord) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    # -------------------------------------------------------------------------
    # Read interface
    # -------------------------------------------------------------------------

    def classify(self, x: TileCoord, y: TileCoord) -> TileType:
        return TileType(int(self.tiles[x, y]))

    @property
    def blocked(self) -> np.ndarray:
        """Boolean (width, height) array, True where the tile is a wall."""
        if self._blocked_cache is None:
            self.populate_blocked()
        assert self._blocked_cache is not None
        return self._blocked_cache

    def populate_blocked(self) -> None:
        """Recompute the blocked map from the current tiles."""
        self._blocked_cache = tile_types.get_blocked_map(self.tiles)

    def invalidate_caches(self) -> None:
        """Call this whenever `self.tiles` changes to clear derived maps."""
        self._blocked_cache = None

    def is_blocked(self, x: TileCoord, y: TileCoord) -> bool:
        return bool(self.blocked[x, y])

    @property
    def transparent(self) -> np.ndarray:
        """Boolean (width, height) array, True where line of sight passes."""
        return tile_types.get_transparent_map(self.tiles)

    def tile_name(self, x: TileCoord, y: TileCoord) -> str:
        return tile_types.get_tile_type_name(int(self.tiles[x, y]))

    def entry_point(self) -> WorldTilePos | None:
        return self.upstairs

    def exit_point(self) -> WorldTilePos | None:
        return self.downstairs

    def iter_regions(self) -> Iterator[tuple[RegionID, list[TileIndex]]]:
        yield from self.regions.items()

    def count(self, tile_type: TileType) -> int:
        return int(np.count_nonzero(self.tiles == tile_type))

    def floor_fraction(self) -> float:
        """Share of all cells that are plain floor."""
        return self.count(TileType.FLOOR) / (self.width * self.height)

    def flat_tiles(self) -> np.ndarray:
        """Tiles in scan order, indexed by flat cell index."""
        return self.tiles.ravel(order="F")

    # -------------------------------------------------------------------------
    # Mutation helpers used during generation
    # -------------------------------------------------------------------------

    def set_upstairs(self, pos: WorldTilePos) -> None:
        self.upstairs = pos
        self.tiles[pos] = TileType.UP_STAIRS
        self.invalidate_caches()

    def set_downstairs(self, pos: WorldTilePos) -> None:
        self.downstairs = pos
        self.tiles[pos] = TileType.DOWN_STAIRS
        self.invalidate_caches()

    def take_snapshot(self, tiles: np.ndarray | None = None) -> None:
        """Append a copy of the tiles (or of ``tiles``) to the history.

        Does nothing unless recording is enabled and the history has room.
        """
        if self.record_history and len(self.history) < self.history_limit:
            source = self.tiles if tiles is None else tiles
            self.history.append(np.array(source, dtype=np.uint8, order="F"))

    def copy(self) -> Grid:
        """Deep copy, including history."""
        clone = Grid(
            self.width,
            self.height,
            self.depth,
            record_history=self.record_history,
            history_limit=self.history_limit,
        )
        clone.tiles = self.tiles.copy(order="F")
        clone.revealed = self.revealed.copy(order="F")
        clone.visible = self.visible.copy(order="F")
        clone.upstairs = self.upstairs
        clone.downstairs = self.downstairs
        clone.regions = {rid: list(cells) for rid, cells in self.regions.items()}
        clone.blood_stains = set(self.blood_stains)
        clone.history = [snapshot.copy(order="F") for snapshot in self.history]
        return clone

    def render_ascii(self) -> str:
        """Render the tiles as lines of glyphs, top row first."""
        glyphs = tile_types.get_glyph_map(self.tiles)
        return "\n".join("".join(glyphs[:, y]) for y in range(self.height))

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict. The debug history is dropped."""
        return {
            "width": self.width,
            "height": self.height,
            "depth": self.depth,
            "tiles": self.tiles.ravel(order="F").tolist(),
            "revealed": self.revealed.ravel(order="F").tolist(),
            "visible": self.visible.ravel(order="F").tolist(),
            "upstairs": list(self.upstairs) if self.upstairs is not None else None,
            "downstairs": (
                list(self.downstairs) if self.downstairs is not None else None
            ),
            # JSON object keys are always strings.
            "regions": {str(rid): list(cells) for rid, cells in self.regions.items()},
            "blood_stains": sorted(self.blood_stains),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Grid:
        """Rebuild a grid produced by `to_dict`."""
        width = data["width"]
        height = data["height"]
        grid = cls(width, height, data["depth"])

        shape = (width, height)
        grid.tiles = np.asarray(data["tiles"], dtype=np.uint8).reshape(
            shape, order="F"
        )
        grid.tiles = np.asfortranarray(grid.tiles)
        grid.revealed = np.asfortranarray(
            np.asarray(data["revealed"], dtype=bool).reshape(shape, order="F")
        )
        grid.visible = np.asfortranarray(
            np.asarray(data["visible"], dtype=bool).reshape(shape, order="F")
        )

        upstairs = data.get("upstairs")
        downstairs = data.get("downstairs")
        grid.upstairs = tuple(upstairs) if upstairs is not None else None
        grid.downstairs = tuple(downstairs) if downstairs is not None else None

        grid.regions = {
            int(rid): list(cells) for rid, cells in data.get("regions", {}).items()
        }
        grid.blood_stains = set(data.get("blood_stains", []))
        return grid
