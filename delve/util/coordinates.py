"""Tile-space geometry helpers used by the room-based builders."""

from __future__ import annotations

from collections.abc import Iterator

from delve.types import TileCoord, WorldTilePos


class Rect:
    """Axis-aligned rectangle in tile coordinates.

    Immutable once created; compared and hashed by its corners.
    """

    __slots__ = ("x1", "x2", "y1", "y2")

    x1: TileCoord
    y1: TileCoord
    x2: TileCoord
    y2: TileCoord

    def __init__(self, x: TileCoord, y: TileCoord, w: TileCoord, h: TileCoord) -> None:
        object.__setattr__(self, "x1", x)
        object.__setattr__(self, "y1", y)
        object.__setattr__(self, "x2", x + w)
        object.__setattr__(self, "y2", y + h)

    @classmethod
    def from_bounds(
        cls, x1: TileCoord, y1: TileCoord, x2: TileCoord, y2: TileCoord
    ) -> Rect:
        """Create a Rect from corner coordinates (x1, y1, x2, y2)."""
        return cls(x1, y1, x2 - x1, y2 - y1)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"Rect is immutable; cannot set {name!r}")

    @property
    def width(self) -> TileCoord:
        return self.x2 - self.x1

    @property
    def height(self) -> TileCoord:
        return self.y2 - self.y1

    def center(self) -> WorldTilePos:
        return ((self.x1 + self.x2) // 2, (self.y1 + self.y2) // 2)

    def intersects(self, other: Rect) -> bool:
        """True if the closed spans overlap on both axes."""
        return (
            self.x1 <= other.x2
            and self.x2 >= other.x1
            and self.y1 <= other.y2
            and self.y2 >= other.y1
        )

    def grow(self, margin: TileCoord) -> Rect:
        """Return a copy expanded by ``margin`` tiles on every side."""
        return Rect.from_bounds(
            self.x1 - margin, self.y1 - margin, self.x2 + margin, self.y2 + margin
        )

    def interior(self) -> Iterator[WorldTilePos]:
        """Yield the cells a carved room occupies: x1+1..=x2, y1+1..=y2."""
        for y in range(self.y1 + 1, self.y2 + 1):
            for x in range(self.x1 + 1, self.x2 + 1):
                yield (x, y)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rect):
            return NotImplemented
        return (self.x1, self.y1, self.x2, self.y2) == (
            other.x1,
            other.y1,
            other.x2,
            other.y2,
        )

    def __hash__(self) -> int:
        return hash((self.x1, self.y1, self.x2, self.y2))

    def __repr__(self) -> str:
        return f"Rect(x1={self.x1}, y1={self.y1}, x2={self.x2}, y2={self.y2})"


# =============================================================================
# BOUNDS CHECKING HELPERS
# =============================================================================


def is_valid_world_tile_pos(
    pos: WorldTilePos, map_width: TileCoord, map_height: TileCoord
) -> bool:
    """Check if world tile position is within map bounds."""
    x, y = pos
    return 0 <= x < map_width and 0 <= y < map_height
