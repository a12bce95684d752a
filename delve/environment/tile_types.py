"""
Tile types for dungeon levels using the flyweight pattern.

This module defines:
- `TileType`: the closed set of tile kinds a generated level may contain. Its
  integer values are stored directly in a `Grid`'s uint8 tile array.
- `TileTypeData`: the intrinsic properties of a *kind* of tile (walkable,
  transparent, name, ASCII glyph). One row per `TileType`, indexed by value.
- Helper functions to convert a whole tile array into a boolean property map
  or a glyph map in one vectorized lookup. Generation uses these for the
  blocked map and the command line preview.
"""

from enum import IntEnum

import numpy as np


class TileType(IntEnum):
    """The kinds of tile a generated level may hold."""

    WALL = 0
    FLOOR = 1
    DOWN_STAIRS = 2
    UP_STAIRS = 3


# Intrinsic data for a *type* of tile (flyweight).
TileTypeData = np.dtype(
    [
        ("walkable", bool),
        ("transparent", bool),  # Line of sight
        ("display_name", "U32"),  # Human-readable name (max 32 chars)
        ("glyph", "U1"),  # ASCII rendering used by debug tooling
    ]
)

# --- Tile Type Registration ---

# Indexed by TileType value.
_registered_tile_type_data_list: list[np.ndarray] = []


def register_tile_type(
    tile_type: TileType, tile_type_data_instance: np.ndarray
) -> None:
    """
    Registers the flyweight row for a tile type.

    Tile types must be registered in value order so that the row index of each
    type equals its integer value.

    Raises:
        ValueError: If the type is registered out of order or twice.
    """
    if int(tile_type) != len(_registered_tile_type_data_list):
        raise ValueError(
            f"Tile type {tile_type.name} registered out of order "
            f"(expected ID {len(_registered_tile_type_data_list)})."
        )
    _registered_tile_type_data_list.append(tile_type_data_instance)


def make_tile_type_data(
    *,  # Forces keyword arguments - prevents bugs from wrong parameter order
    walkable: bool,
    transparent: bool,
    display_name: str,
    glyph: str,
) -> np.ndarray:
    """Helper function to create a TileTypeData instance."""
    return np.array((walkable, transparent, display_name, glyph), dtype=TileTypeData)


# --- Define and Register Core Tile Types ---
# WALL must come first: new grids are filled with zeros.

register_tile_type(
    TileType.WALL,
    make_tile_type_data(
        walkable=False, transparent=False, display_name="Wall", glyph="#"
    ),
)
register_tile_type(
    TileType.FLOOR,
    make_tile_type_data(
        walkable=True, transparent=True, display_name="Floor", glyph="."
    ),
)
register_tile_type(
    TileType.DOWN_STAIRS,
    make_tile_type_data(
        walkable=True, transparent=True, display_name="Down Stairs", glyph=">"
    ),
)
register_tile_type(
    TileType.UP_STAIRS,
    make_tile_type_data(
        walkable=True, transparent=True, display_name="Up Stairs", glyph="<"
    ),
)


# --- Pre-calculated Property Arrays for Efficient Lookups ---
# Built after every tile type has been registered above.

_tile_type_properties_walkable = np.array(
    [t["walkable"] for t in _registered_tile_type_data_list], dtype=bool
)
_tile_type_properties_transparent = np.array(
    [t["transparent"] for t in _registered_tile_type_data_list], dtype=bool
)
_tile_type_properties_display_name = np.array(
    [t["display_name"] for t in _registered_tile_type_data_list], dtype="U32"
)
_tile_type_properties_glyph = np.array(
    [t["glyph"] for t in _registered_tile_type_data_list], dtype="U1"
)

# --- Public Helper Functions for Accessing Tile Properties ---


def get_walkable_map(tile_map: np.ndarray) -> np.ndarray:
    """
    Converts a map of tile types into a boolean map of walkability.
    True means the tile at that position is walkable.
    """
    return _tile_type_properties_walkable[tile_map]


def get_blocked_map(tile_map: np.ndarray) -> np.ndarray:
    """True where movement is blocked (the tile is a wall)."""
    return ~get_walkable_map(tile_map)


def get_transparent_map(tile_map: np.ndarray) -> np.ndarray:
    """
    Converts a map of tile types into a boolean map of transparency.
    True means the tile at that position does not block line of sight.
    """
    return _tile_type_properties_transparent[tile_map]


def get_glyph_map(tile_map: np.ndarray) -> np.ndarray:
    """Converts a map of tile types into an array of single-character glyphs."""
    return _tile_type_properties_glyph[tile_map]


def get_tile_type_name(tile_type_id: int) -> str:
    """
    Get the human-readable name of a tile type by its ID.

    Args:
        tile_type_id: The integer value of the tile type

    Returns:
        The name of the tile type in a human-readable format (e.g., "Wall", "Floor")
    """
    if 0 <= tile_type_id < len(_tile_type_properties_display_name):
        return str(_tile_type_properties_display_name[tile_type_id])
    return f"Unknown Tile (ID: {tile_type_id})"
