from __future__ import annotations

# =============================================================================
# TILE-BASED COORDINATE SYSTEMS (Always integers)
# =============================================================================


TileCoord = int  # Always integer tile position

# Game world coordinates - absolute positions on the map
WorldTileCoord = TileCoord  # Example: x=5, y=3
WorldTilePos = tuple[
    WorldTileCoord, WorldTileCoord
]  # Example: (5, 3) = tile 5,3 on map

# Flat cell index into a map's tile sequence: y * width + x
TileIndex = int

# =============================================================================
# GENERATION-RELATED TYPES
# =============================================================================

# Seed accepted by random.Random and the RNG provider.
RandomSeed = int | str | None

# Region identifier. Opaque: only used as a dictionary key.
RegionID = int
