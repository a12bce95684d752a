"""
Configuration constants.

Centralizes all magic numbers and configuration values used by map generation.
Organized by functional area for easy maintenance.
"""

from typing import Literal

# =============================================================================
# GENERAL
# =============================================================================

# RANDOM_SEED = "burrito1"
RANDOM_SEED = None

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# =============================================================================
# MAP GENERATION
# =============================================================================

# Map size
MAP_WIDTH = 80
MAP_HEIGHT = 43

# Room generation (rooms and corridors)
MAX_ROOMS = 30
MIN_ROOM_SIZE = 6
MAX_ROOM_SIZE = 10

# BSP dungeon: number of sub-rectangle placement attempts
BSP_DUNGEON_ATTEMPTS = 240
BSP_DUNGEON_MARGIN = 2

# BSP interior: halves at or below this size are not split further
BSP_INTERIOR_MIN_ROOM_SIZE = 8

# Cellular automata
CELLULAR_FLOOR_ROLL = 55  # d100 roll above this makes the cell floor (45% floor)
CELLULAR_ITERATIONS = 15

# Maze: snapshot the coarse maze every N backtracker steps
MAZE_SNAPSHOT_INTERVAL = 50

# Voronoi
VORONOI_SEEDS = 64

# Walker budgets. Drunkard's walk and DLA stop at these caps even if the
# floor target has not been reached.
DRUNKARD_MAX_WALKERS = 10_000
DLA_MAX_ITERATIONS = 20_000

# =============================================================================
# CONNECTIVITY
# =============================================================================

# Dijkstra search radius; floor further away than this is treated as unreachable.
DIJKSTRA_MAX_DEPTH = 200.0
# Integer step costs used by tcod (1.0 cardinal, 1.45 diagonal).
DIJKSTRA_CARDINAL_COST = 100
DIJKSTRA_DIAGONAL_COST = 145

# =============================================================================
# SPAWN REGIONS
# =============================================================================

REGION_NOISE_FREQUENCY = 0.08
REGION_NOISE_JITTER = 0.45
REGION_NOISE_SCALE = 10240.0

# =============================================================================
# WAVE FUNCTION COLLAPSE
# =============================================================================

WFC_CHUNK_SIZE = 8
WFC_INCLUDE_MIRRORS = True
WFC_INCLUDE_ROTATIONS = True
# Pick the lowest-entropy cell instead of the first uncollapsed cell.
WFC_USE_ENTROPY = True
# Full solver restarts before giving up on resynthesis.
WFC_MAX_ATTEMPTS = 100

# =============================================================================
# ORCHESTRATION
# =============================================================================

# One in WFC_CHANCE_SIDES generated levels is resynthesized with WFC.
WFC_CHANCE_SIDES = 3
# Fresh builder selections tried before a generation failure is re-raised.
MAX_GENERATION_ATTEMPTS = 10

# =============================================================================
# DEBUG VISUALIZER
# =============================================================================

# Record tile snapshots during generation for playback.
SHOW_MAPGEN_VISUALIZER = False
MAPGEN_HISTORY_LIMIT = 2_000
