"""Spawn region partitioning.

Entity placement picks a region first and a floor cell inside it second, so
regions only ever list plain ``FLOOR`` cells and no cell belongs to two
regions. Room-based builders use their rooms as regions. Organic builders
cluster the floor with cellular noise, which yields blob-shaped areas of
roughly even size regardless of the cave layout.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from delve import config
from delve.environment.map import Grid
from delve.environment.tile_types import TileType
from delve.types import RegionID, TileIndex
from delve.util.coordinates import Rect
from delve.util.rng import RNG

# Keeps lattice coordinates positive before they are hashed.
_LATTICE_OFFSET = 1024


class CellularNoise:
    """Worley-style cell value noise.

    Space is divided into unit lattice cells, each holding one feature point
    jittered away from the cell centre. A sample takes the value of the cell
    whose feature point is closest under Manhattan distance, so the output is a
    patchwork of flat-valued cells in ``[-1.0, 1.0)``.
    """

    def __init__(
        self,
        seed: int,
        frequency: float = config.REGION_NOISE_FREQUENCY,
        jitter: float = config.REGION_NOISE_JITTER,
    ) -> None:
        self.seed = seed
        self.frequency = frequency
        self.jitter = jitter

    def _hash(self, cx: np.ndarray, cy: np.ndarray) -> np.ndarray:
        h = (cx + _LATTICE_OFFSET).astype(np.uint64) * np.uint64(0x9E3779B1)
        h ^= (cy + _LATTICE_OFFSET).astype(np.uint64) * np.uint64(0x85EBCA77)
        h ^= np.uint64(self.seed) * np.uint64(0xC2B2AE3D)
        h &= np.uint64(0xFFFFFFFF)
        h ^= h >> np.uint64(15)
        h = (h * np.uint64(0x2C1B3C6D)) & np.uint64(0xFFFFFFFF)
        h ^= h >> np.uint64(12)
        h = (h * np.uint64(0x297A2D39)) & np.uint64(0xFFFFFFFF)
        h ^= h >> np.uint64(15)
        return h

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Evaluate the noise at arrays of tile coordinates."""
        px = np.asarray(xs, dtype=np.float64) * self.frequency
        py = np.asarray(ys, dtype=np.float64) * self.frequency
        base_x = np.floor(px).astype(np.int64)
        base_y = np.floor(py).astype(np.int64)

        best_distance = np.full(px.shape, np.inf)
        best_hash = np.zeros(px.shape, dtype=np.uint64)
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                cx = base_x + dx
                cy = base_y + dy
                h = self._hash(cx, cy)
                jx = ((h >> np.uint64(16)) & np.uint64(0xFF)).astype(np.float64)
                jy = ((h >> np.uint64(24)) & np.uint64(0xFF)).astype(np.float64)
                fx = cx + 0.5 + (jx / 255.0 - 0.5) * 2.0 * self.jitter
                fy = cy + 0.5 + (jy / 255.0 - 0.5) * 2.0 * self.jitter
                distance = np.abs(fx - px) + np.abs(fy - py)
                closer = distance < best_distance
                best_distance = np.where(closer, distance, best_distance)
                best_hash = np.where(closer, h, best_hash)

        return (best_hash & np.uint64(0xFFFF)).astype(np.float64) / 32768.0 - 1.0

    def get(self, x: int, y: int) -> float:
        return float(self.sample(np.array([x]), np.array([y]))[0])


def rooms_to_regions(
    grid: Grid, rooms: Sequence[Rect]
) -> dict[RegionID, list[TileIndex]]:
    """One region per room, keyed by the room's position in ``rooms``.

    Each region lists the floor cells inside the room's closed span in scan
    order. A cell shared by two spans stays with the earlier room.
    """
    regions: dict[RegionID, list[TileIndex]] = {}
    claimed: set[TileIndex] = set()
    for region_id, room in enumerate(rooms):
        cells: list[TileIndex] = []
        for y in range(max(room.y1, 0), min(room.y2, grid.height - 1) + 1):
            for x in range(max(room.x1, 0), min(room.x2, grid.width - 1) + 1):
                idx = grid.xy_idx(x, y)
                if grid.tiles[x, y] == TileType.FLOOR and idx not in claimed:
                    claimed.add(idx)
                    cells.append(idx)
        regions[region_id] = cells
    return regions


def noise_regions(grid: Grid, rng: RNG) -> dict[RegionID, list[TileIndex]]:
    """Cluster the interior floor of ``grid`` by quantized cellular noise."""
    noise = CellularNoise(rng.randint(1, 65536))

    xs, ys = np.meshgrid(
        np.arange(1, grid.width - 1), np.arange(1, grid.height - 1), indexing="ij"
    )
    values = noise.sample(xs, ys)
    buckets = np.trunc(values * config.REGION_NOISE_SCALE).astype(np.int64)
    interior_floor = grid.tiles[1:-1, 1:-1] == TileType.FLOOR

    regions: dict[RegionID, list[TileIndex]] = {}
    # Scan order: rows outer, columns inner.
    for y in range(grid.height - 2):
        for x in range(grid.width - 2):
            if interior_floor[x, y]:
                bucket = int(buckets[x, y])
                regions.setdefault(bucket, []).append(grid.xy_idx(x + 1, y + 1))
    return regions
