"""Pattern extraction and adjacency constraints for chunk-based WFC.

A source level is cut into square chunks. Each distinct chunk (optionally with
its mirror images and rotations) becomes a pattern, weighted by how often it
occurs. Two patterns may sit side by side when the touching edges match tile
for tile.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from delve.environment.generators.wfc.solver import DIRECTIONS, OPPOSITE_DIR
from delve.environment.tile_types import TileType


@dataclass
class MapChunk:
    """A square tile pattern with its adjacency rules.

    Attributes:
        pattern: (chunk_size, chunk_size) tile array, indexed [x, y].
        count: How many times the pattern was extracted; used as its weight.
        edges: Direction ("N", "E", "S", "W") to the tiles along that edge.
        compatible_with: Direction to the ids of patterns that may be placed
            next to this one on that side.
    """

    pattern: np.ndarray
    count: int = 1
    edges: dict[str, bytes] = field(default_factory=dict)
    compatible_with: dict[str, set[int]] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return self.pattern.shape[0]


def chunk_edges(pattern: np.ndarray) -> dict[str, bytes]:
    """Edge tiles of a chunk. N/S edges run along x, E/W edges along y."""
    n = pattern.shape[0]
    return {
        "N": pattern[:, 0].tobytes(),
        "E": pattern[n - 1, :].tobytes(),
        "S": pattern[:, n - 1].tobytes(),
        "W": pattern[0, :].tobytes(),
    }


def _variants(
    chunk: np.ndarray, include_mirrors: bool, include_rotations: bool
) -> list[np.ndarray]:
    variants = [chunk]
    if include_mirrors:
        variants.append(chunk[::-1, :])
        variants.append(chunk[:, ::-1])
        variants.append(chunk[::-1, ::-1])
    if include_rotations:
        for base in list(variants):
            for k in (1, 2, 3):
                variants.append(np.rot90(base, k))
    return variants


def build_patterns(
    tiles: np.ndarray,
    chunk_size: int,
    include_mirrors: bool = True,
    include_rotations: bool = True,
) -> list[MapChunk]:
    """Return the distinct chunk patterns of ``tiles`` in first-seen order.

    Stairs are read as floor. Partial chunks along the right and bottom edges
    are ignored.
    """
    source = np.where(
        (tiles == TileType.UP_STAIRS) | (tiles == TileType.DOWN_STAIRS),
        TileType.FLOOR,
        tiles,
    ).astype(np.uint8)

    width, height = source.shape
    by_key: dict[bytes, MapChunk] = {}
    for cy in range(height // chunk_size):
        for cx in range(width // chunk_size):
            chunk = source[
                cx * chunk_size : (cx + 1) * chunk_size,
                cy * chunk_size : (cy + 1) * chunk_size,
            ]
            for variant in _variants(chunk, include_mirrors, include_rotations):
                pattern = np.asfortranarray(variant, dtype=np.uint8)
                key = pattern.tobytes(order="F")
                existing = by_key.get(key)
                if existing is not None:
                    existing.count += 1
                else:
                    by_key[key] = MapChunk(pattern=pattern, edges=chunk_edges(pattern))
    return list(by_key.values())


def patterns_to_constraints(patterns: list[MapChunk]) -> list[MapChunk]:
    """Fill in ``compatible_with`` for every pattern and return the list.

    Pattern ``b`` is compatible with pattern ``a`` in direction ``d`` when
    ``a``'s ``d`` edge equals ``b``'s opposite edge.
    """
    by_edge: dict[str, dict[bytes, set[int]]] = {d: {} for d in DIRECTIONS}
    for pattern_id, chunk in enumerate(patterns):
        for direction in DIRECTIONS:
            by_edge[direction].setdefault(chunk.edges[direction], set()).add(
                pattern_id
            )

    for chunk in patterns:
        chunk.compatible_with = {
            direction: set(
                by_edge[OPPOSITE_DIR[direction]].get(chunk.edges[direction], ())
            )
            for direction in DIRECTIONS
        }
    return patterns


def render_pattern_gallery(
    patterns: list[MapChunk], width: int, height: int
) -> list[np.ndarray]:
    """Lay the patterns out side by side on wall-filled pages.

    Returns one (width, height) tile array per page.
    """
    pages: list[np.ndarray] = []
    if patterns and patterns[0].size + 2 > min(width, height):
        return pages
    page = np.full((width, height), TileType.WALL, dtype=np.uint8, order="F")
    x = y = 1
    for chunk in patterns:
        n = chunk.size
        if x + n > width - 1:
            x = 1
            y += n + 1
        if y + n > height - 1:
            pages.append(page)
            page = np.full((width, height), TileType.WALL, dtype=np.uint8, order="F")
            x = y = 1
        page[x : x + n, y : y + n] = chunk.pattern
        x += n + 1
    pages.append(page)
    return pages
