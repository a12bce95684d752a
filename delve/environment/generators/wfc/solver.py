"""Chunk-level Wave Function Collapse solver.

The output map is divided into a grid of chunk cells. Every cell starts out
allowing every pattern; the solver repeatedly collapses one cell to a single
pattern and propagates the adjacency rules until every cell is decided or
some cell runs out of candidates.

Performance notes:
    Candidate sets are Python ints used as bitsets (bit ``i`` set means pattern
    ``i`` is still possible). Pattern sets extracted from real levels run to
    hundreds of patterns, so fixed-width numpy masks do not fit. For every
    pattern and direction the set of allowed neighbours is precomputed as a
    bitmask, which turns a propagation step into a handful of ORs and ANDs.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from delve import config
from delve.environment.map import Grid
from delve.util.rng import RNG

if TYPE_CHECKING:
    from delve.environment.generators.wfc.patterns import MapChunk


class WFCContradiction(Exception):
    """Raised when WFC reaches an unsolvable state.

    This occurs when constraint propagation eliminates all possibilities
    for a cell, meaning no valid solution exists with the current choices.
    """


# Direction utilities
DIRECTIONS = ["N", "E", "S", "W"]
OPPOSITE_DIR = {"N": "S", "E": "W", "S": "N", "W": "E"}
DIR_OFFSETS = {"N": (0, -1), "E": (1, 0), "S": (0, 1), "W": (-1, 0)}


def _bits(mask: int) -> list[int]:
    """Indices of the set bits of ``mask``, lowest first."""
    result = []
    while mask:
        low = mask & -mask
        result.append(low.bit_length() - 1)
        mask ^= low
    return result


class ChunkSolver:
    """Wave Function Collapse over a grid of pattern-sized chunk cells.

    Each call to `iteration` makes one decision:
    1. Pick the next undecided cell (lowest entropy, or first in scan order)
    2. Collapse it to one pattern by weighted random choice
    3. Propagate the adjacency rules until nothing changes

    A contradiction ends the run with ``possible`` set to False; callers throw
    the solver away and start again with a fresh one.
    """

    def __init__(
        self,
        constraints: list[MapChunk],
        chunk_size: int,
        width: int,
        height: int,
        rng: RNG,
        *,
        use_entropy: bool = config.WFC_USE_ENTROPY,
    ) -> None:
        """Initialize the solver.

        Args:
            constraints: Patterns with their ``compatible_with`` sets filled in.
            chunk_size: Side length of every pattern, in tiles.
            width: Output map width in tiles.
            height: Output map height in tiles.
            rng: Random source for collapse choices.
            use_entropy: Collapse the lowest-entropy cell first instead of the
                first undecided cell in scan order.
        """
        if not constraints:
            raise ValueError("ChunkSolver needs at least one pattern")

        self.constraints = constraints
        self.chunk_size = chunk_size
        self.chunks_x = width // chunk_size
        self.chunks_y = height // chunk_size
        self.rng = rng
        self.use_entropy = use_entropy

        self.num_patterns = len(constraints)
        self.all_patterns_mask = (1 << self.num_patterns) - 1
        self.weights = [float(chunk.count) for chunk in constraints]

        # wave[cy * chunks_x + cx] holds the candidate bitset of that cell.
        self.wave = [self.all_patterns_mask] * (self.chunks_x * self.chunks_y)
        self.possible = True
        self.finished = False
        self._primed = False

        self._precompute_propagation_masks()

    def _precompute_propagation_masks(self) -> None:
        """For each direction and pattern, the bitset of allowed neighbours."""
        self.propagation_masks: dict[str, list[int]] = {}
        for direction in DIRECTIONS:
            masks = []
            for chunk in self.constraints:
                mask = 0
                for neighbor_id in chunk.compatible_with.get(direction, ()):
                    mask |= 1 << neighbor_id
                masks.append(mask)
            self.propagation_masks[direction] = masks

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def cell_index(self, cx: int, cy: int) -> int:
        return cy * self.chunks_x + cx

    def is_collapsed(self) -> bool:
        return all(mask.bit_count() == 1 for mask in self.wave)

    def candidates(self, cx: int, cy: int) -> set[int]:
        """Pattern ids still possible for a chunk cell."""
        return set(_bits(self.wave[self.cell_index(cx, cy)]))

    def _entropy(self, mask: int) -> float:
        weights = [self.weights[i] for i in _bits(mask)]
        total = sum(weights)
        return math.log(total) - sum(w * math.log(w) for w in weights) / total

    def _select_cell(self) -> int | None:
        """Index of the next cell to collapse, or None when all are decided."""
        best_idx = None
        best_entropy = math.inf
        for idx, mask in enumerate(self.wave):
            if mask.bit_count() <= 1:
                continue
            if not self.use_entropy:
                return idx
            entropy = self._entropy(mask)
            if entropy < best_entropy:
                best_idx = idx
                best_entropy = entropy
        return best_idx

    # -------------------------------------------------------------------------
    # Solving
    # -------------------------------------------------------------------------

    def _collapse(self, idx: int) -> None:
        options = _bits(self.wave[idx])
        chosen = self.rng.choices(
            options, weights=[self.weights[i] for i in options], k=1
        )[0]
        self.wave[idx] = 1 << chosen

    def _allowed_neighbors(self, mask: int, direction: str) -> int:
        masks = self.propagation_masks[direction]
        allowed = 0
        for pattern_id in _bits(mask):
            allowed |= masks[pattern_id]
        return allowed

    def _propagate(self, start: list[int]) -> None:
        """Narrow the neighbours of the ``start`` cells until nothing changes.

        Raises:
            WFCContradiction: If a cell is left with no candidates.
        """
        stack = list(start)
        in_stack = set(start)

        iterations = 0
        max_iterations = len(self.wave) * (self.num_patterns + 1) * 4

        while stack:
            iterations += 1
            if iterations >= max_iterations:
                raise WFCContradiction("Propagation exceeded maximum iterations")

            idx = stack.pop()
            in_stack.discard(idx)
            cx = idx % self.chunks_x
            cy = idx // self.chunks_x
            current_mask = self.wave[idx]

            for direction in DIRECTIONS:
                dx, dy = DIR_OFFSETS[direction]
                nx, ny = cx + dx, cy + dy
                if not (0 <= nx < self.chunks_x and 0 <= ny < self.chunks_y):
                    continue

                neighbor_idx = self.cell_index(nx, ny)
                neighbor_mask = self.wave[neighbor_idx]
                new_mask = neighbor_mask & self._allowed_neighbors(
                    current_mask, direction
                )

                if new_mask != neighbor_mask:
                    if new_mask == 0:
                        raise WFCContradiction(
                            f"No valid patterns at chunk ({nx}, {ny}) after "
                            "propagation"
                        )
                    self.wave[neighbor_idx] = new_mask
                    if neighbor_idx not in in_stack:
                        stack.append(neighbor_idx)
                        in_stack.add(neighbor_idx)

    def iteration(self, grid: Grid) -> bool:
        """Make one collapse decision and render decided chunks into ``grid``.

        Returns:
            True once the run is over, either fully collapsed or contradicted.
            Check ``possible`` to tell the two apart.
        """
        if self.finished:
            return True

        if not self._primed:
            # Drop patterns that can never have a neighbour on an inner side.
            self._primed = True
            try:
                self._propagate(list(range(len(self.wave))))
            except WFCContradiction:
                self.possible = False
                self.finished = True
                return True

        idx = self._select_cell()
        if idx is None:
            self.finished = True
            self.render(grid)
            return True

        try:
            self._collapse(idx)
            self._propagate([idx])
        except WFCContradiction:
            self.possible = False
            self.finished = True
            return True

        self.render(grid)
        if self.is_collapsed():
            self.finished = True
        return self.finished

    def solve(self, grid: Grid) -> None:
        """Run iterations to completion.

        Raises:
            WFCContradiction: If the run hit a contradiction.
        """
        while not self.iteration(grid):
            pass
        if not self.possible:
            raise WFCContradiction("Solver reached an impossible state")

    def render(self, grid: Grid) -> None:
        """Copy every decided chunk's pattern into ``grid`` at its offset."""
        n = self.chunk_size
        for idx, mask in enumerate(self.wave):
            if mask.bit_count() != 1:
                continue
            cx = idx % self.chunks_x
            cy = idx // self.chunks_x
            pattern = self.constraints[mask.bit_length() - 1].pattern
            grid.tiles[cx * n : (cx + 1) * n, cy * n : (cy + 1) * n] = pattern
        grid.invalidate_caches()
