"""Tests for the chunk Wave Function Collapse solver.

These run the solver over hand-written pattern sets so the adjacency rules
are known exactly, independent of pattern extraction from real levels.
"""

from __future__ import annotations

import contextlib
import random

import numpy as np
import pytest

from delve.environment.generators.wfc.patterns import MapChunk
from delve.environment.generators.wfc.solver import (
    DIR_OFFSETS,
    DIRECTIONS,
    ChunkSolver,
    WFCContradiction,
)
from delve.environment.map import Grid
from delve.environment.tile_types import TileType

CHUNK = 2

# =============================================================================
# Test Pattern Set
# =============================================================================

A, B, C = 0, 1, 2


def create_test_patterns() -> list[MapChunk]:
    """Three 2x2 patterns forming a gradient A <-> B <-> C.

    A and C may never touch directly; B goes next to anything.
    """
    a_or_b = {A, B}
    anything = {A, B, C}
    b_or_c = {B, C}

    def chunk(fill: TileType, count: int, neighbors: set[int]) -> MapChunk:
        return MapChunk(
            pattern=np.full((CHUNK, CHUNK), fill, dtype=np.uint8, order="F"),
            count=count,
            compatible_with={direction: set(neighbors) for direction in DIRECTIONS},
        )

    return [
        chunk(TileType.FLOOR, 3, a_or_b),
        chunk(TileType.WALL, 2, anything),
        chunk(TileType.FLOOR, 1, b_or_c),
    ]


def solved_patterns(solver: ChunkSolver) -> list[list[int]]:
    """Pattern id of every chunk cell, indexed [cx][cy]."""
    result = []
    for cx in range(solver.chunks_x):
        column = []
        for cy in range(solver.chunks_y):
            candidates = solver.candidates(cx, cy)
            assert len(candidates) == 1
            column.append(candidates.pop())
        result.append(column)
    return result


def run_solver(chunks_x: int, chunks_y: int, seed: int, **kwargs) -> ChunkSolver:
    grid = Grid(chunks_x * CHUNK, chunks_y * CHUNK)
    solver = ChunkSolver(
        create_test_patterns(),
        CHUNK,
        grid.width,
        grid.height,
        random.Random(seed),
        **kwargs,
    )
    solver.solve(grid)
    return solver


# =============================================================================
# Basic Solver Functionality
# =============================================================================


class TestSolverBasicFunctionality:
    """Tests for ChunkSolver basic operation."""

    def test_every_cell_collapses_to_one_pattern(self) -> None:
        solver = run_solver(8, 6, seed=42)
        assert solver.is_collapsed()
        assert solver.possible
        assert solver.finished
        result = solved_patterns(solver)
        assert len(result) == 8
        assert all(len(column) == 6 for column in result)

    def test_solver_respects_adjacency_rules(self) -> None:
        """Every adjacent pair satisfies the pattern's compatible_with sets."""
        patterns = create_test_patterns()
        solver = run_solver(10, 10, seed=123)
        result = solved_patterns(solver)

        for x in range(solver.chunks_x):
            for y in range(solver.chunks_y):
                current = result[x][y]
                for direction in DIRECTIONS:
                    dx, dy = DIR_OFFSETS[direction]
                    nx, ny = x + dx, y + dy
                    if not (0 <= nx < solver.chunks_x and 0 <= ny < solver.chunks_y):
                        continue
                    assert result[nx][ny] in patterns[current].compatible_with[
                        direction
                    ], f"({x},{y})->{direction} holds {result[nx][ny]}"

    def test_a_and_c_never_adjacent(self) -> None:
        solver = run_solver(12, 12, seed=456, use_entropy=False)
        result = solved_patterns(solver)
        for x in range(solver.chunks_x):
            for y in range(solver.chunks_y):
                if result[x][y] != A:
                    continue
                for dx, dy in DIR_OFFSETS.values():
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < solver.chunks_x and 0 <= ny < solver.chunks_y:
                        assert result[nx][ny] != C

    def test_render_writes_patterns_into_grid(self) -> None:
        grid = Grid(4 * CHUNK, 3 * CHUNK)
        patterns = create_test_patterns()
        solver = ChunkSolver(
            patterns, CHUNK, grid.width, grid.height, random.Random(5)
        )
        solver.solve(grid)

        for cx in range(solver.chunks_x):
            for cy in range(solver.chunks_y):
                (pattern_id,) = solver.candidates(cx, cy)
                block = grid.tiles[
                    cx * CHUNK : (cx + 1) * CHUNK, cy * CHUNK : (cy + 1) * CHUNK
                ]
                np.testing.assert_array_equal(block, patterns[pattern_id].pattern)

    def test_partial_chunks_are_left_alone(self) -> None:
        """Tiles past the last whole chunk are not part of the wave."""
        grid = Grid(2 * CHUNK + 1, 2 * CHUNK + 1)
        solver = ChunkSolver(
            create_test_patterns(), CHUNK, grid.width, grid.height, random.Random(9)
        )
        assert len(solver.wave) == 4
        solver.solve(grid)
        assert (grid.tiles[-1, :] == TileType.WALL).all()
        assert (grid.tiles[:, -1] == TileType.WALL).all()

    def test_needs_patterns(self) -> None:
        with pytest.raises(ValueError):
            ChunkSolver([], CHUNK, 10, 10, random.Random(0))


# =============================================================================
# Contradiction Handling
# =============================================================================


class TestContradictionHandling:
    """Tests for contradiction detection and iteration limits."""

    def test_empty_cell_ends_run_as_impossible(self) -> None:
        grid = Grid(3 * CHUNK, 3 * CHUNK)
        solver = ChunkSolver(
            create_test_patterns(), CHUNK, grid.width, grid.height, random.Random(1)
        )
        solver.wave[4] = 0

        assert solver.iteration(grid) is True
        assert solver.possible is False
        with pytest.raises(WFCContradiction):
            solver.solve(grid)

    def test_incompatible_patterns_contradict(self) -> None:
        """Two patterns that refuse every neighbour cannot tile a 2x1 grid."""
        lonely = [
            MapChunk(
                pattern=np.zeros((CHUNK, CHUNK), dtype=np.uint8),
                compatible_with={direction: set() for direction in DIRECTIONS},
            )
        ]
        grid = Grid(2 * CHUNK, CHUNK)
        solver = ChunkSolver(lonely, CHUNK, grid.width, grid.height, random.Random(2))
        with pytest.raises(WFCContradiction):
            solver.solve(grid)

    def test_propagate_iteration_limit(self) -> None:
        """Propagation finishes or raises; it never hangs."""
        grid = Grid(5 * CHUNK, 5 * CHUNK)
        solver = ChunkSolver(
            create_test_patterns(), CHUNK, grid.width, grid.height, random.Random(3)
        )
        solver.wave[solver.cell_index(2, 2)] = 1 << C

        with contextlib.suppress(WFCContradiction):
            solver._propagate([solver.cell_index(2, 2)])

        for direction in DIRECTIONS:
            dx, dy = DIR_OFFSETS[direction]
            assert A not in solver.candidates(2 + dx, 2 + dy)


# =============================================================================
# Determinism
# =============================================================================


class TestDeterminism:
    def test_same_seed_same_result(self) -> None:
        first = solved_patterns(run_solver(9, 7, seed=77))
        second = solved_patterns(run_solver(9, 7, seed=77))
        assert first == second

    def test_weights_follow_pattern_counts(self) -> None:
        solver = run_solver(2, 2, seed=0)
        assert solver.weights == [3.0, 2.0, 1.0]
