from __future__ import annotations

import json

import numpy as np

from delve.environment.map import Grid
from delve.environment.tile_types import TileType


def make_grid(**kwargs) -> Grid:
    grid = Grid(10, 6, depth=3, **kwargs)
    grid.tiles[2:5, 2:4] = TileType.FLOOR
    grid.invalidate_caches()
    return grid


class TestGridIndexing:
    """Flat indices are row-major, matching a Fortran-order ravel."""

    def test_xy_idx_round_trip(self) -> None:
        grid = Grid(10, 6)
        assert grid.xy_idx(3, 2) == 23
        assert grid.idx_xy(23) == (3, 2)

    def test_flat_tiles_match_xy_idx(self) -> None:
        grid = make_grid()
        flat = grid.flat_tiles()
        for x, y in [(2, 2), (4, 3), (0, 0), (9, 5)]:
            assert flat[grid.xy_idx(x, y)] == grid.tiles[x, y]

    def test_in_bounds(self) -> None:
        grid = Grid(10, 6)
        assert grid.in_bounds(0, 0)
        assert grid.in_bounds(9, 5)
        assert not grid.in_bounds(10, 5)
        assert not grid.in_bounds(-1, 0)


class TestGridQueries:
    def test_new_grid_is_all_wall(self) -> None:
        grid = Grid(10, 6)
        assert grid.count(TileType.WALL) == 60
        assert grid.tiles.flags.f_contiguous

    def test_classify_and_blocked(self) -> None:
        grid = make_grid()
        assert grid.classify(2, 2) is TileType.FLOOR
        assert grid.classify(0, 0) is TileType.WALL
        assert not grid.is_blocked(3, 3)
        assert grid.is_blocked(0, 0)

    def test_transparency_and_tile_names(self) -> None:
        grid = make_grid()
        assert grid.transparent[2, 2]
        assert not grid.transparent[0, 0]
        assert grid.tile_name(2, 2) == "Floor"
        assert grid.tile_name(0, 0) == "Wall"

    def test_blocked_cache_is_invalidated(self) -> None:
        grid = make_grid()
        assert grid.is_blocked(7, 1)
        grid.tiles[7, 1] = TileType.FLOOR
        grid.invalidate_caches()
        assert not grid.is_blocked(7, 1)

    def test_stairs_are_recorded_and_drawn(self) -> None:
        grid = make_grid()
        grid.set_upstairs((2, 2))
        grid.set_downstairs((4, 3))
        assert grid.entry_point() == (2, 2)
        assert grid.exit_point() == (4, 3)
        assert grid.classify(2, 2) is TileType.UP_STAIRS
        assert grid.classify(4, 3) is TileType.DOWN_STAIRS

    def test_floor_fraction(self) -> None:
        assert make_grid().floor_fraction() == 6 / 60

    def test_render_ascii(self) -> None:
        grid = make_grid()
        grid.set_upstairs((2, 2))
        lines = grid.render_ascii().splitlines()
        assert len(lines) == 6
        assert lines[0] == "#" * 10
        assert lines[2] == "##<..#####"


class TestHistory:
    """Debug snapshots are only kept when recording is enabled."""

    def test_disabled_by_default(self) -> None:
        grid = make_grid()
        grid.take_snapshot()
        assert grid.history == []

    def test_snapshot_is_a_copy(self) -> None:
        grid = make_grid(record_history=True)
        grid.take_snapshot()
        grid.tiles[0, 0] = TileType.FLOOR
        assert grid.history[0][0, 0] == TileType.WALL

    def test_history_limit(self) -> None:
        grid = make_grid(record_history=True, history_limit=3)
        for _ in range(5):
            grid.take_snapshot()
        assert len(grid.history) == 3

    def test_copy_is_deep(self) -> None:
        grid = make_grid(record_history=True)
        grid.take_snapshot()
        grid.regions = {0: [22, 23]}
        clone = grid.copy()

        clone.tiles[5, 5] = TileType.FLOOR
        clone.regions[0].append(24)
        clone.history[0][0, 0] = TileType.FLOOR

        assert grid.tiles[5, 5] == TileType.WALL
        assert grid.regions == {0: [22, 23]}
        assert grid.history[0][0, 0] == TileType.WALL


class TestPersistence:
    """to_dict/from_dict round-trip the level and drop the debug history."""

    def test_round_trip_through_json(self) -> None:
        grid = make_grid(record_history=True)
        grid.set_upstairs((2, 2))
        grid.set_downstairs((4, 3))
        grid.regions = {-5: [23, 24], 7: [33]}
        grid.blood_stains = {24}
        grid.revealed[3, 3] = True
        grid.take_snapshot()

        restored = Grid.from_dict(json.loads(json.dumps(grid.to_dict())))

        assert (restored.width, restored.height, restored.depth) == (10, 6, 3)
        np.testing.assert_array_equal(restored.tiles, grid.tiles)
        np.testing.assert_array_equal(restored.revealed, grid.revealed)
        np.testing.assert_array_equal(restored.visible, grid.visible)
        assert restored.upstairs == (2, 2)
        assert restored.downstairs == (4, 3)
        assert restored.regions == {-5: [23, 24], 7: [33]}
        assert restored.blood_stains == {24}
        assert restored.history == []
        assert "history" not in grid.to_dict()

    def test_restored_tiles_keep_fortran_layout(self) -> None:
        restored = Grid.from_dict(make_grid().to_dict())
        assert restored.tiles.flags.f_contiguous
        assert restored.classify(3, 3) is TileType.FLOOR
