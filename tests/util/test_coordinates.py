from __future__ import annotations

import pytest

from delve.util.coordinates import Rect, is_valid_world_tile_pos


class TestRect:
    """Rect geometry used by the room builders."""

    def test_corners_from_size(self) -> None:
        room = Rect(2, 3, 5, 4)
        assert (room.x1, room.y1, room.x2, room.y2) == (2, 3, 7, 7)
        assert room.width == 5
        assert room.height == 4

    def test_from_bounds_round_trips(self) -> None:
        assert Rect.from_bounds(1, 2, 6, 9) == Rect(1, 2, 5, 7)

    def test_center_uses_integer_division(self) -> None:
        assert Rect(0, 0, 5, 5).center() == (2, 2)
        assert Rect(10, 4, 6, 7).center() == (13, 7)

    def test_intersects_is_closed(self) -> None:
        """Rooms that only share an edge still count as overlapping."""
        a = Rect(0, 0, 4, 4)
        assert a.intersects(Rect(4, 4, 3, 3))
        assert a.intersects(Rect(2, 2, 1, 1))
        assert not a.intersects(Rect(5, 0, 3, 3))
        assert not a.intersects(Rect(0, 5, 3, 3))

    def test_grow(self) -> None:
        assert Rect(5, 5, 2, 2).grow(2) == Rect.from_bounds(3, 3, 9, 9)

    def test_interior_excludes_top_left_edge(self) -> None:
        cells = list(Rect(0, 0, 2, 2).interior())
        assert cells == [(1, 1), (2, 1), (1, 2), (2, 2)]

    def test_immutable_and_hashable(self) -> None:
        room = Rect(1, 1, 3, 3)
        with pytest.raises(AttributeError):
            room.x1 = 5  # type: ignore[misc]
        assert len({room, Rect(1, 1, 3, 3)}) == 1


def test_is_valid_world_tile_pos() -> None:
    assert is_valid_world_tile_pos((0, 0), 10, 5)
    assert is_valid_world_tile_pos((9, 4), 10, 5)
    assert not is_valid_world_tile_pos((10, 0), 10, 5)
    assert not is_valid_world_tile_pos((0, -1), 10, 5)
