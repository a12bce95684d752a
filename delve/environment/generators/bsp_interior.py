"""Binary space partition interior: a building filled wall to wall with rooms."""

from __future__ import annotations

from delve import config
from delve.environment.generators.base import MapBuilder
from delve.environment.generators.common import draw_corridor, finish_room_level
from delve.environment.map import Grid
from delve.environment.tile_types import TileType
from delve.types import WorldTilePos
from delve.util.coordinates import Rect


class BspInteriorBuilder(MapBuilder):
    """Recursively bisect the map into rooms separated by one-tile walls.

    Every leaf of the partition becomes a room, and rooms are linked in the
    order the partition produced them.
    """

    min_room_size = config.BSP_INTERIOR_MIN_ROOM_SIZE

    def build(self) -> Grid:
        grid = self.grid
        rooms: list[Rect] = []
        self._add_subrects(rooms, Rect(1, 1, grid.width - 2, grid.height - 2))

        for room in rooms:
            grid.tiles[room.x1 : room.x2, room.y1 : room.y2] = TileType.FLOOR
            grid.invalidate_caches()
            self.take_snapshot()

        for room, next_room in zip(rooms, rooms[1:]):
            start_x, start_y = self._random_point_in(room)
            end_x, end_y = self._random_point_in(next_room)
            draw_corridor(grid, start_x, start_y, end_x, end_y)
            self.take_snapshot()

        finish_room_level(grid, rooms)
        return grid

    def _random_point_in(self, room: Rect) -> WorldTilePos:
        x = room.x1 + self.rng.randint(1, room.width) - 1
        y = room.y1 + self.rng.randint(1, room.height) - 1
        return (x, y)

    def _add_subrects(self, rects: list[Rect], rect: Rect) -> None:
        """Split ``rect`` in two and recurse into halves that are still large.

        The parent is dropped from ``rects`` once split, leaving only leaves.
        """
        if rects:
            rects.pop()

        width = rect.width
        height = rect.height
        half_width = width // 2
        half_height = height // 2

        if self.rng.randint(1, 4) <= 2:
            # Side by side, with a wall column between the halves.
            first = Rect(rect.x1, rect.y1, half_width - 1, height)
            second = Rect(rect.x1 + half_width, rect.y1, half_width, height)
            halves_split = half_width > self.min_room_size
        else:
            # Stacked, with a wall row between the halves.
            first = Rect(rect.x1, rect.y1, width, half_height - 1)
            second = Rect(rect.x1, rect.y1 + half_height, width, half_height)
            halves_split = half_height > self.min_room_size

        rects.append(first)
        if halves_split:
            self._add_subrects(rects, first)
        rects.append(second)
        if halves_split:
            self._add_subrects(rects, second)
