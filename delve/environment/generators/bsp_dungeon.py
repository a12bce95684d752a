"""Binary space partition dungeon with rooms scattered in solid rock."""

from __future__ import annotations

import logging

from delve import config
from delve.environment.generators.base import MapBuilder
from delve.environment.generators.common import (
    apply_room_to_map,
    draw_corridor,
    finish_room_level,
)
from delve.environment.map import Grid
from delve.environment.tile_types import TileType
from delve.types import WorldTilePos
from delve.util.coordinates import Rect
from delve.util.rng import roll_dice

logger = logging.getLogger(__name__)


class BspDungeonBuilder(MapBuilder):
    """Carve rooms out of recursively quartered space.

    Starting from the whole map, the candidate list holds rectangles split
    into quadrants. Each attempt picks a candidate, cuts a random room out of
    it and keeps the room only if it sits in untouched rock with a margin to
    spare. Accepted rooms are quartered again, so later rooms tend to cluster
    near earlier ones. Rooms are then linked left to right.
    """

    attempts = config.BSP_DUNGEON_ATTEMPTS
    margin = config.BSP_DUNGEON_MARGIN

    def build(self) -> Grid:
        grid = self.grid
        rooms: list[Rect] = []
        rects: list[Rect] = []
        self._add_subrects(rects, Rect(2, 2, grid.width - 5, grid.height - 5))

        for _ in range(self.attempts):
            rect = self.rng.choice(rects)
            candidate = self._get_random_sub_rect(rect)

            if self._is_possible(candidate):
                apply_room_to_map(grid, candidate)
                rooms.append(candidate)
                self._add_subrects(rects, rect)
                self.take_snapshot()

        logger.debug(f"BSP placed {len(rooms)} rooms in {self.attempts} attempts")

        rooms.sort(key=lambda room: room.x1)
        for room, next_room in zip(rooms, rooms[1:]):
            start_x, start_y = self._random_point_in(room)
            end_x, end_y = self._random_point_in(next_room)
            draw_corridor(grid, start_x, start_y, end_x, end_y)
            self.take_snapshot()

        finish_room_level(grid, rooms)
        return grid

    def _random_point_in(self, room: Rect) -> WorldTilePos:
        """A random carved cell of ``room``."""
        x = room.x1 + self.rng.randint(1, room.width)
        y = room.y1 + self.rng.randint(1, room.height)
        return (x, y)

    @staticmethod
    def _add_subrects(rects: list[Rect], rect: Rect) -> None:
        """Append the four quadrants of ``rect``."""
        width = abs(rect.x1 - rect.x2)
        height = abs(rect.y1 - rect.y2)
        half_width = max(width // 2, 1)
        half_height = max(height // 2, 1)

        rects.append(Rect(rect.x1, rect.y1, half_width, half_height))
        rects.append(Rect(rect.x1, rect.y1 + half_height, half_width, half_height))
        rects.append(Rect(rect.x1 + half_width, rect.y1, half_width, half_height))
        rects.append(
            Rect(rect.x1 + half_width, rect.y1 + half_height, half_width, half_height)
        )

    def _get_random_sub_rect(self, rect: Rect) -> Rect:
        rect_width = abs(rect.x1 - rect.x2)
        rect_height = abs(rect.y1 - rect.y2)

        w = max(3, roll_dice(self.rng, 1, min(rect_width, 10)) - 1) + 1
        h = max(3, roll_dice(self.rng, 1, min(rect_height, 10)) - 1) + 1

        x = rect.x1 + roll_dice(self.rng, 1, 6) - 1
        y = rect.y1 + roll_dice(self.rng, 1, 6) - 1
        return Rect(x, y, w, h)

    def _is_possible(self, rect: Rect) -> bool:
        """True if ``rect`` plus its margin is inside the map and all rock."""
        expanded = rect.grow(self.margin)
        grid = self.grid
        if (
            expanded.x1 < 1
            or expanded.y1 < 1
            or expanded.x2 > grid.width - 2
            or expanded.y2 > grid.height - 2
        ):
            return False
        area = grid.tiles[expanded.x1 : expanded.x2 + 1, expanded.y1 : expanded.y2 + 1]
        return bool((area == TileType.WALL).all())
