"""Classic rooms-and-corridors dungeon."""

from __future__ import annotations

import logging

from delve import config
from delve.environment.generators.base import MapBuilder
from delve.environment.generators.common import (
    apply_room_to_map,
    connect_l_shaped,
    finish_room_level,
)
from delve.environment.map import Grid
from delve.util.coordinates import Rect

logger = logging.getLogger(__name__)


class RoomsAndCorridorsBuilder(MapBuilder):
    """Scatter non-overlapping rectangular rooms and chain them with L tunnels.

    Each accepted room is joined to the previously accepted one, so the rooms
    form a single connected chain. The entry is the first room's centre and the
    exit the last room's centre.
    """

    max_rooms = config.MAX_ROOMS
    min_size = config.MIN_ROOM_SIZE
    max_size = config.MAX_ROOM_SIZE

    def build(self) -> Grid:
        grid = self.grid
        rooms: list[Rect] = []

        for _ in range(self.max_rooms):
            w = self.rng.randrange(self.min_size, self.max_size)
            h = self.rng.randrange(self.min_size, self.max_size)
            x = self.rng.randint(1, grid.width - w - 2)
            y = self.rng.randint(1, grid.height - h - 2)
            new_room = Rect(x, y, w, h)

            if any(new_room.intersects(other) for other in rooms):
                continue

            apply_room_to_map(grid, new_room)
            if rooms:
                connect_l_shaped(
                    grid,
                    rooms[-1].center(),
                    new_room.center(),
                    horizontal_first=bool(self.rng.getrandbits(1)),
                )
            rooms.append(new_room)
            self.take_snapshot()

        logger.debug(f"Placed {len(rooms)} of {self.max_rooms} rooms")
        finish_room_level(grid, rooms)
        return grid
