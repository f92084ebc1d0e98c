"""Feature carving: rectangular rooms, circular chambers and the fallback carve.

All stamps write PATH and clip to the interior, so the wall ring survives.
Carving may leave disconnected pockets; that is accepted here and only
noticed by the orchestrator's floor check.
"""
from __future__ import annotations

import random
from typing import Dict, List, Optional, Tuple

from ..logging_utils import get_logger
from .cells import Grid2D, grid_size, is_interior
from .config import CaveParameters
from .connectivity import carve_corridor
from .metrics import bump
from .tiles import PATH

log = get_logger("cavegen.features")

FALLBACK_ROOMS = 3
FALLBACK_ROOM_SIZE = (5, 15)  # randrange bounds


def carve_rectangle(grid: Grid2D, start_x: int, start_y: int, width: int, height: int) -> None:
    map_w, map_h = grid_size(grid)
    for x in range(start_x, start_x + width):
        for y in range(start_y, start_y + height):
            if is_interior(x, y, map_w, map_h):
                grid[x][y] = PATH


def carve_circle(grid: Grid2D, center_x: int, center_y: int, radius: int) -> None:
    map_w, map_h = grid_size(grid)
    r2 = radius * radius
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            if dx * dx + dy * dy <= r2:
                x, y = center_x + dx, center_y + dy
                if is_interior(x, y, map_w, map_h):
                    grid[x][y] = PATH


def carve_rooms(
    grid: Grid2D, params: CaveParameters, rng: random.Random, metrics: Optional[Dict] = None
) -> List[Tuple[int, int, int, int]]:
    """Stamp ``number_of_rooms`` rectangles; returns (x, y, w, h) for each."""
    width, height = grid_size(grid)
    lo, hi = params.room_size_range
    rooms = []
    for i in range(params.number_of_rooms):
        room_w = min(rng.randrange(lo, hi + 1), width - 3)
        room_h = min(rng.randrange(lo, hi + 1), height - 3)
        start_x = rng.randrange(1, width - room_w - 1)
        start_y = rng.randrange(1, height - room_h - 1)
        carve_rectangle(grid, start_x, start_y, room_w, room_h)
        rooms.append((start_x, start_y, room_w, room_h))
        log.debug(event="room_carved", index=i + 1, w=room_w, h=room_h, x=start_x, y=start_y)
    bump(metrics or {}, "rooms_carved", len(rooms))
    return rooms


def carve_chambers(
    grid: Grid2D, params: CaveParameters, rng: random.Random, metrics: Optional[Dict] = None
) -> List[Tuple[int, int, int]]:
    """Stamp ``number_of_chambers`` discs; returns (cx, cy, radius) for each."""
    width, height = grid_size(grid)
    lo, hi = params.chamber_radius_range
    max_radius = (min(width, height) - 3) // 2
    chambers = []
    for i in range(params.number_of_chambers):
        radius = min(rng.randrange(lo, hi + 1), max_radius)
        center_x = rng.randrange(radius + 1, width - radius - 1)
        center_y = rng.randrange(radius + 1, height - radius - 1)
        carve_circle(grid, center_x, center_y, radius)
        chambers.append((center_x, center_y, radius))
        log.debug(event="chamber_carved", index=i + 1, radius=radius, x=center_x, y=center_y)
    bump(metrics or {}, "chambers_carved", len(chambers))
    return chambers


def generate_features(
    grid: Grid2D, params: CaveParameters, rng: random.Random, metrics: Optional[Dict] = None
) -> None:
    if not (params.generate_rooms or params.generate_chambers):
        return
    if params.generate_rooms:
        rooms = carve_rooms(grid, params, rng, metrics)
        log.info(event="rooms_generated", count=len(rooms))
    if params.generate_chambers:
        chambers = carve_chambers(grid, params, rng, metrics)
        log.info(event="chambers_generated", count=len(chambers))


def force_clear_central_area(grid: Grid2D, rng: random.Random) -> None:
    """Last-resort carve: a central chamber, a few nearby rooms and four spokes.

    Guarantees floor space regardless of what the grid held before.
    """
    width, height = grid_size(grid)
    cx, cy = width // 2, height // 2
    log.warn(event="force_clear_central_area", center_x=cx, center_y=cy)
    carve_circle(grid, cx, cy, min(width, height) // 6)
    for _ in range(FALLBACK_ROOMS):
        offset_x = rng.randrange(-(width // 4), width // 4)
        offset_y = rng.randrange(-(height // 4), height // 4)
        size = rng.randrange(*FALLBACK_ROOM_SIZE)
        carve_rectangle(grid, cx + offset_x, cy + offset_y, size, size)
    carve_corridor(grid, (cx, cy), (cx + width // 5, cy))
    carve_corridor(grid, (cx, cy), (cx, cy + height // 5))
    carve_corridor(grid, (cx, cy), (cx - width // 5, cy))
    carve_corridor(grid, (cx, cy), (cx, cy - height // 5))


__all__ = [
    "carve_rectangle",
    "carve_circle",
    "carve_rooms",
    "carve_chambers",
    "generate_features",
    "force_clear_central_area",
]
