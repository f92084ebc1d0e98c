"""Region discovery and connectivity repair.

Regions are maximal 4-connected runs of PATH cells. They are never stored on
the grid; callers recompute them whenever connectivity has to be inspected.
"""
from __future__ import annotations

import random
from collections import deque
from typing import Dict, List, NamedTuple, Optional

from ..logging_utils import get_logger
from .cells import ORTHOGONAL, Coord2D, Grid2D, Region, grid_size, is_interior
from .metrics import bump
from .tiles import PATH, WALL

log = get_logger("cavegen.connectivity")

HALLWAY_AREA_DIVISOR = 5000
HALLWAY_MIN_LENGTH = 5
HALLWAY_MAX_LENGTH = 20  # exclusive


class RepairSummary(NamedTuple):
    regions: int
    filled: int
    connected: int
    hallways: int


def _flood(grid: Grid2D, start: Coord2D, visited: List[List[bool]]) -> int:
    width, height = grid_size(grid)
    sx, sy = start
    q = deque([start])
    visited[sx][sy] = True
    size = 0
    while q:
        x, y = q.popleft()
        size += 1
        for dx, dy in ORTHOGONAL:
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height and not visited[nx][ny] and grid[nx][ny] == PATH:
                visited[nx][ny] = True
                q.append((nx, ny))
    return size


def find_regions(grid: Grid2D) -> List[Region]:
    """Scan interior cells row by row and flood-fill each unvisited PATH cell.

    The sum of the returned sizes equals the number of interior PATH cells.
    """
    width, height = grid_size(grid)
    visited = [[False] * height for _ in range(width)]
    regions: List[Region] = []
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            if grid[x][y] == PATH and not visited[x][y]:
                regions.append(Region(x, y, _flood(grid, (x, y), visited)))
    return regions


def fill_region(grid: Grid2D, seed: Coord2D) -> int:
    """Turn the PATH region containing ``seed`` back into WALL; returns cells filled."""
    width, height = grid_size(grid)
    sx, sy = seed
    if grid[sx][sy] != PATH:
        return 0
    q = deque([seed])
    grid[sx][sy] = WALL
    filled = 0
    while q:
        x, y = q.popleft()
        filled += 1
        for dx, dy in ORTHOGONAL:
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height and grid[nx][ny] == PATH:
                grid[nx][ny] = WALL
                q.append((nx, ny))
    return filled


def carve_corridor(grid: Grid2D, a: Coord2D, b: Coord2D) -> None:
    """L-shaped corridor: horizontal run on a's row, then vertical run on b's column.

    Cells are overwritten to PATH whatever they held; border cells are skipped.
    """
    width, height = grid_size(grid)
    (x1, y1), (x2, y2) = a, b
    for x in range(min(x1, x2), max(x1, x2) + 1):
        if is_interior(x, y1, width, height):
            grid[x][y1] = PATH
    for y in range(min(y1, y2), max(y1, y2) + 1):
        if is_interior(x2, y, width, height):
            grid[x2][y] = PATH


def carve_hallways(grid: Grid2D, rng: random.Random) -> int:
    """Sprinkle straight PATH runs (one per 5000 cells) for extra loops."""
    width, height = grid_size(grid)
    count = width * height // HALLWAY_AREA_DIVISOR
    for _ in range(count):
        x = rng.randrange(1, width - 1)
        y = rng.randrange(1, height - 1)
        horizontal = rng.randrange(2) == 0
        length = rng.randrange(HALLWAY_MIN_LENGTH, HALLWAY_MAX_LENGTH)
        if horizontal:
            for j in range(length):
                if x + j >= width - 1:
                    break
                grid[x + j][y] = PATH
        else:
            for j in range(length):
                if y + j >= height - 1:
                    break
                grid[x][y + j] = PATH
    return count


def ensure_connectivity(
    grid: Grid2D,
    min_room_size: int,
    rng: random.Random,
    metrics: Optional[Dict] = None,
) -> RepairSummary:
    """Keep the largest region, drop undersized ones and link the rest to it.

    Undersized regions are filled before any corridor is carved so that a
    corridor crossing a small pocket never drags the main region into the fill.
    """
    metrics = metrics if metrics is not None else {}
    regions = find_regions(grid)
    filled = connected = 0
    if len(regions) <= 1:
        log.info(event="connectivity", regions=len(regions), status="already_connected")
    else:
        regions.sort(key=lambda r: r.size, reverse=True)
        main = regions[0]
        log.info(event="connectivity", regions=len(regions), largest=main.size)
        for region in regions[1:]:
            if region.size < min_room_size:
                fill_region(grid, region.seed)
                filled += 1
        for region in regions[1:]:
            if region.size >= min_room_size:
                carve_corridor(grid, main.seed, region.seed)
                connected += 1
        log.info(event="connectivity_repaired", filled=filled, connected=connected)
    hallways = carve_hallways(grid, rng)
    log.info(event="hallways_added", count=hallways)
    bump(metrics, "regions_found", len(regions))
    bump(metrics, "regions_filled", filled)
    bump(metrics, "regions_connected", connected)
    bump(metrics, "hallways_carved", hallways)
    return RepairSummary(len(regions), filled, connected, hallways)


def get_accessible_cells(grid: Grid2D, start: Coord2D) -> List[Coord2D]:
    """BFS from ``start`` over interior PATH cells, in visitation order."""
    width, height = grid_size(grid)
    visited = {start}
    cells: List[Coord2D] = []
    q = deque([start])
    while q:
        x, y = q.popleft()
        cells.append((x, y))
        for dx, dy in ORTHOGONAL:
            nx, ny = x + dx, y + dy
            if (nx, ny) not in visited and is_interior(nx, ny, width, height) and grid[nx][ny] == PATH:
                visited.add((nx, ny))
                q.append((nx, ny))
    return cells


__all__ = [
    "RepairSummary",
    "find_regions",
    "fill_region",
    "carve_corridor",
    "carve_hallways",
    "ensure_connectivity",
    "get_accessible_cells",
]
