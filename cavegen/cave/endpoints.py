"""Start/end placement on the finished cave."""
from __future__ import annotations

import math
import random
from typing import List, NamedTuple, Optional, Tuple

from ..logging_utils import get_logger
from .cells import Coord2D, Grid2D
from .connectivity import find_regions, get_accessible_cells
from .tiles import END, START

log = get_logger("cavegen.endpoints")

MIN_ENDPOINT_DISTANCE = 30
MAX_DISTANCE_RETRIES = 20


class Placement(NamedTuple):
    start: Optional[Coord2D]
    end: Optional[Coord2D]
    error: Optional[str] = None

    @property
    def placed(self) -> bool:
        return self.start is not None and self.end is not None


def _distance(a: Coord2D, b: Coord2D) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def find_distant_points(cells: List[Coord2D], rng: random.Random) -> Tuple[Coord2D, Coord2D]:
    """Pick a start from the first quarter and an end from the last quarter of ``cells``.

    ``cells`` is a BFS visitation order, so the quarters lie at opposite ends of
    the search. When the pair is closer than MIN_ENDPOINT_DISTANCE, retry with
    two unrestricted (distinct) indices up to MAX_DISTANCE_RETRIES times; the
    last pair tried is kept either way.
    """
    n = len(cells)
    if n < 2:
        raise ValueError("need at least two cells to place endpoints")
    quarter = n // 4
    start_index = rng.randrange(0, quarter) if quarter > 0 else 0
    end_index = rng.randrange(3 * n // 4, n)
    start, end = cells[start_index], cells[end_index]
    distance = _distance(start, end)
    attempts = 0
    while distance < MIN_ENDPOINT_DISTANCE and attempts < MAX_DISTANCE_RETRIES:
        start_index = rng.randrange(n)
        end_index = rng.randrange(n - 1)
        if end_index >= start_index:
            end_index += 1
        start, end = cells[start_index], cells[end_index]
        distance = _distance(start, end)
        attempts += 1
    log.debug(event="distant_points", distance=distance, retries=attempts)
    return start, end


def place_start_and_end(grid: Grid2D, rng: random.Random) -> Placement:
    """Mark START and END inside the largest region.

    Failures are logged and reported through ``Placement.error``; the grid is
    left without markers in that case.
    """
    regions = find_regions(grid)
    if not regions:
        log.error(event="placement_failed", reason="no_regions")
        return Placement(None, None, "no_regions")
    largest = max(regions, key=lambda r: r.size)
    cells = get_accessible_cells(grid, largest.seed)
    if len(cells) < 2:
        log.error(event="placement_failed", reason="insufficient_accessible_cells", cells=len(cells))
        return Placement(None, None, "insufficient_accessible_cells")
    start, end = find_distant_points(cells, rng)
    # Both cells come from a PATH-only search, so no other tile type is overwritten.
    grid[start[0]][start[1]] = START
    grid[end[0]][end[1]] = END
    log.info(event="endpoints_placed", start_x=start[0], start_y=start[1], end_x=end[0], end_y=end[1])
    return Placement(start, end)


__all__ = ["Placement", "find_distant_points", "place_start_and_end", "MIN_ENDPOINT_DISTANCE"]
