"""Raw cave generation: grid init, random interior fill and cellular-automaton smoothing."""
from __future__ import annotations

import random
from typing import Dict, NamedTuple, Optional

from ..logging_utils import get_logger
from .cells import DIAGONAL, ORTHOGONAL, Grid2D, count_floor_tiles, fill_border, grid_size, new_grid
from .config import CaveParameters
from .metrics import bump
from .tiles import PATH, WALL

log = get_logger("cavegen.generator")

# Nested regeneration: each retry lowers fill probability by this step, never below the floor.
RAW_FILL_STEP = 0.05
RAW_FILL_FLOOR = 0.1


class StructuralOutputs(NamedTuple):
    grid: Grid2D
    fill_probability: float
    regenerations: int
    floor_tiles: int


def neighbor_score(
    grid: Grid2D,
    x: int,
    y: int,
    weighted: bool = False,
    cardinal_weight: float = 1.0,
    diagonal_weight: float = 0.7,
) -> float:
    """Wall pressure around an interior cell.

    Unweighted: number of WALL cells among the 8 neighbors.
    Weighted: cardinal_weight per orthogonal wall plus diagonal_weight per diagonal wall.
    """
    if not weighted:
        return sum(1 for dx, dy in ORTHOGONAL + DIAGONAL if grid[x + dx][y + dy] == WALL)
    score = 0.0
    for dx, dy in ORTHOGONAL:
        if grid[x + dx][y + dy] == WALL:
            score += cardinal_weight
    for dx, dy in DIAGONAL:
        if grid[x + dx][y + dy] == WALL:
            score += diagonal_weight
    return score


def smooth_map(
    grid: Grid2D,
    birth_limit: int,
    death_limit: int,
    weighted: bool = False,
    cardinal_weight: float = 1.0,
    diagonal_weight: float = 0.7,
) -> Grid2D:
    """Run one automaton step and return a new grid; the input is not modified.

    A WALL survives when its score >= death_limit, a PATH turns to WALL when its
    score > birth_limit. The outer ring is always WALL.
    """
    width, height = grid_size(grid)
    out = new_grid(width, height, WALL)
    for x in range(1, width - 1):
        src = grid[x]
        dst = out[x]
        for y in range(1, height - 1):
            score = neighbor_score(grid, x, y, weighted, cardinal_weight, diagonal_weight)
            if src[y] == WALL:
                dst[y] = WALL if score >= death_limit else PATH
            else:
                dst[y] = WALL if score > birth_limit else PATH
    return out


class Generator:
    def __init__(self, params: CaveParameters, rng: random.Random, metrics: Optional[Dict] = None):
        self.params = params
        self.rng = rng
        self.metrics = metrics if metrics is not None else {}

    def init_grid(self, fill_probability: float) -> Grid2D:
        """Border ring of walls, interior drawn row by row: WALL when draw < fill_probability."""
        w, h = self.params.width, self.params.height
        grid = new_grid(w, h, WALL)
        fill_border(grid)
        rng = self.rng
        for y in range(1, h - 1):
            for x in range(1, w - 1):
                grid[x][y] = WALL if rng.random() < fill_probability else PATH
        return grid

    def smooth(self, grid: Grid2D) -> Grid2D:
        p = self.params
        for i in range(p.smooth_iterations):
            grid = smooth_map(
                grid,
                p.birth_limit,
                p.death_limit,
                p.use_weighted_smoothing,
                p.cardinal_weight,
                p.diagonal_weight,
            )
            log.debug(event="smooth_iteration", iteration=i + 1, total=p.smooth_iterations)
        return grid

    def run(self, fill_probability: Optional[float] = None) -> StructuralOutputs:
        """Generate and smooth a raw map, regenerating while floor space is short.

        Bounded by ``max_regeneration_attempts``; the last map is returned even if
        it still misses the floor target (the orchestrator deals with that).
        """
        p = self.params
        fill = p.fill_probability if fill_probability is None else fill_probability
        min_required = round(p.interior_cells * p.min_floor_percentage)
        attempt = 0
        log.info(event="raw_generate", width=p.width, height=p.height, fill=fill)
        while True:
            grid = self.smooth(self.init_grid(fill))
            floor_tiles = count_floor_tiles(grid)
            log.debug(
                event="raw_floor",
                floor_tiles=floor_tiles,
                interior=p.interior_cells,
                required=min_required,
            )
            if floor_tiles >= min_required or attempt >= p.max_regeneration_attempts:
                break
            attempt += 1
            fill = max(RAW_FILL_FLOOR, fill - RAW_FILL_STEP)
            bump(self.metrics, "raw_regenerations")
            log.info(
                event="raw_regenerate",
                reason="insufficient_floor",
                floor_tiles=floor_tiles,
                required=min_required,
                attempt=attempt,
                max_attempts=p.max_regeneration_attempts,
                fill=fill,
            )
        return StructuralOutputs(grid, fill, attempt, floor_tiles)
