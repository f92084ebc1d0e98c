"""Pruning passes for cave cleanup.

Smoothing leaves isolated wall specks and thin pillars inside open caverns.
These passes remove them without ever touching the outer wall ring.
"""
from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional

from ..logging_utils import get_logger
from .cells import ALL_NEIGHBORS, Coord2D, Grid2D, grid_size, is_interior
from .metrics import bump
from .tiles import PATH, WALL

log = get_logger("cavegen.pruning")

DEFAULT_MIN_WALL_CLUSTER = 3


def find_wall_cluster(grid: Grid2D, start: Coord2D, visited: List[List[bool]]) -> List[Coord2D]:
    """8-connected interior WALL cluster containing ``start``."""
    width, height = grid_size(grid)
    sx, sy = start
    visited[sx][sy] = True
    cluster: List[Coord2D] = []
    q = deque([start])
    while q:
        x, y = q.popleft()
        cluster.append((x, y))
        for dx, dy in ALL_NEIGHBORS:
            nx, ny = x + dx, y + dy
            if is_interior(nx, ny, width, height) and not visited[nx][ny] and grid[nx][ny] == WALL:
                visited[nx][ny] = True
                q.append((nx, ny))
    return cluster


def remove_small_wall_clusters(
    grid: Grid2D,
    max_size: int = DEFAULT_MIN_WALL_CLUSTER,
    metrics: Optional[Dict] = None,
) -> int:
    """Convert every interior wall cluster smaller than ``max_size`` to PATH.

    Returns the number of clusters removed.
    """
    width, height = grid_size(grid)
    visited = [[False] * height for _ in range(width)]
    removed = 0
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            if grid[x][y] != WALL or visited[x][y]:
                continue
            cluster = find_wall_cluster(grid, (x, y), visited)
            if len(cluster) < max_size:
                for cx, cy in cluster:
                    grid[cx][cy] = PATH
                removed += 1
    log.info(event="wall_clusters_removed", count=removed, threshold=max_size)
    bump(metrics or {}, "wall_clusters_removed", removed)
    return removed


__all__ = ["remove_small_wall_clusters", "find_wall_cluster", "DEFAULT_MIN_WALL_CLUSTER"]
