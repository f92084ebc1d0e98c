"""ASCII map format: one line per row, one symbol per cell.

    #  wall    .  path    S  start    E  end

Every row (including the last) ends with a newline.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from ..logging_utils import get_logger
from .cells import Grid2D, grid_size
from .tiles import TILE_TYPES

log = get_logger("cavegen.serialization")

PREVIEW_SIZE = 50


def to_ascii(grid: Grid2D) -> str:
    width, height = grid_size(grid)
    return "".join("".join(grid[x][y] for x in range(width)) + "\n" for y in range(height))


def to_rows(grid: Grid2D):
    width, height = grid_size(grid)
    return ["".join(grid[x][y] for x in range(width)) for y in range(height)]


def from_ascii(text: str) -> Grid2D:
    """Parse an ASCII map back into a column-major grid.

    Raises ValueError on empty input, ragged rows or unknown symbols.
    """
    rows = [line.rstrip("\r") for line in text.split("\n")]
    while rows and rows[-1] == "":
        rows.pop()
    if not rows:
        raise ValueError("empty map")
    width = len(rows[0])
    for y, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"row {y} has {len(row)} cells, expected {width}")
        for x, ch in enumerate(row):
            if ch not in TILE_TYPES:
                raise ValueError(f"unknown tile {ch!r} at ({x}, {y})")
    return [[rows[y][x] for y in range(len(rows))] for x in range(width)]


def map_filename(seed: int) -> str:
    return f"cave_map_seed{seed}.txt"


def save_map(grid: Grid2D, directory: Union[str, os.PathLike], seed: int) -> Path:
    width, height = grid_size(grid)
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / map_filename(seed)
    path.write_text(to_ascii(grid), encoding="utf-8")
    log.info(event="map_saved", path=str(path), width=width, height=height)
    return path


def load_map(path: Union[str, os.PathLike]) -> Grid2D:
    return from_ascii(Path(path).read_text(encoding="utf-8"))


def preview(grid: Grid2D, size: int = PREVIEW_SIZE) -> str:
    """Top-left corner of the map, for debug logging of large caves."""
    width, height = grid_size(grid)
    w, h = min(width, size), min(height, size)
    return "\n".join("".join(grid[x][y] for x in range(w)) for y in range(h))


__all__ = ["to_ascii", "to_rows", "from_ascii", "map_filename", "save_map", "load_map", "preview"]
