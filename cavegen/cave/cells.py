from typing import Iterator, List, NamedTuple, Optional, Tuple

from .tiles import PATH, WALL

# Column-major grid: grid[x][y]
Grid2D = List[List[str]]
Coord2D = Tuple[int, int]

ORTHOGONAL = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONAL = ((-1, -1), (1, -1), (-1, 1), (1, 1))
ALL_NEIGHBORS = ORTHOGONAL + DIAGONAL


class Region(NamedTuple):
    """A 4-connected run of PATH cells, identified by its first visited cell."""

    seed_x: int
    seed_y: int
    size: int

    @property
    def seed(self) -> Coord2D:
        return (self.seed_x, self.seed_y)


def new_grid(width: int, height: int, fill: str = WALL) -> Grid2D:
    return [[fill for _ in range(height)] for _ in range(width)]


def grid_size(grid: Grid2D) -> Tuple[int, int]:
    width = len(grid)
    return width, (len(grid[0]) if width else 0)


def is_interior(x: int, y: int, width: int, height: int) -> bool:
    return 0 < x < width - 1 and 0 < y < height - 1


def interior_cells(width: int, height: int) -> Iterator[Coord2D]:
    """Row-major walk over every non-border cell."""
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            yield x, y


def fill_border(grid: Grid2D) -> None:
    width, height = grid_size(grid)
    for x in range(width):
        grid[x][0] = WALL
        grid[x][height - 1] = WALL
    for y in range(height):
        grid[0][y] = WALL
        grid[width - 1][y] = WALL


def count_floor_tiles(grid: Grid2D) -> int:
    width, height = grid_size(grid)
    return sum(1 for x, y in interior_cells(width, height) if grid[x][y] == PATH)


def floor_percentage(grid: Grid2D) -> float:
    width, height = grid_size(grid)
    total = (width - 2) * (height - 2)
    if total <= 0:
        return 0.0
    return count_floor_tiles(grid) / total


def find_tile(grid: Grid2D, tile: str) -> Optional[Coord2D]:
    width, height = grid_size(grid)
    for y in range(height):
        for x in range(width):
            if grid[x][y] == tile:
                return (x, y)
    return None
