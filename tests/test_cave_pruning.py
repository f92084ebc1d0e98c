import random

from cavegen.cave import CaveParameters, Generator, remove_small_wall_clusters
from cavegen.cave.metrics import init_metrics
from cavegen.cave.pruning import find_wall_cluster
from cavegen.cave.tiles import PATH, WALL

from cave_test_utils import border_is_wall, grid_from_rows


def _interior_wall_clusters(grid):
    width, height = len(grid), len(grid[0])
    visited = [[False] * height for _ in range(width)]
    clusters = []
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            if grid[x][y] == WALL and not visited[x][y]:
                clusters.append(find_wall_cluster(grid, (x, y), visited))
    return clusters


def test_specks_and_pairs_removed_triples_kept():
    grid = grid_from_rows(
        "#########",
        "#.......#",
        "#.#..##.#",
        "#.......#",
        "#..###..#",
        "#.......#",
        "#########",
    )
    metrics = init_metrics()
    removed = remove_small_wall_clusters(grid, 3, metrics)
    assert removed == 2
    assert metrics["wall_clusters_removed"] == 2
    assert grid[2][2] == PATH
    assert grid[5][2] == PATH and grid[6][2] == PATH
    assert all(grid[x][4] == WALL for x in (3, 4, 5))
    assert border_is_wall(grid)


def test_diagonal_walls_form_one_cluster():
    grid = grid_from_rows(
        "######",
        "#.#..#",
        "#..#.#",
        "#...##",
        "######",
    )
    # (2,1) (3,2) (4,3) touch diagonally; the border does not count towards size
    remove_small_wall_clusters(grid, 3)
    assert grid[2][1] == WALL and grid[3][2] == WALL and grid[4][3] == WALL


def test_no_small_clusters_after_pruning_generated_map():
    params = CaveParameters(width=64, height=48).validate()
    grid = Generator(params, random.Random(21)).run().grid
    remove_small_wall_clusters(grid, 3)
    assert all(len(c) >= 3 for c in _interior_wall_clusters(grid))
    assert border_is_wall(grid)
