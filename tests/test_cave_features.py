import random

from cavegen.cave import CaveParameters, force_clear_central_area, generate_features
from cavegen.cave.cells import count_floor_tiles
from cavegen.cave.features import carve_chambers, carve_circle, carve_rectangle, carve_rooms
from cavegen.cave.metrics import init_metrics
from cavegen.cave.tiles import PATH

from cave_test_utils import border_is_wall, grid_from_rows


def solid(width, height):
    return grid_from_rows(*(["#" * width] * height))


def test_rectangle_clips_to_interior():
    grid = solid(10, 10)
    carve_rectangle(grid, -3, -3, 20, 20)
    assert border_is_wall(grid)
    assert count_floor_tiles(grid) == 64


def test_circle_shape():
    grid = solid(11, 11)
    carve_circle(grid, 5, 5, 2)
    # dx*dx + dy*dy <= 4 gives 13 cells
    assert count_floor_tiles(grid) == 13
    assert grid[7][5] == PATH and grid[6][6] == PATH
    assert grid[7][6] != PATH


def test_rooms_stay_in_bounds():
    params = CaveParameters(width=40, height=30, generate_rooms=True, number_of_rooms=6).validate()
    grid = solid(40, 30)
    metrics = init_metrics()
    rooms = carve_rooms(grid, params, random.Random(8), metrics)
    assert len(rooms) == 6
    assert metrics["rooms_carved"] == 6
    for x, y, w, h in rooms:
        assert 5 <= w <= 15 and 5 <= h <= 15
        assert x >= 1 and y >= 1
        assert x + w <= 39 and y + h <= 29
        assert grid[x][y] == PATH
    assert border_is_wall(grid)


def test_oversized_rooms_and_chambers_on_tiny_map():
    params = CaveParameters(
        width=10,
        height=10,
        room_size_range=(15, 30),
        chamber_radius_range=(8, 12),
        number_of_rooms=4,
        number_of_chambers=4,
    ).validate()
    grid = solid(10, 10)
    rng = random.Random(2)
    carve_rooms(grid, params, rng)
    chambers = carve_chambers(grid, params, rng)
    assert all(r <= 3 for _, _, r in chambers)
    assert border_is_wall(grid)


def test_features_disabled_is_noop():
    params = CaveParameters(width=20, height=20).validate()
    grid = solid(20, 20)
    generate_features(grid, params, random.Random(1))
    assert count_floor_tiles(grid) == 0


def test_chambers_counted_in_metrics():
    params = CaveParameters(width=50, height=50, generate_chambers=True, number_of_chambers=3).validate()
    grid = solid(50, 50)
    metrics = init_metrics()
    generate_features(grid, params, random.Random(6), metrics)
    assert metrics["chambers_carved"] == 3
    assert metrics["rooms_carved"] == 0
    assert count_floor_tiles(grid) > 0


def test_fallback_carve_clears_center():
    grid = solid(64, 64)
    force_clear_central_area(grid, random.Random(3))
    assert grid[32][32] == PATH
    # central disc of radius 64 // 6
    assert grid[32 + 10][32] == PATH
    # spokes reach w // 5 out from the center
    assert grid[32 + 12][32] == PATH and grid[32][32 - 12] == PATH
    assert border_is_wall(grid)
