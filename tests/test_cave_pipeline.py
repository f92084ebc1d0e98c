import pytest

from cavegen.cave import (
    STATUS_EXHAUSTED_FALLBACK,
    STATUS_SUCCESS,
    CaveParameters,
    GenerationListener,
    generate_cave,
)
from cavegen.cave.cells import find_tile, floor_percentage
from cavegen.cave.serialization import load_map, map_filename
from cavegen.cave.tiles import END, START

from cave_test_utils import border_is_wall


def seeded(seed, **kw):
    kw.setdefault("width", 64)
    kw.setdefault("height", 64)
    return CaveParameters(use_custom_seed=True, custom_seed=seed, **kw)


def test_same_seed_same_cave():
    a = generate_cave(seeded(1234))
    b = generate_cave(seeded(1234))
    assert a.seed == b.seed == 1234
    assert a.grid == b.grid
    assert (a.start, a.end) == (b.start, b.end)


def test_different_seeds_differ():
    assert generate_cave(seeded(1)).grid != generate_cave(seeded(2)).grid


def test_default_run_succeeds_with_border_and_endpoints():
    result = generate_cave(seeded(42, generate_rooms=True, generate_chambers=True))
    assert result.status == STATUS_SUCCESS
    assert result.succeeded
    assert border_is_wall(result.grid)
    assert result.floor_percentage >= 0.2
    assert result.has_endpoints
    assert find_tile(result.grid, START) == result.start
    assert find_tile(result.grid, END) == result.end
    # counters accumulate across retries
    assert result.metrics["rooms_carved"] == 3 * result.attempts
    assert result.metrics["chambers_carved"] == 2 * result.attempts


def test_fallback_guarantees_floor():
    params = seeded(
        5,
        fill_probability=0.95,
        max_regeneration_attempts=0,
        min_floor_percentage=0.5,
    )
    result = generate_cave(params, max_attempts=1)
    assert result.status == STATUS_EXHAUSTED_FALLBACK
    assert not result.succeeded
    assert result.attempts == 1
    assert result.metrics["fallback_used"] is True
    assert floor_percentage(result.grid) > 0
    assert result.grid[32][32] in (".", "S", "E")
    assert border_is_wall(result.grid)
    assert result.has_endpoints


def test_caller_params_not_mutated():
    params = CaveParameters(width=5, height=5, fill_probability=2.0)
    result = generate_cave(params)
    assert params.width == 5 and params.fill_probability == 2.0
    assert result.width == 10 and result.height == 10
    assert len(result.grid) == 10 and len(result.grid[0]) == 10
    assert result.parameters.fill_probability == pytest.approx(0.95)


def test_time_seed_used_when_no_custom_seed():
    result = generate_cave(CaveParameters(width=20, height=20))
    assert 0 <= result.seed <= 0x7FFFFFFF
    assert not result.parameters.use_custom_seed


def test_listeners_notified_in_order():
    events = []

    class Recorder(GenerationListener):
        def generation_started(self, width, height, seed):
            events.append(("started", width, height, seed))

        def generation_finished(self, result):
            events.append(("finished", result.status))

    result = generate_cave(seeded(9, width=30, height=20), listeners=[Recorder()])
    assert events == [("started", 30, 20, 9), ("finished", result.status)]


def test_metrics_populated():
    result = generate_cave(seeded(77))
    m = result.metrics
    assert m["attempts"] == result.attempts >= 1
    assert m["fallback_used"] is False
    assert m["tiles_wall"] + m["tiles_path"] + 2 == 64 * 64
    assert set(m["phase_ms"]) >= {"generate", "connectivity", "pruning", "features", "placement"}
    assert isinstance(m["runtime_ms"], int)


def test_metrics_can_be_disabled():
    assert generate_cave(seeded(77, width=20, height=20), enable_metrics=False).metrics == {}


def test_save_map_to_file(tmp_path):
    result = generate_cave(seeded(31, width=24, height=16, save_map_to_file=True), save_dir=tmp_path)
    path = tmp_path / map_filename(31)
    assert path.exists()
    assert load_map(path) == result.grid


def test_to_json_shape():
    result = generate_cave(seeded(3, width=20, height=12))
    data = result.to_json()
    assert data["seed"] == 3
    assert len(data["grid"]) == 12 and all(len(row) == 20 for row in data["grid"])
    assert data["cell_size"] == 1.0 and data["wall_height"] == 2.0
    assert data["start"] == list(result.start)
    assert result.to_ascii().splitlines() == data["grid"]
