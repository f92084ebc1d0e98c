import pytest

from cavegen.cave import CaveParameters
from cavegen.cave.config import SEED_MASK, coerce_seed


def test_defaults():
    p = CaveParameters()
    assert (p.width, p.height) == (128, 128)
    assert p.fill_probability == 0.45
    assert p.smooth_iterations == 5
    assert (p.birth_limit, p.death_limit) == (4, 4)
    assert p.use_weighted_smoothing is True
    assert p.min_room_size == 20
    assert p.min_floor_percentage == 0.2
    assert p.max_regeneration_attempts == 5
    assert p.room_size_range == (5, 15)
    assert p.chamber_radius_range == (3, 8)
    assert p.interior_cells == 126 * 126


def test_validate_clamps_out_of_range_values():
    p = CaveParameters(
        width=3,
        height=-1,
        fill_probability=1.5,
        smooth_iterations=50,
        birth_limit=12,
        death_limit=-2,
        cardinal_weight=3.0,
        diagonal_weight=0.1,
        min_floor_percentage=0.9,
        room_size_range=(1, 0),
        chamber_radius_range=(9, 4),
        number_of_rooms=99,
        number_of_chambers=-3,
        max_regeneration_attempts=-1,
    ).validate()
    assert (p.width, p.height) == (10, 10)
    assert p.fill_probability == 0.95
    assert p.smooth_iterations == 10
    assert (p.birth_limit, p.death_limit) == (8, 0)
    assert (p.cardinal_weight, p.diagonal_weight) == (1.5, 0.5)
    assert p.min_floor_percentage == 0.5
    assert p.room_size_range == (3, 3)
    assert p.chamber_radius_range == (9, 9)
    assert (p.number_of_rooms, p.number_of_chambers) == (20, 0)
    assert p.max_regeneration_attempts == 0


def test_from_mapping_accepts_camel_case_and_strings():
    p = CaveParameters.from_mapping(
        {
            "fillProbability": "0.5",
            "smoothIterations": "3",
            "useWeightedSmoothing": "false",
            "roomSizeRange": {"x": 4, "y": 9},
            "chamber_radius_range": "2..6",
            "generateRooms": "yes",
            "mystery": 1,
        }
    )
    assert p.fill_probability == 0.5
    assert p.smooth_iterations == 3
    assert p.use_weighted_smoothing is False
    assert p.room_size_range == (4, 9)
    assert p.chamber_radius_range == (2, 6)
    assert p.generate_rooms is True
    assert p.extra == {"mystery": 1}


def test_from_mapping_overrides_skip_none():
    p = CaveParameters.from_mapping({"width": 50}, width=None, height=60)
    assert (p.width, p.height) == (50, 60)


def test_seed_key_enables_custom_seed():
    p = CaveParameters.from_mapping({"seed": 1234})
    assert p.use_custom_seed and p.custom_seed == 1234
    assert not CaveParameters.from_mapping({"seed": ""}).use_custom_seed


def test_bad_values_raise():
    with pytest.raises(ValueError):
        CaveParameters.from_mapping({"width": "wide"})
    with pytest.raises(ValueError):
        CaveParameters.from_mapping({"useCustomSeed": "maybe"})


def test_to_dict_round_trip():
    p = CaveParameters(width=64, room_size_range=(6, 10))
    data = p.to_dict()
    assert data["room_size_range"] == [6, 10]
    assert "extra" not in data
    assert CaveParameters.from_mapping(data) == p


def test_coerce_seed():
    assert coerce_seed(None) is None
    assert coerce_seed("  ") is None
    assert coerce_seed(True) is None
    assert coerce_seed(42) == 42
    assert coerce_seed("42") == 42
    assert coerce_seed(-1) == SEED_MASK
    text_seed = coerce_seed("crystal-grotto")
    assert 0 <= text_seed <= SEED_MASK
    assert coerce_seed("crystal-grotto") == text_seed
    with pytest.raises(ValueError):
        coerce_seed(1.5)


@pytest.mark.parametrize("value", [float("inf"), "1e400", float("-inf")])
def test_infinite_numbers_raise_value_error(value):
    with pytest.raises(ValueError):
        CaveParameters.from_mapping({"width": value})
