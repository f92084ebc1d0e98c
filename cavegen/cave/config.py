import hashlib
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Tuple

# camelCase parameter names -> dataclass attribute
_ALIASES = {
    "fillProbability": "fill_probability",
    "smoothIterations": "smooth_iterations",
    "birthLimit": "birth_limit",
    "deathLimit": "death_limit",
    "useWeightedSmoothing": "use_weighted_smoothing",
    "cardinalWeight": "cardinal_weight",
    "diagonalWeight": "diagonal_weight",
    "minRoomSize": "min_room_size",
    "minFloorPercentage": "min_floor_percentage",
    "maxRegenerationAttempts": "max_regeneration_attempts",
    "generateRooms": "generate_rooms",
    "numberOfRooms": "number_of_rooms",
    "roomSizeRange": "room_size_range",
    "generateChambers": "generate_chambers",
    "numberOfChambers": "number_of_chambers",
    "chamberRadiusRange": "chamber_radius_range",
    "useCustomSeed": "use_custom_seed",
    "customSeed": "custom_seed",
    "cellSize": "cell_size",
    "wallHeight": "wall_height",
    "saveMapToFile": "save_map_to_file",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE:
            return True
        if v in _FALSE:
            return False
        raise ValueError(f"not a boolean: {value!r}")
    return bool(value)


def _to_range(value: Any) -> Tuple[int, int]:
    if isinstance(value, Mapping):
        # Vector2Int style {"x": min, "y": max}
        return int(value["x"]), int(value["y"])
    if isinstance(value, str):
        parts = [p for p in value.replace("..", ",").split(",") if p.strip()]
        value = parts
    lo, hi = value
    return int(lo), int(hi)


SEED_MASK = 0x7FFFFFFF


def coerce_seed(value: Any) -> Optional[int]:
    """Convert a provided seed (int or str) into a non-negative 31-bit int.

    Numeric strings are parsed, other strings are hashed with sha256. Returns
    None when no usable seed was supplied (caller derives one from time).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value & SEED_MASK
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.lstrip("-").isdigit():
            return int(s) & SEED_MASK
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:4], "big") & SEED_MASK
    raise ValueError(f"unsupported seed type: {type(value).__name__}")


@dataclass
class CaveParameters:
    width: int = 128
    height: int = 128
    fill_probability: float = 0.45
    smooth_iterations: int = 5
    birth_limit: int = 4
    death_limit: int = 4
    use_weighted_smoothing: bool = True
    cardinal_weight: float = 1.0
    diagonal_weight: float = 0.7
    min_room_size: int = 20
    min_floor_percentage: float = 0.2
    max_regeneration_attempts: int = 5
    # Feature carving
    generate_rooms: bool = False
    number_of_rooms: int = 3
    room_size_range: Tuple[int, int] = (5, 15)
    generate_chambers: bool = False
    number_of_chambers: int = 2
    chamber_radius_range: Tuple[int, int] = (3, 8)
    # Seed
    use_custom_seed: bool = False
    custom_seed: int = 0
    # Passed through for renderers
    cell_size: float = 1.0
    wall_height: float = 2.0
    save_map_to_file: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def validate(self) -> "CaveParameters":
        """Clamp every field into its usable range (in place)."""
        self.width = max(10, int(self.width))
        self.height = max(10, int(self.height))
        self.fill_probability = _clamp(float(self.fill_probability), 0.05, 0.95)
        self.smooth_iterations = _clamp(int(self.smooth_iterations), 1, 10)
        self.birth_limit = _clamp(int(self.birth_limit), 0, 8)
        self.death_limit = _clamp(int(self.death_limit), 0, 8)
        self.cardinal_weight = _clamp(float(self.cardinal_weight), 0.5, 1.5)
        self.diagonal_weight = _clamp(float(self.diagonal_weight), 0.5, 1.5)
        self.min_room_size = max(1, int(self.min_room_size))
        self.min_floor_percentage = _clamp(float(self.min_floor_percentage), 0.1, 0.5)
        self.max_regeneration_attempts = max(0, int(self.max_regeneration_attempts))

        rmin, rmax = self.room_size_range
        rmin = max(3, int(rmin))
        self.room_size_range = (rmin, max(rmin, int(rmax)))
        cmin, cmax = self.chamber_radius_range
        cmin = max(2, int(cmin))
        self.chamber_radius_range = (cmin, max(cmin, int(cmax)))

        self.number_of_rooms = _clamp(int(self.number_of_rooms), 0, 20)
        self.number_of_chambers = _clamp(int(self.number_of_chambers), 0, 20)
        self.custom_seed = int(self.custom_seed)
        return self

    @property
    def interior_cells(self) -> int:
        return (self.width - 2) * (self.height - 2)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]], **overrides) -> "CaveParameters":
        """Build parameters from a loose mapping (JSON body, config, CLI args).

        Unknown keys are kept in ``extra``; values are coerced to the field type.
        A ``seed`` key is shorthand for ``use_custom_seed`` + ``custom_seed``.
        """
        merged: Dict[str, Any] = {}
        for key, value in dict(data or {}).items():
            merged[_ALIASES.get(key, key)] = value
        merged.update({k: v for k, v in overrides.items() if v is not None})

        params = cls()
        known = {f.name: f for f in fields(cls) if f.name != "extra"}
        seed = coerce_seed(merged.pop("seed", None))
        if seed is not None:
            merged["use_custom_seed"] = True
            merged["custom_seed"] = seed
        for key, value in merged.items():
            if value is None:
                continue
            if key not in known:
                params.extra[key] = value
                continue
            default = getattr(params, key)
            try:
                if isinstance(default, bool):
                    value = to_bool(value)
                elif isinstance(default, int):
                    value = int(float(value)) if isinstance(value, str) else int(value)
                elif isinstance(default, float):
                    value = float(value)
                elif isinstance(default, tuple):
                    value = _to_range(value)
            except (TypeError, ValueError, KeyError, OverflowError) as exc:
                raise ValueError(f"invalid value for {key}: {value!r}") from exc
            setattr(params, key, value)
        return params

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("extra", None)
        data["room_size_range"] = list(self.room_size_range)
        data["chamber_radius_range"] = list(self.chamber_radius_range)
        return data


__all__ = ["CaveParameters", "coerce_seed", "to_bool", "SEED_MASK"]
