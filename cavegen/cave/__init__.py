"""Public cave package interface."""

from .config import CaveParameters
from .connectivity import ensure_connectivity, find_regions, get_accessible_cells
from .endpoints import find_distant_points, place_start_and_end
from .features import force_clear_central_area, generate_features
from .generator import Generator, smooth_map
from .pipeline import (
    STATUS_EXHAUSTED_FALLBACK,
    STATUS_SUCCESS,
    GenerationListener,
    GenerationResult,
    generate_cave,
)
from .pruning import remove_small_wall_clusters
from .serialization import from_ascii, load_map, save_map, to_ascii
from .tiles import END, PATH, START, WALL

__all__ = [
    "CaveParameters",
    "Generator",
    "GenerationListener",
    "GenerationResult",
    "STATUS_SUCCESS",
    "STATUS_EXHAUSTED_FALLBACK",
    "generate_cave",
    "smooth_map",
    "find_regions",
    "ensure_connectivity",
    "get_accessible_cells",
    "remove_small_wall_clusters",
    "generate_features",
    "force_clear_central_area",
    "find_distant_points",
    "place_start_and_end",
    "to_ascii",
    "from_ascii",
    "save_map",
    "load_map",
    "WALL",
    "PATH",
    "START",
    "END",
]
