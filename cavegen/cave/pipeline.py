"""Pipeline orchestration for cave generation.

One call to :func:`generate_cave` owns a fresh grid and a freshly seeded RNG,
threaded through the stages via :class:`GenerationContext`:

    raw generate + smooth -> connectivity repair -> wall pruning -> features
        -> floor validation -> (retry | fallback carve) -> start/end placement

Validation failures are retried with a lower fill probability up to
``MAX_TOTAL_ATTEMPTS`` times; after that a central area is force-carved so the
result always has floor space. Placement runs exactly once and never retries.
"""
from __future__ import annotations

import dataclasses
import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..logging_utils import get_logger
from .cells import Coord2D, Grid2D, count_floor_tiles, floor_percentage
from .config import CaveParameters
from .connectivity import ensure_connectivity
from .endpoints import place_start_and_end
from .features import force_clear_central_area, generate_features
from .generator import Generator
from .metrics import init_metrics
from .pruning import DEFAULT_MIN_WALL_CLUSTER, remove_small_wall_clusters
from .serialization import preview, save_map, to_ascii, to_rows
from .tiles import PATH, WALL

log = get_logger("cavegen.pipeline")

MAX_TOTAL_ATTEMPTS = 10
RETRY_FILL_STEP = 0.1
RETRY_FILL_FLOOR = 0.15

STATUS_SUCCESS = "success"
STATUS_EXHAUSTED_FALLBACK = "exhausted_fallback"


def derive_seed() -> int:
    """Time-derived 31-bit seed."""
    return time.time_ns() & 0x7FFFFFFF


@dataclass
class GenerationContext:
    params: CaveParameters
    seed: int
    rng: random.Random
    metrics: Dict[str, Any]

    @classmethod
    def create(cls, params: CaveParameters, enable_metrics: bool = True) -> "GenerationContext":
        seed = params.custom_seed if params.use_custom_seed else derive_seed()
        return cls(params, seed, random.Random(seed), init_metrics() if enable_metrics else {})


@dataclass
class GenerationResult:
    status: str
    grid: Grid2D
    width: int
    height: int
    seed: int
    start: Optional[Coord2D]
    end: Optional[Coord2D]
    placement_error: Optional[str]
    attempts: int
    fill_probability: float
    floor_percentage: float
    parameters: CaveParameters
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_SUCCESS

    @property
    def has_endpoints(self) -> bool:
        return self.start is not None and self.end is not None

    def to_ascii(self) -> str:
        return to_ascii(self.grid)

    def to_json(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "seed": self.seed,
            "width": self.width,
            "height": self.height,
            "grid": to_rows(self.grid),
            "start": list(self.start) if self.start else None,
            "end": list(self.end) if self.end else None,
            "placement_error": self.placement_error,
            "attempts": self.attempts,
            "fill_probability": self.fill_probability,
            "floor_percentage": self.floor_percentage,
            "cell_size": self.parameters.cell_size,
            "wall_height": self.parameters.wall_height,
            "metrics": self.metrics,
        }


class GenerationListener:
    """Synchronous hooks invoked at the start and end of a generation call."""

    def generation_started(self, width: int, height: int, seed: int) -> None:
        pass

    def generation_finished(self, result: GenerationResult) -> None:
        pass


def _run_attempt(ctx: GenerationContext, fill: float, phase) -> Tuple[Grid2D, float]:
    p = ctx.params
    outputs = phase("generate", Generator(p, ctx.rng, ctx.metrics).run, fill)
    grid = outputs.grid
    phase("connectivity", ensure_connectivity, grid, p.min_room_size, ctx.rng, ctx.metrics)
    phase("pruning", remove_small_wall_clusters, grid, DEFAULT_MIN_WALL_CLUSTER, ctx.metrics)
    phase("features", generate_features, grid, p, ctx.rng, ctx.metrics)
    return grid, outputs.fill_probability


def generate_cave(
    params: Optional[CaveParameters] = None,
    *,
    listeners: Iterable[GenerationListener] = (),
    enable_metrics: bool = True,
    max_attempts: int = MAX_TOTAL_ATTEMPTS,
    save_dir: Optional[str] = None,
) -> GenerationResult:
    """Generate a validated cave map.

    ``params`` is copied and clamped; the caller's instance is never mutated.
    Same seed and parameters always give the same grid.
    """
    params = dataclasses.replace(params or CaveParameters()).validate()
    ctx = GenerationContext.create(params, enable_metrics)
    listeners = list(listeners)
    log.info(
        event="generation_start",
        seed=ctx.seed,
        seed_source="custom" if params.use_custom_seed else "time",
        width=params.width,
        height=params.height,
    )
    for listener in listeners:
        listener.generation_started(params.width, params.height, ctx.seed)

    phase_times: Dict[str, int] = {}

    def _phase(label, fn, *a, **k):
        if not enable_metrics:
            return fn(*a, **k)
        ps = time.perf_counter()
        r = fn(*a, **k)
        phase_times[label] = phase_times.get(label, 0) + int((time.perf_counter() - ps) * 1000)
        return r

    started = time.perf_counter()
    fill = params.fill_probability
    max_attempts = max(1, max_attempts)
    attempts = 0
    accepted = False
    grid: Grid2D = []
    used_fill = fill
    pct = 0.0
    while attempts < max_attempts:
        attempts += 1
        grid, used_fill = _run_attempt(ctx, fill, _phase)
        pct = floor_percentage(grid)
        log.info(
            event="floor_validation",
            attempt=attempts,
            floor_percentage=pct,
            floor_tiles=count_floor_tiles(grid),
            interior=params.interior_cells,
            minimum=params.min_floor_percentage,
        )
        if pct >= params.min_floor_percentage:
            accepted = True
            break
        fill = max(RETRY_FILL_FLOOR, fill - RETRY_FILL_STEP)
        log.warn(
            event="floor_validation_failed",
            attempt=attempts,
            max_attempts=max_attempts,
            floor_percentage=pct,
            next_fill=fill,
        )

    if not accepted:
        log.error(event="generation_exhausted", attempts=attempts, floor_percentage=pct)
        _phase("fallback", force_clear_central_area, grid, ctx.rng)
        pct = floor_percentage(grid)

    placement = _phase("placement", place_start_and_end, grid, ctx.rng)

    metrics = ctx.metrics
    if enable_metrics:
        metrics["attempts"] = attempts
        metrics["fallback_used"] = not accepted
        metrics["floor_percentage"] = pct
        metrics["tiles_wall"] = sum(column.count(WALL) for column in grid)
        metrics["tiles_path"] = sum(column.count(PATH) for column in grid)
        metrics["runtime_ms"] = int((time.perf_counter() - started) * 1000)
        metrics["phase_ms"] = phase_times

    result = GenerationResult(
        status=STATUS_SUCCESS if accepted else STATUS_EXHAUSTED_FALLBACK,
        grid=grid,
        width=params.width,
        height=params.height,
        seed=ctx.seed,
        start=placement.start,
        end=placement.end,
        placement_error=placement.error,
        attempts=attempts,
        fill_probability=used_fill,
        floor_percentage=pct,
        parameters=params,
        metrics=metrics,
    )
    if log.enabled("debug"):
        for row, cells in enumerate(preview(grid).splitlines()):
            log.debug(event="map_preview", row=row, cells=cells)
    if params.save_map_to_file:
        save_map(grid, save_dir or "maps", ctx.seed)
    log.info(event="generation_complete", status=result.status, seed=ctx.seed, attempts=attempts)
    for listener in listeners:
        listener.generation_finished(result)
    return result


__all__ = [
    "GenerationContext",
    "GenerationListener",
    "GenerationResult",
    "generate_cave",
    "derive_seed",
    "MAX_TOTAL_ATTEMPTS",
    "STATUS_SUCCESS",
    "STATUS_EXHAUSTED_FALLBACK",
]
