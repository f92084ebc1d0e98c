from typing import Dict


def init_metrics() -> Dict[str, int | float | bool]:
    return {
        "attempts": 0,
        "raw_regenerations": 0,
        "regions_found": 0,
        "regions_filled": 0,
        "regions_connected": 0,
        "hallways_carved": 0,
        "wall_clusters_removed": 0,
        "rooms_carved": 0,
        "chambers_carved": 0,
        "fallback_used": False,
        "floor_percentage": 0.0,
        "runtime_ms": 0.0,
    }


def bump(metrics: Dict, key: str, amount: int = 1) -> None:
    """Increment a counter when metrics are enabled (empty dict means disabled)."""
    if metrics:
        metrics[key] = metrics.get(key, 0) + amount
