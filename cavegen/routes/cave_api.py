"""
project: cavegen
module: cave_api.py
License: MIT

Cave generation API routes.

Generation is deterministic for a given (seed, parameters) pair, so results
for explicit seeds are kept in a small in-process cache.
"""

import threading

from flask import Blueprint, Response, current_app, jsonify, request

from cavegen.cave import CaveParameters, generate_cave
from cavegen.cave.config import to_bool
from cavegen.cave.serialization import map_filename, save_map
from cavegen.logging_utils import get_logger

log = get_logger("cavegen.api")

bp_cave = Blueprint("cave", __name__)

# (seed, params) -> GenerationResult. Guarded by a lock since the dev server may be threaded.
_cave_cache = {}
_cave_cache_lock = threading.Lock()
_CAVE_CACHE_MAX = 8  # small LRU-ish manual cap


def _cache_key(params: CaveParameters):
    return tuple(sorted((k, str(v)) for k, v in params.to_dict().items()))


def get_cached_cave(params: CaveParameters):
    """Generate or reuse a cave; only custom-seeded requests are cached."""
    enable_metrics = current_app.config.get("CAVEGEN_ENABLE_METRICS", True)
    if current_app.config.get("CAVEGEN_DISABLE_CACHE") or not params.use_custom_seed:
        return generate_cave(params, enable_metrics=enable_metrics)
    key = _cache_key(params)
    with _cave_cache_lock:
        result = _cave_cache.get(key)
    if result is not None:
        log.debug(event="cache_hit", seed=result.seed)
        return result
    result = generate_cave(params, enable_metrics=enable_metrics)
    with _cave_cache_lock:
        _cave_cache[key] = result
        if len(_cave_cache) > _CAVE_CACHE_MAX:
            first_key = next(iter(_cave_cache.keys()))
            if first_key != key:
                _cave_cache.pop(first_key, None)
    return result


def clear_cache():
    with _cave_cache_lock:
        _cave_cache.clear()


def _params_from_request(data, seed=None):
    data = dict(data or {})
    if seed is not None:
        data["seed"] = seed
    params = CaveParameters.from_mapping(data).validate()
    max_w = current_app.config["CAVEGEN_MAX_WIDTH"]
    max_h = current_app.config["CAVEGEN_MAX_HEIGHT"]
    if params.width > max_w or params.height > max_h:
        return params, (jsonify({"error": f"map size limited to {max_w}x{max_h}"}), 413)
    return params, None


@bp_cave.route("/api/cave/defaults")
def cave_defaults():
    """Default parameter set after validation."""
    return jsonify(CaveParameters().validate().to_dict())


@bp_cave.route("/api/cave/generate", methods=["POST"])
def cave_generate():
    """Generate a cave map.

    Body JSON (all optional): any CaveParameters field (snake_case or the
    camelCase names) plus ``seed`` (int or string) and ``save``
    (bool, write the ASCII map into CAVEGEN_MAP_DIR).

    Response: GenerationResult.to_json() plus ``saved_to`` when saved.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValueError("request body must be a JSON object")
    try:
        save = to_bool(data.pop("save", False))
    except ValueError as exc:
        raise ValueError(f"invalid value for save: {exc}") from exc
    params, error = _params_from_request(data)
    if error:
        return error
    result = get_cached_cave(params)
    payload = result.to_json()
    if save:
        path = save_map(result.grid, current_app.config["CAVEGEN_MAP_DIR"], result.seed)
        payload["saved_to"] = str(path)
    log.info(event="api_generate", seed=result.seed, status=result.status, saved=save)
    return jsonify(payload)


@bp_cave.route("/api/cave/<seed>.txt")
def cave_ascii(seed):
    """ASCII rendering of the cave for ``seed``; query args override parameters."""
    params, error = _params_from_request(request.args.to_dict(), seed=seed)
    if error:
        return error
    result = get_cached_cave(params)
    return Response(
        result.to_ascii(),
        mimetype="text/plain",
        headers={"Content-Disposition": f"inline; filename={map_filename(result.seed)}"},
    )
