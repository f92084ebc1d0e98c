"""
project: cavegen
module: __init__.py
License: MIT

Flask application factory.

Configuration is sourced from environment variables (a local `.env` is loaded
when present) with defaults suitable for development. Generated ASCII maps
land in the instance folder unless CAVEGEN_MAP_DIR points elsewhere.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify

# Load .env if present so CAVEGEN_* settings can be supplied without exporting
# shell variables during development.
load_dotenv()

__version__ = "0.1.0"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def create_app(config: dict | None = None) -> Flask:
    """Build a Flask app exposing the cave generation API."""
    app = Flask(__name__, instance_relative_config=True)
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        # Read-only installs still serve the API; saving maps will fail loudly instead
        pass

    app.config.update(
        CAVEGEN_MAX_WIDTH=int(os.getenv("CAVEGEN_MAX_WIDTH", "512")),
        CAVEGEN_MAX_HEIGHT=int(os.getenv("CAVEGEN_MAX_HEIGHT", "512")),
        CAVEGEN_MAP_DIR=os.getenv("CAVEGEN_MAP_DIR") or str(Path(app.instance_path) / "maps"),
        CAVEGEN_ENABLE_METRICS=_env_flag("CAVEGEN_ENABLE_METRICS", "1"),
        CAVEGEN_DISABLE_CACHE=_env_flag("CAVEGEN_DISABLE_CACHE", "0"),
    )
    app.json.sort_keys = False
    if config:
        app.config.update(config)

    from cavegen.routes.cave_api import bp_cave

    app.register_blueprint(bp_cave)

    @app.errorhandler(ValueError)
    def _bad_request(exc):
        return jsonify({"error": str(exc)}), 400

    return app


__all__ = ["create_app", "__version__"]
