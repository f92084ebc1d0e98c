import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from cavegen import create_app  # noqa: E402
from cavegen.routes.cave_api import clear_cache  # noqa: E402


@pytest.fixture(scope="session")
def map_dir(tmp_path_factory):
    return tmp_path_factory.mktemp("maps")


@pytest.fixture(scope="session")
def test_app(map_dir):
    app = create_app({"TESTING": True, "CAVEGEN_MAP_DIR": str(map_dir)})
    return app


@pytest.fixture(autouse=True)
def _push_app_context(test_app):
    ctx = test_app.app_context()
    ctx.push()
    try:
        yield
    finally:
        ctx.pop()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture(autouse=True)
def _clear_cave_cache():
    """Cached caves must not leak between tests that tweak app config."""
    clear_cache()
    yield
    clear_cache()
