import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from dragonmaze import create_app  # noqa: E402
from dragonmaze.routes.maze_api import _maze_cache  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app({"TESTING": True, "SECRET_KEY": "test-secret"})
    return app


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture(autouse=True)
def _clear_maze_cache():
    """Cached mazes must not leak between tests that patch the pipeline."""
    _maze_cache.clear()
    yield
    _maze_cache.clear()


@pytest.fixture(autouse=True)
def _quiet_maze_env(monkeypatch):
    # A developer .env must not change retry budgets under test
    for key in (
        "DRAGONMAZE_MAX_ATTEMPTS",
        "DRAGONMAZE_PLACEMENT_RETRIES",
        "DRAGONMAZE_SMOOTHING_PASSES",
        "DRAGONMAZE_LOOP_CHANCE",
        "DRAGONMAZE_ENABLE_METRICS",
    ):
        monkeypatch.delenv(key, raising=False)
    yield


def pytest_configure(config):  # register custom marker
    config.addinivalue_line("markers", "slow: large randomized maze sweeps")
