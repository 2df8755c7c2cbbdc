"""
project: Dragon Maze
module: __init__.py
License: MIT

Flask application factory for the maze service.

Configuration is sourced from environment variables (optionally loaded from
a .env file) with defaults suited to local development. A local `instance/`
directory holds the rotating log file.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify

from dragonmaze.maze.errors import InvalidSizeError, check_size

# Load .env if present so SECRET_KEY and maze tuning can be supplied
# without exporting shell variables during development.
load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def create_app(config: dict | None = None) -> Flask:
    """Build a Flask app with the maze API blueprint registered."""
    app = Flask(__name__, instance_relative_config=True)

    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        # Read-only installs still serve mazes; only the log file is lost
        pass

    app.config.update(
        SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
        MAZE_DEFAULT_SIZE=int(os.getenv("MAZE_DEFAULT_SIZE", "11")),
        MAZE_MAX_SIZE=int(os.getenv("MAZE_MAX_SIZE", "101")),
        MAZE_CACHE_MAX=int(os.getenv("MAZE_CACHE_MAX", "8")),
        MAZE_DISABLE_CACHE=_env_flag("DRAGONMAZE_DISABLE_CACHE"),
        MAZE_ENABLE_METRICS=_env_flag("DRAGONMAZE_ENABLE_METRICS", "1"),
    )
    if config:
        app.config.update(config)
    # Size-less requests fall back to this, so it must be a valid request size
    default_size = app.config["MAZE_DEFAULT_SIZE"]
    check_size(default_size)
    if default_size > app.config["MAZE_MAX_SIZE"]:
        raise InvalidSizeError(default_size, f"MAZE_DEFAULT_SIZE {default_size} exceeds MAZE_MAX_SIZE")

    from dragonmaze.routes.maze_api import bp_maze

    app.register_blueprint(bp_maze)

    @app.errorhandler(500)
    def internal_error(e):
        error_id = uuid.uuid4().hex[:8]
        logging.exception("Unhandled exception (id=%s)", error_id)
        return jsonify({"error": "internal error", "error_id": error_id}), 500

    return app
