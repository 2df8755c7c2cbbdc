"""
project: Dragon Maze
module: maze_api.py
License: MIT

Maze seed, map, metrics and exit routes.

The active seed and size live in the Flask session; generated mazes are kept
in a small in-process cache keyed by (seed, size). Cached mazes are shared
by every session, so exit relocations are kept per session as a count and
replayed on a copy.
"""

import copy
import hashlib
import random
import threading

from flask import Blueprint, current_app, jsonify, request, session

from dragonmaze.logging_utils import get_logger
from dragonmaze.maze import GenerationError, InvalidSizeError, Maze
from dragonmaze.maze.errors import check_size

log = get_logger("dragonmaze.api")

bp_maze = Blueprint("maze_api", __name__)

SEED_MAX_INT = 9223372036854775807

# Simple in-process cache (seed,size)->Maze instance, guarded by a lock
_maze_cache = {}
_maze_cache_lock = threading.Lock()


def _coerce_seed(payload_seed):
    """Convert provided seed (int or str) into bounded 64-bit signed int."""
    if payload_seed is None or isinstance(payload_seed, bool):
        return random.randint(1, 1_000_000)
    if isinstance(payload_seed, int):
        return payload_seed % SEED_MAX_INT
    if isinstance(payload_seed, str):
        s = payload_seed.strip()
        if not s:
            return random.randint(1, 1_000_000)
        if s.isdigit():
            return int(s) % SEED_MAX_INT
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:8], "big") % SEED_MAX_INT
    return random.randint(1, 1_000_000)


def _coerce_size(raw):
    """Parse a requested size; raises InvalidSizeError for anything unusable."""
    if raw is None:
        return current_app.config["MAZE_DEFAULT_SIZE"]
    if isinstance(raw, str):
        if not raw.strip().isdigit():
            raise InvalidSizeError(raw)
        raw = int(raw)
    size = check_size(raw)
    max_size = current_app.config["MAZE_MAX_SIZE"]
    if size > max_size:
        raise InvalidSizeError(size, f"maze size must be at most {max_size}, got {size}")
    return size


def get_cached_maze(seed: int, size: int) -> Maze:
    if current_app.config.get("MAZE_DISABLE_CACHE"):
        return Maze(seed=seed, size=size)
    key = (seed, size)
    with _maze_cache_lock:
        maze = _maze_cache.get(key)
        if maze is not None:
            return maze
    maze = Maze(seed=seed, size=size)
    with _maze_cache_lock:
        _maze_cache[key] = maze
        if len(_maze_cache) > current_app.config["MAZE_CACHE_MAX"]:
            first_key = next(iter(_maze_cache.keys()))
            if first_key != key:
                _maze_cache.pop(first_key, None)
    return maze


def _active_maze() -> Maze:
    """Maze for the query args, falling back to the session, then to a fresh seed."""
    seed_arg = request.args.get("seed")
    seed = _coerce_seed(seed_arg) if seed_arg is not None else session.get("maze_seed")
    if seed is None:
        seed = _coerce_seed(None)
        session["maze_seed"] = seed
    size = _coerce_size(request.args.get("size", session.get("maze_size")))
    return get_cached_maze(seed, size)


def _exit_moves(maze: Maze) -> int:
    """Exit relocations this session made on the maze with the same seed and size."""
    state = session.get("maze_exit_moves") or {}
    if state.get("seed") == maze.seed and state.get("size") == maze.size:
        return int(state.get("moves", 0))
    return 0


def _session_maze(maze: Maze, moves: int) -> Maze:
    """Per-session view of a cached maze with its exit relocations replayed.

    The cached instance is shared by every session and is never mutated; the
    replay draws from a copy of its RNG, so the same count gives the same exit.
    """
    if moves <= 0:
        return maze
    with _maze_cache_lock:
        view = copy.deepcopy(maze)
    for _ in range(moves):
        view.generate_exit_position(relocate=True)
    return view


@bp_maze.errorhandler(InvalidSizeError)
def _invalid_size(exc):
    return jsonify({"error": str(exc), "code": "invalid_size"}), 400


@bp_maze.errorhandler(GenerationError)
def _generation_failed(exc):
    log.warn(event="maze_api_generation_failed", seed=exc.seed, attempts=exc.attempts)
    return jsonify({"error": exc.message, "code": "generation_failed", "seed": exc.seed}), 503


@bp_maze.route("/api/maze/seed", methods=["POST"])
def set_seed():
    """Set (or generate) the maze seed and size for this session.

    Body JSON (all optional):
      { "seed": <int|str|null>, "size": <odd int >= 5> }
    Response: { "seed": <int>, "size": <int> }
    """
    data = request.get_json(silent=True) or {}
    size = _coerce_size(data.get("size"))
    seed = _coerce_seed(data.get("seed"))
    session["maze_seed"] = seed
    session["maze_size"] = size
    session.pop("maze_exit_moves", None)
    log.info(event="maze_seed_set", seed=seed, size=size)
    return jsonify({"seed": seed, "size": size})


@bp_maze.route("/api/maze/map")
def maze_map():
    """
    Return the active maze.
    Response: { 'seed', 'size', 'rows': [text rows], 'grid': [[tile type]], 'positions': {...} }
    """
    maze = _active_maze()
    return jsonify(_session_maze(maze, _exit_moves(maze)).to_dict())


@bp_maze.route("/api/maze/gen/metrics")
def generation_metrics():
    maze = _active_maze()
    view = _session_maze(maze, _exit_moves(maze))
    return jsonify({"seed": view.seed, "size": view.size, "metrics": view.metrics})


@bp_maze.route("/api/maze/exit", methods=["POST"])
def relocate_exit():
    """Move this session's exit to another boundary cell.

    Response: { "seed": <int>, "exit": [row, col], "rows": [text rows] }
    """
    maze = _active_maze()
    moves = _exit_moves(maze) + 1
    view = _session_maze(maze, moves)
    session["maze_exit_moves"] = {"seed": maze.seed, "size": maze.size, "moves": moves}
    pos = view.positions["exit"]
    log.info(event="maze_exit_relocated", seed=maze.seed, size=maze.size, moves=moves, row=pos[0], col=pos[1])
    return jsonify({"seed": view.seed, "exit": list(pos), "rows": view.grid.to_dict()["rows"]})
