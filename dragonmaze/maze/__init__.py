"""Public maze package interface."""

from .config import MazeConfig
from .errors import GenerationError, InvalidSizeError, MazeError, OutOfBoundsError
from .grid import Grid
from .pipeline import Maze, generate
from .tiles import DRAGON, EXIT, FREE, HERO, ITEM, WALL
from .validation import Violation, is_valid, validate  # noqa: F401

__all__ = [
    "Maze",
    "MazeConfig",
    "Grid",
    "generate",
    "validate",
    "is_valid",
    "Violation",
    "MazeError",
    "InvalidSizeError",
    "OutOfBoundsError",
    "GenerationError",
    "WALL",
    "FREE",
    "EXIT",
    "HERO",
    "DRAGON",
    "ITEM",
]
