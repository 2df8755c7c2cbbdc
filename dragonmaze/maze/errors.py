"""Maze error hierarchy.

Only two kinds ever reach callers in normal operation:
InvalidSizeError (bad request, raised before any work) and GenerationError
(retry budget exhausted). OutOfBoundsError signals a programming mistake.
"""
from __future__ import annotations
from typing import Optional

MIN_SIZE = 5


class MazeError(Exception):
    """Base class for every maze failure."""


class InvalidSizeError(MazeError, ValueError):
    def __init__(self, size, message: Optional[str] = None):
        super().__init__(message or f"maze size must be an odd integer >= {MIN_SIZE}, got {size!r}")
        self.size = size


class OutOfBoundsError(MazeError, IndexError):
    def __init__(self, row: int, col: int, size: int):
        super().__init__(f"cell ({row}, {col}) outside 0..{size - 1}")
        self.row = row
        self.col = col
        self.size = size


class GenerationError(MazeError, RuntimeError):
    def __init__(self, message: str, seed: Optional[int] = None, attempts: int = 0):
        super().__init__(message)
        self.message = message
        self.seed = seed
        self.attempts = attempts


def check_size(size) -> int:
    """Return ``size`` unchanged or raise InvalidSizeError."""
    if isinstance(size, bool) or not isinstance(size, int):
        raise InvalidSizeError(size)
    if size < MIN_SIZE or size % 2 == 0:
        raise InvalidSizeError(size)
    return size


__all__ = ["MIN_SIZE", "MazeError", "InvalidSizeError", "OutOfBoundsError", "GenerationError", "check_size"]
