"""Boundary exit placement.

Exactly one boundary cell ever holds the exit. Re-running placement keeps
the current exit unless a relocation is requested.
"""
from __future__ import annotations
import random
from typing import List, Tuple

from .grid import Coord, Grid
from .tiles import EXIT, FREE, WALL


def exit_candidates(size: int) -> List[Coord]:
    """Every non-corner boundary cell, clockwise from the top edge."""
    last = size - 1
    out = [(0, c) for c in range(1, last)]
    out += [(r, last) for r in range(1, last)]
    out += [(last, c) for c in range(last - 1, 0, -1)]
    out += [(r, 0) for r in range(last - 1, 0, -1)]
    return out


def inward_neighbor(size: int, coord: Coord) -> Coord:
    r, c = coord
    last = size - 1
    if r == 0:
        return (1, c)
    if r == last:
        return (last - 1, c)
    if c == 0:
        return (r, 1)
    return (r, last - 1)


def place_exit(grid: Grid, rng: random.Random, relocate: bool = False) -> Tuple[Coord, bool]:
    """Put the single exit on the boundary.

    Returns (exit position, whether an inward wall had to be opened). The
    caller re-runs the pattern repair when the second value is True.
    """
    existing = grid.cells(EXIT)
    if existing and not relocate and len(existing) == 1:
        return existing[0], False
    for coord in existing:
        grid[coord] = WALL
    # Any stray open boundary cell goes back to wall
    for r, c in grid.coords():
        if grid.is_boundary(r, c) and grid.is_open(r, c):
            grid.set(r, c, WALL)

    choice = rng.choice(exit_candidates(grid.size))
    grid[choice] = EXIT
    inner = inward_neighbor(grid.size, choice)
    opened = False
    if grid[inner] == WALL:
        grid[inner] = FREE
        opened = True
    return choice, opened


__all__ = ["exit_candidates", "inward_neighbor", "place_exit"]
