"""Local repair passes for forbidden tile patterns.

Each pass scans every 2x2 and 3x3 window and flips a single cell to break
any forbidden pattern it meets. Only interior FREE and WALL cells are ever
flipped; the exit and entities are left alone. Passes repeat until one
finds nothing or the pass budget runs out.
"""
from __future__ import annotations
from typing import List

from .grid import Coord, Grid
from .tiles import FREE, WALL


def _window(r: int, c: int, k: int) -> List[Coord]:
    return [(r + y, c + x) for y in range(k) for x in range(k)]


def _interior(grid: Grid, coord: Coord) -> bool:
    return not grid.is_boundary(*coord)


def _is_post(coord: Coord) -> bool:
    # (even, even) cells are never carved
    return coord[0] % 2 == 0 and coord[1] % 2 == 0


def _diagonal_at(grid: Grid, r: int, c: int) -> bool:
    a = grid.is_open(r, c)
    b = grid.is_open(r, c + 1)
    d = grid.is_open(r + 1, c)
    e = grid.is_open(r + 1, c + 1)
    return a == e and b == d and a != b


def _opening_is_safe(grid: Grid, coord: Coord) -> bool:
    """Whether opening the wall at ``coord`` keeps every 2x2 window around it legal."""
    r, c = coord
    n = grid.size
    grid[coord] = FREE
    try:
        for wr in (r - 1, r):
            for wc in (c - 1, c):
                if not (0 <= wr < n - 1 and 0 <= wc < n - 1):
                    continue
                if all(grid.is_open(*p) for p in _window(wr, wc, 2)) or _diagonal_at(grid, wr, wc):
                    return False
        return True
    finally:
        grid[coord] = WALL


def _repair_blank_block(grid: Grid, r: int, c: int) -> bool:
    """Wall off one interior FREE cell of an open 2x2 block, posts first."""
    candidates = [p for p in _window(r, c, 2) if grid[p] == FREE and _interior(grid, p)]
    if not candidates:
        return False
    target = min(candidates, key=lambda p: (not _is_post(p), len(grid.open_neighbors(*p)), p))
    grid[target] = WALL
    return True


def _repair_wall_block(grid: Grid, r: int, c: int) -> bool:
    """Open a wall of a 3x3 wall block, preferring one touching a passage."""
    cells = [p for p in _window(r, c, 3) if _interior(grid, p)]
    touching = [p for p in cells if grid.open_neighbors(*p)]
    safe = [p for p in touching if _opening_is_safe(grid, p)]
    if safe:
        target = min(safe)
    elif touching:
        target = min(touching)
    else:
        target = (r + 1, c + 1)
    grid[target] = FREE
    return True


def _repair_diagonal(grid: Grid, r: int, c: int) -> bool:
    """Open one wall of a checkerboard window so both diagonals join."""
    walls = [p for p in _window(r, c, 2) if grid[p] == WALL and _interior(grid, p)]
    if not walls:
        return False
    safe = [p for p in walls if _opening_is_safe(grid, p)]
    grid[min(safe or walls)] = FREE
    return True


def repair_pass(grid: Grid) -> int:
    """One scan over all windows; returns the number of cells flipped."""
    n = grid.size
    repairs = 0
    for r in range(n - 1):
        for c in range(n - 1):
            block = _window(r, c, 2)
            if all(grid.is_open(*p) for p in block):
                repairs += _repair_blank_block(grid, r, c)
            elif _diagonal_at(grid, r, c):
                repairs += _repair_diagonal(grid, r, c)
            if r < n - 2 and c < n - 2:
                if not any(grid.is_open(*p) for p in _window(r, c, 3)):
                    repairs += _repair_wall_block(grid, r, c)
    return repairs


def smooth_patterns(grid: Grid, max_passes: int = 64) -> int:
    """Repeat repair passes until clean; returns total cells flipped."""
    total = 0
    for _ in range(max_passes):
        flipped = repair_pass(grid)
        total += flipped
        if not flipped:
            break
    return total

