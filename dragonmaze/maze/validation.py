"""Maze invariant predicates.

Each check takes a Grid (or any square sequence of label rows), works on an
immutable snapshot, and returns ``None`` when the invariant holds or the
first Violation found. Checks share no state, so running them repeatedly on
the same grid always produces the same verdicts.

Invariants covered:
1. boundary      - walls all round except one non-corner exit.
2. blank_block   - no 2x2 square of open (non-wall) cells.
3. wall_block    - no 3x3 square of walls.
4. checkerboard  - no 2x2 square with open cells on one diagonal and walls on the other.
5. connectivity  - every open cell reachable from the exit.
6. entities      - one hero, dragon and item, interior, hero not next to dragon.
"""
from __future__ import annotations
from collections import deque
from typing import Any, Callable, Dict, NamedTuple, Optional, Sequence, Tuple

from .grid import DIRECTIONS, Coord, Grid, Rows
from .tiles import DRAGON, ENTITY_LABELS, EXIT, HERO, OPEN_LABELS, TILE_TYPES, WALL

# Pattern cells: True matches an open cell, False matches a wall
Pattern = Tuple[Tuple[bool, ...], ...]

BLANK_BLOCK: Pattern = ((True, True), (True, True))
WALL_BLOCK: Pattern = ((False, False, False), (False, False, False), (False, False, False))
DIAGONAL_DOWN: Pattern = ((False, True), (True, False))
DIAGONAL_UP: Pattern = ((True, False), (False, True))


class Violation(NamedTuple):
    rule: str
    coord: Optional[Coord]
    detail: str


def _rows(grid) -> Rows:
    if isinstance(grid, Grid):
        return grid.snapshot()
    return tuple(tuple(row) for row in grid)


def _is_open(label: str) -> bool:
    return label in OPEN_LABELS


def find_square(rows: Sequence[Sequence[str]], pattern: Pattern) -> Optional[Coord]:
    """Return the top-left (row, col) of the first window matching ``pattern``."""
    n = len(rows)
    k = len(pattern)
    for i in range(n - k + 1):
        for j in range(n - k + 1):
            if all(
                _is_open(rows[i + y][j + x]) == pattern[y][x]
                for y in range(k)
                for x in range(k)
            ):
                return (i, j)
    return None


def check_boundary(grid) -> Optional[Violation]:
    rows = _rows(grid)
    n = len(rows)
    last = n - 1
    exits = []
    for i in range(n):
        for j in range(n):
            if not (i in (0, last) or j in (0, last)):
                continue
            label = rows[i][j]
            if label == EXIT:
                if i in (0, last) and j in (0, last):
                    return Violation("boundary", (i, j), "exit placed on a corner")
                exits.append((i, j))
            elif label != WALL:
                return Violation("boundary", (i, j), f"boundary cell is {TILE_TYPES.get(label, label)}, not wall")
    if len(exits) != 1:
        coord = exits[1] if len(exits) > 1 else None
        return Violation("boundary", coord, f"expected exactly one exit, found {len(exits)}")
    return None


def check_blank_block(grid) -> Optional[Violation]:
    coord = find_square(_rows(grid), BLANK_BLOCK)
    if coord is not None:
        return Violation("blank_block", coord, "2x2 block without walls")
    return None


def check_wall_block(grid) -> Optional[Violation]:
    coord = find_square(_rows(grid), WALL_BLOCK)
    if coord is not None:
        return Violation("wall_block", coord, "3x3 block of walls")
    return None


def check_checkerboard(grid) -> Optional[Violation]:
    rows = _rows(grid)
    for pattern in (DIAGONAL_DOWN, DIAGONAL_UP):
        coord = find_square(rows, pattern)
        if coord is not None:
            return Violation("checkerboard", coord, "2x2 block with open cells on one diagonal only")
    return None


def reachable_from_exit(grid) -> set:
    """Open cells reachable from the exit (empty when there is no exit)."""
    rows = _rows(grid)
    n = len(rows)
    start = next(((i, j) for i in range(n) for j in range(n) if rows[i][j] == EXIT), None)
    if start is None:
        return set()
    seen = {start}
    q = deque([start])
    while q:
        ci, cj = q.popleft()
        for di, dj in DIRECTIONS:
            ni, nj = ci + di, cj + dj
            if 0 <= ni < n and 0 <= nj < n and (ni, nj) not in seen and _is_open(rows[ni][nj]):
                seen.add((ni, nj))
                q.append((ni, nj))
    return seen


def check_connectivity(grid) -> Optional[Violation]:
    rows = _rows(grid)
    n = len(rows)
    seen = reachable_from_exit(rows)
    if not seen:
        return Violation("connectivity", None, "no exit to flood from")
    for i in range(n):
        for j in range(n):
            if _is_open(rows[i][j]) and (i, j) not in seen:
                return Violation("connectivity", (i, j), "open cell not reachable from exit")
    return None


def check_entities(grid) -> Optional[Violation]:
    rows = _rows(grid)
    n = len(rows)
    last = n - 1
    found: Dict[str, list] = {label: [] for label in ENTITY_LABELS}
    for i in range(n):
        for j in range(n):
            if rows[i][j] in found:
                found[rows[i][j]].append((i, j))
    for label in ENTITY_LABELS:
        coords = found[label]
        name = TILE_TYPES[label]
        if len(coords) != 1:
            coord = coords[1] if coords else None
            return Violation("entities", coord, f"expected one {name}, found {len(coords)}")
        i, j = coords[0]
        if i in (0, last) or j in (0, last):
            return Violation("entities", (i, j), f"{name} on the boundary")
    (hi, hj), (di, dj) = found[HERO][0], found[DRAGON][0]
    if abs(hi - di) + abs(hj - dj) == 1:
        return Violation("entities", (hi, hj), "hero adjacent to dragon")
    return None


RULES: Dict[str, Callable[[Any], Optional[Violation]]] = {
    "boundary": check_boundary,
    "blank_block": check_blank_block,
    "wall_block": check_wall_block,
    "checkerboard": check_checkerboard,
    "connectivity": check_connectivity,
    "entities": check_entities,
}

STRUCTURAL_RULES = ("boundary", "blank_block", "wall_block", "checkerboard")
PATTERN_RULES = ("blank_block", "wall_block", "checkerboard")


def validate(grid, rules: Sequence[str] = tuple(RULES)) -> Dict[str, Optional[Violation]]:
    """Run the named checks on one snapshot; maps rule -> Violation or None."""
    rows = _rows(grid)
    return {name: RULES[name](rows) for name in rules}


def violations(grid, rules: Sequence[str] = tuple(RULES)):
    return [v for v in validate(grid, rules).values() if v is not None]


def is_valid(grid) -> bool:
    return not violations(grid)


def analyze(grid) -> Dict[str, Any]:
    """JSON-ready diagnostic report for one grid."""
    rows = _rows(grid)
    verdicts = validate(rows)
    counts: Dict[str, int] = {name: 0 for name in TILE_TYPES.values()}
    for row in rows:
        for label in row:
            counts[TILE_TYPES[label]] += 1
    return {
        "size": len(rows),
        "ok": all(v is None for v in verdicts.values()),
        "violations": {
            name: {"coord": list(v.coord) if v.coord else None, "detail": v.detail}
            for name, v in verdicts.items()
            if v is not None
        },
        "counts": counts,
        "reachable": len(reachable_from_exit(rows)),
    }


__all__ = [
    "Violation",
    "BLANK_BLOCK",
    "WALL_BLOCK",
    "DIAGONAL_DOWN",
    "DIAGONAL_UP",
    "find_square",
    "check_boundary",
    "check_blank_block",
    "check_wall_block",
    "check_checkerboard",
    "check_connectivity",
    "check_entities",
    "reachable_from_exit",
    "RULES",
    "STRUCTURAL_RULES",
    "PATTERN_RULES",
    "validate",
    "violations",
    "is_valid",
    "analyze",
]
