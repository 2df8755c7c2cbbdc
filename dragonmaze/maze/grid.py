"""Square maze grid: an N x N array of tile labels.

Coordinates are (row, col). Row 0, column 0, row N-1 and column N-1 form
the boundary ring; everything else is interior.
"""
from __future__ import annotations
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import OutOfBoundsError, check_size
from .tiles import LABELS, OPEN_LABELS, TILE_TYPES, WALL

Coord = Tuple[int, int]
Rows = Tuple[Tuple[str, ...], ...]

DIRECTIONS = [(-1, 0), (1, 0), (0, -1), (0, 1)]


class Grid:
    """Mutable N x N label array. N is odd and at least 5."""

    __slots__ = ("size", "_cells")

    def __init__(self, size: int, fill: str = WALL):
        self.size = check_size(size)
        if fill not in LABELS:
            raise ValueError(f"unknown tile label {fill!r}")
        self._cells: List[List[str]] = [[fill for _ in range(size)] for _ in range(size)]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[str]]) -> "Grid":
        """Build a grid from equal-length rows of labels (strings or lists)."""
        size = len(rows)
        grid = cls(size)
        for r, row in enumerate(rows):
            if len(row) != size:
                raise ValueError(f"row {r} has {len(row)} cells, expected {size}")
            for c, label in enumerate(row):
                grid.set(r, c, label)
        return grid

    @classmethod
    def from_text(cls, text: str) -> "Grid":
        # Free cells are spaces, so only newlines are stripped
        return cls.from_rows([line for line in text.split("\n") if line != ""])

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def _check(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise OutOfBoundsError(row, col, self.size)

    def get(self, row: int, col: int) -> str:
        self._check(row, col)
        return self._cells[row][col]

    def set(self, row: int, col: int, label: str) -> None:
        self._check(row, col)
        if label not in LABELS:
            raise ValueError(f"unknown tile label {label!r}")
        self._cells[row][col] = label

    def __getitem__(self, coord: Coord) -> str:
        return self.get(*coord)

    def __setitem__(self, coord: Coord, label: str) -> None:
        self.set(coord[0], coord[1], label)

    def is_open(self, row: int, col: int) -> bool:
        return self.get(row, col) in OPEN_LABELS

    def is_boundary(self, row: int, col: int) -> bool:
        self._check(row, col)
        last = self.size - 1
        return row in (0, last) or col in (0, last)

    def is_corner(self, row: int, col: int) -> bool:
        self._check(row, col)
        last = self.size - 1
        return row in (0, last) and col in (0, last)

    def coords(self) -> Iterable[Coord]:
        for r in range(self.size):
            for c in range(self.size):
                yield (r, c)

    def cells(self, label: str) -> List[Coord]:
        """All coordinates holding ``label`` in row-major order."""
        return [(r, c) for r, c in self.coords() if self._cells[r][c] == label]

    def find(self, label: str) -> Optional[Coord]:
        for r, c in self.coords():
            if self._cells[r][c] == label:
                return (r, c)
        return None

    def neighbors(self, row: int, col: int) -> List[Coord]:
        """4-directional neighbors of (row, col), clipped to the grid."""
        self._check(row, col)
        out = []
        for dr, dc in DIRECTIONS:
            nr, nc = row + dr, col + dc
            if self.in_bounds(nr, nc):
                out.append((nr, nc))
        return out

    def open_neighbors(self, row: int, col: int) -> List[Coord]:
        return [(r, c) for r, c in self.neighbors(row, col) if self._cells[r][c] in OPEN_LABELS]

    def snapshot(self) -> Rows:
        return tuple(tuple(row) for row in self._cells)

    def copy(self) -> "Grid":
        return Grid.from_rows(self._cells)

    def to_text(self) -> str:
        return "\n".join("".join(row) for row in self._cells)

    def to_dict(self):
        return {
            "size": self.size,
            "rows": ["".join(row) for row in self._cells],
            "grid": [[TILE_TYPES[label] for label in row] for row in self._cells],
        }

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        return self._cells == other._cells

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        return f"Grid(size={self.size})"


__all__ = ["Grid", "Coord", "Rows", "DIRECTIONS"]
