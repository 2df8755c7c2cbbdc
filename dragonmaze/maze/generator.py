"""Structural generation phases: wall-filled grid, passage carving, loop openings.

Carving works on the odd-offset "room" cells: every (odd, odd) cell is
carved and the wall cell between two consecutive rooms is opened. The
(even, even) cells stay walls, which alone rules out open 2x2 blocks,
checkerboards and 3x3 wall blocks on the carved result.
"""
from __future__ import annotations
import random
from typing import List, NamedTuple, Tuple

from .errors import GenerationError, check_size
from .grid import Coord, Grid
from .tiles import FREE, WALL

ROOM_STEPS = [(-2, 0), (2, 0), (0, -2), (0, 2)]


class StructuralOutputs(NamedTuple):
    grid: Grid
    cells_carved: int
    loops_opened: int


class Generator:
    def __init__(self, size: int, rng: random.Random, loop_chance: float = 0.0):
        self.size = check_size(size)
        self.rng = rng
        self.loop_chance = loop_chance

    def init_grid(self) -> Grid:
        return Grid(self.size, fill=WALL)

    def room_cells(self) -> List[Coord]:
        return [(r, c) for r in range(1, self.size, 2) for c in range(1, self.size, 2)]

    def _unvisited_rooms(self, r: int, c: int, visited) -> List[Coord]:
        out = []
        for dr, dc in ROOM_STEPS:
            nr, nc = r + dr, c + dc
            if 0 < nr < self.size - 1 and 0 < nc < self.size - 1 and (nr, nc) not in visited:
                out.append((nr, nc))
        return out

    def carve_passages(self, grid: Grid) -> int:
        """Randomized depth-first walk over room cells; returns cells opened."""
        rooms = self.room_cells()
        start = self.rng.choice(rooms)
        grid.set(start[0], start[1], FREE)
        visited = {start}
        stack: List[Coord] = [start]
        carved = 1
        while stack:
            r, c = stack[-1]
            unvisited = self._unvisited_rooms(r, c, visited)
            if not unvisited:
                stack.pop()
                continue
            nr, nc = self.rng.choice(unvisited)
            grid.set((r + nr) // 2, (c + nc) // 2, FREE)
            grid.set(nr, nc, FREE)
            carved += 2
            visited.add((nr, nc))
            stack.append((nr, nc))
        if len(visited) != len(rooms):
            raise GenerationError(f"carving reached {len(visited)} of {len(rooms)} rooms")
        return carved

    def loop_candidates(self, grid: Grid) -> List[Tuple[int, int]]:
        """Interior walls sitting between two room cells."""
        out = []
        last = self.size - 1
        for r in range(1, last):
            for c in range(1, last):
                if (r + c) % 2 == 0 or grid.get(r, c) != WALL:
                    continue
                out.append((r, c))
        return out

    def open_loops(self, grid: Grid) -> int:
        if self.loop_chance <= 0:
            return 0
        opened = 0
        for r, c in self.loop_candidates(grid):
            if self.rng.random() < self.loop_chance:
                grid.set(r, c, FREE)
                opened += 1
        return opened

    def run(self) -> StructuralOutputs:
        grid = self.init_grid()
        carved = self.carve_passages(grid)
        loops = self.open_loops(grid)
        return StructuralOutputs(grid, carved, loops)
