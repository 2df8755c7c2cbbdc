"""Hero, dragon and sword placement.

Order: item first, then dragon, then a hero cell that is not 4-adjacent to
the dragon. When the dragon leaves no room for the hero it is re-rolled a
bounded number of times.
"""
from __future__ import annotations
import random
from typing import Dict, List

from .errors import GenerationError
from .grid import Coord, Grid
from .tiles import DRAGON, ENTITY_LABELS, FREE, HERO, ITEM


def clear_entities(grid: Grid) -> None:
    for label in ENTITY_LABELS:
        for coord in grid.cells(label):
            grid[coord] = FREE


def interior_free_cells(grid: Grid) -> List[Coord]:
    return [(r, c) for r, c in grid.cells(FREE) if not grid.is_boundary(r, c)]


def _adjacent(a: Coord, b: Coord) -> bool:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


def place_entities(grid: Grid, rng: random.Random, retries: int = 10, metrics: Dict | None = None) -> Dict[str, Coord]:
    """Place item, dragon and hero; returns their positions by tile type name.

    Raises GenerationError when no hero cell survives ``retries`` dragon re-rolls.
    """
    clear_entities(grid)
    free = interior_free_cells(grid)
    if len(free) < 3:
        raise GenerationError(f"only {len(free)} free interior cells, need 3")

    item = rng.choice(free)
    remaining = [p for p in free if p != item]
    for _ in range(retries + 1):
        dragon = rng.choice(remaining)
        hero_cells = [p for p in remaining if p != dragon and not _adjacent(p, dragon)]
        if hero_cells:
            hero = rng.choice(hero_cells)
            grid[item] = ITEM
            grid[dragon] = DRAGON
            grid[hero] = HERO
            return {"item": item, "dragon": dragon, "hero": hero}
        if metrics is not None:
            metrics['placement_rerolls'] = metrics.get('placement_rerolls', 0) + 1
    raise GenerationError(f"no hero cell away from the dragon after {retries} re-rolls")


__all__ = ["clear_entities", "interior_free_cells", "place_entities"]
