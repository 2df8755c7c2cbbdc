import random

import pytest

from dragonmaze.maze import EXIT, FREE, WALL, Grid
from dragonmaze.maze.exits import exit_candidates, inward_neighbor, place_exit
from dragonmaze.maze.generator import Generator
from tests.maze_test_utils import VALID_5, grid_of, replace_row


class _FirstChoice:
    """Deterministic stand-in for random.Random: always picks seq[0]."""

    def choice(self, seq):
        return seq[0]


class _LastChoice:
    def choice(self, seq):
        return seq[-1]


def carved(size=9, seed=1):
    return Generator(size, random.Random(seed)).run().grid


@pytest.mark.parametrize("size", [5, 7, 11, 101])
def test_candidates_skip_corners(size):
    cands = exit_candidates(size)
    assert len(cands) == 4 * (size - 2)
    assert len(set(cands)) == len(cands)
    g = Grid(size)
    for r, c in cands:
        assert g.is_boundary(r, c)
        assert not g.is_corner(r, c)


def test_inward_neighbor_each_edge():
    assert inward_neighbor(7, (0, 3)) == (1, 3)
    assert inward_neighbor(7, (6, 2)) == (5, 2)
    assert inward_neighbor(7, (4, 0)) == (4, 1)
    assert inward_neighbor(7, (4, 6)) == (4, 5)


def test_place_exit_on_carved_grid():
    g = carved()
    pos, opened = place_exit(g, random.Random(5))
    assert g.cells(EXIT) == [pos]
    assert not g.is_corner(*pos)
    assert g.is_open(*inward_neighbor(g.size, pos))


def test_place_exit_opens_inward_wall():
    g = carved()
    # (0,2) sits above the (1,2) wall between two rooms
    g[1, 2] = WALL
    pos, opened = place_exit(g, _FirstChoice())
    assert pos == (0, 1)
    assert opened is False
    g2 = carved()
    g2[1, 2] = WALL

    class _Second:
        def choice(self, seq):
            return seq[1]

    pos, opened = place_exit(g2, _Second())
    assert pos == (0, 2)
    assert opened is True
    assert g2[1, 2] == FREE


def test_place_exit_idempotent():
    g = carved()
    first, _ = place_exit(g, random.Random(3))
    before = g.snapshot()
    again, opened = place_exit(g, random.Random(99))
    assert again == first
    assert opened is False
    assert g.snapshot() == before


def test_relocate_moves_exit():
    g = grid_of(VALID_5)
    pos, opened = place_exit(g, _LastChoice(), relocate=True)
    assert pos == (1, 0)
    assert opened is False
    assert g[0, 1] == WALL
    assert g.cells(EXIT) == [(1, 0)]


def test_duplicate_exits_collapse_to_one():
    g = grid_of(replace_row(VALID_5, 0, "XSXSX"))
    pos, _ = place_exit(g, _FirstChoice())
    assert g.cells(EXIT) == [pos]


def test_every_edge_gets_used():
    edges = set()
    for seed in range(200):
        g = Grid(7)
        pos, _ = place_exit(g, random.Random(seed))
        r, c = pos
        edges.add("top" if r == 0 else "bottom" if r == 6 else "left" if c == 0 else "right")
    assert edges == {"top", "bottom", "left", "right"}
