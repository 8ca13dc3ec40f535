"""Hide solution cells while the deductive solver can still rebuild the grid."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from src.solitaire.puzzle.grid import CellState, Grid, all_coords, copy_grid, new_grid
from src.solitaire.puzzle.solver import matches_solution, solve

if TYPE_CHECKING:
    import random
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

T = TypeVar("T")


def shuffled(items: Sequence[T], rng: random.Random) -> list[T]:
    """Return a Fisher-Yates shuffled copy of ``items``."""
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out


def revealed_count(grid: Grid) -> int:
    return sum(1 for row in grid for cell in row if cell is not CellState.EMPTY)


def water_zero_lines(
    grid: Grid, row_clues: Sequence[int], col_clues: Sequence[int]
) -> None:
    """Mark every cell of a zero-clue row or column as WATER, in place."""
    size = len(grid)
    for r in range(size):
        if row_clues[r] == 0:
            for c in range(size):
                grid[r][c] = CellState.WATER
    for c in range(size):
        if col_clues[c] == 0:
            for r in range(size):
                grid[r][c] = CellState.WATER


def reduce_clues(
    solution: Grid,
    row_clues: Sequence[int],
    col_clues: Sequence[int],
    target: int,
    rng: random.Random,
) -> Grid:
    """Blank cells greedily, keeping each blank only if the solver still wins.

    Stops once at most ``target`` cells remain revealed or every cell has
    been tried. The result may keep more than ``target`` cells, but it always
    solves back to ``solution``.
    """
    grid = copy_grid(solution)
    revealed = revealed_count(grid)
    kept = 0

    for r, c in shuffled(all_coords(len(grid)), rng):
        if revealed <= target:
            break
        scratch = copy_grid(grid)
        scratch[r][c] = CellState.EMPTY
        if matches_solution(solve(scratch, row_clues, col_clues), solution):
            grid = scratch
            revealed -= 1
        else:
            kept += 1

    water_zero_lines(grid, row_clues, col_clues)
    logger.debug(
        "Reduced to %d revealed cells (target %d, %d removals reverted)",
        revealed_count(grid),
        target,
        kept,
    )
    return grid


def legacy_hints(solution: Grid, count: int, rng: random.Random) -> Grid:
    """Reveal ``count`` random solution cells with no solvability guarantee."""
    grid = new_grid(len(solution), CellState.EMPTY)
    for r, c in shuffled(all_coords(len(solution)), rng)[:count]:
        grid[r][c] = solution[r][c]
    return grid
