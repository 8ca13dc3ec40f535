"""
Deductive solver for Battleship solitaire grids.

The solver only fills in cells that are logically forced by the clues and the
no-touching rule. It never guesses and never backtracks, so a grid it cannot
finish is one a player could not finish without guessing either.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.solitaire.puzzle.grid import (
    DIAGONAL,
    CellState,
    Grid,
    copy_grid,
    count_state,
    neighbours,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from src.solitaire.puzzle.grid import Coord


def _line_clues(
    size: int, row_clues: Sequence[int], col_clues: Sequence[int]
) -> list[tuple[list[Coord], int]]:
    rows = [([(r, c) for c in range(size)], row_clues[r]) for r in range(size)]
    cols = [([(r, c) for r in range(size)], col_clues[c]) for c in range(size)]
    return rows + cols


def fill_completed_lines(
    grid: Grid, row_clues: Sequence[int], col_clues: Sequence[int]
) -> int:
    """Turn EMPTY cells to WATER in every line whose ships already meet its clue.

    Mutates ``grid`` and returns the number of changed cells.
    """
    changed = 0
    for coords, clue in _line_clues(len(grid), row_clues, col_clues):
        if count_state(grid, coords, CellState.SHIP) != clue:
            continue
        for r, c in coords:
            if grid[r][c] is CellState.EMPTY:
                grid[r][c] = CellState.WATER
                changed += 1
    return changed


def _fill_saturated_lines(
    grid: Grid, row_clues: Sequence[int], col_clues: Sequence[int]
) -> int:
    changed = 0
    for coords, clue in _line_clues(len(grid), row_clues, col_clues):
        empties = count_state(grid, coords, CellState.EMPTY)
        if empties == 0:
            continue
        if count_state(grid, coords, CellState.SHIP) + empties != clue:
            continue
        for r, c in coords:
            if grid[r][c] is CellState.EMPTY:
                grid[r][c] = CellState.SHIP
                changed += 1
    return changed


def _exclude_diagonals(grid: Grid) -> int:
    size = len(grid)
    changed = 0
    for r in range(size):
        for c in range(size):
            if grid[r][c] is not CellState.SHIP:
                continue
            for nr, nc in neighbours(size, r, c, DIAGONAL):
                if grid[nr][nc] is CellState.EMPTY:
                    grid[nr][nc] = CellState.WATER
                    changed += 1
    return changed


def solve(grid: Grid, row_clues: Sequence[int], col_clues: Sequence[int]) -> Grid:
    """Return the most-determined grid reachable by deduction from ``grid``.

    The input is left untouched. Remaining EMPTY cells in the result mean the
    clues do not force those cells.
    """
    work = copy_grid(grid)
    while True:
        changed = fill_completed_lines(work, row_clues, col_clues)
        changed += _fill_saturated_lines(work, row_clues, col_clues)
        changed += _exclude_diagonals(work)
        if not changed:
            return work


def is_fully_determined(grid: Grid) -> bool:
    return all(cell is not CellState.EMPTY for row in grid for cell in row)


def matches_solution(grid: Grid, solution: Grid) -> bool:
    """True if ``grid`` equals ``solution`` cell for cell, with no EMPTY left."""
    return grid == solution
