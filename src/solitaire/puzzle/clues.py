"""Row and column clues derived from a solved grid."""

from __future__ import annotations

from src.solitaire.puzzle.grid import CellState, Grid


def derive_clues(grid: Grid) -> tuple[list[int], list[int]]:
    """Count ship cells per row and per column."""
    size = len(grid)
    row_clues = [0] * size
    col_clues = [0] * size
    for r in range(size):
        for c in range(size):
            if grid[r][c] is CellState.SHIP:
                row_clues[r] += 1
                col_clues[c] += 1
    return row_clues, col_clues
