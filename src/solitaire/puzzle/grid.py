"""Grid primitives shared by the generator, solver and play session."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum


class CellState(Enum):
    """State of a single cell, on the solution or the player grid."""

    EMPTY = 0
    WATER = 1
    SHIP = 2


Coord = tuple[int, int]
Grid = list[list[CellState]]

ORTHOGONAL: tuple[Coord, ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))
DIAGONAL: tuple[Coord, ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))


def new_grid(size: int, fill: CellState = CellState.EMPTY) -> Grid:
    return [[fill for _ in range(size)] for _ in range(size)]


def copy_grid(grid: Grid) -> Grid:
    # CellState members are immutable, a row copy is a deep copy
    return [list(row) for row in grid]


def in_bounds(size: int, row: int, col: int) -> bool:
    return 0 <= row < size and 0 <= col < size


def all_coords(size: int) -> list[Coord]:
    return [(r, c) for r in range(size) for c in range(size)]


def neighbours(
    size: int, row: int, col: int, offsets: tuple[Coord, ...]
) -> Iterator[Coord]:
    """Yield the in-bounds cells at the given offsets from (row, col)."""
    for dr, dc in offsets:
        nr, nc = row + dr, col + dc
        if in_bounds(size, nr, nc):
            yield nr, nc


def row_cells(grid: Grid, row: int) -> list[Coord]:
    return [(row, c) for c in range(len(grid))]


def col_cells(grid: Grid, col: int) -> list[Coord]:
    return [(r, col) for r in range(len(grid))]


def lines(grid: Grid) -> Iterator[list[Coord]]:
    """Yield every row, then every column, as coordinate lists."""
    for r in range(len(grid)):
        yield row_cells(grid, r)
    for c in range(len(grid)):
        yield col_cells(grid, c)


def count_state(grid: Grid, coords: list[Coord], state: CellState) -> int:
    return sum(1 for r, c in coords if grid[r][c] is state)


def grid_to_rows(grid: Grid) -> list[list[int]]:
    """Plain-int view of a grid, for JSON output."""
    return [[cell.value for cell in row] for row in grid]


def grid_from_rows(rows: list[list[int]]) -> Grid:
    return [[CellState(value) for value in row] for row in rows]


def render(grid: Grid) -> str:
    """ASCII view used in logs and test failure output."""
    symbols = {CellState.EMPTY: ".", CellState.WATER: "~", CellState.SHIP: "#"}
    return "\n".join("".join(symbols[cell] for cell in row) for row in grid)
