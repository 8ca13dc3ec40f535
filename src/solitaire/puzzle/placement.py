"""
Ship placement engine.

Ships are dropped one at a time at random, and no two ships may touch, not even
diagonally. A ship that finds no spot within its attempt budget abandons the
whole board. The caller then restarts from an empty grid.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from src.solitaire.core.config import PLACEMENT_BOARD_ATTEMPTS, PLACEMENT_SHIP_ATTEMPTS
from src.solitaire.puzzle.grid import CellState, Coord, Grid, in_bounds, new_grid

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class GenerationFailure(RuntimeError):
    """Raised when no complete board could be built within the retry budget."""

    def __init__(self, size: int, attempts: int) -> None:
        self.size = size
        self.attempts = attempts
        super().__init__(
            f"Failed to generate a valid {size}x{size} puzzle board "
            f"after {attempts} attempts."
        )


@dataclass
class Ship:
    """A placed ship and the cells it covers, in placement order."""

    id: int
    length: int
    segments: list[Coord] = field(default_factory=list)

    @property
    def signature(self) -> tuple[Coord, ...]:
        return tuple(sorted(self.segments))

    @property
    def vertical(self) -> bool:
        return len(self.segments) > 1 and self.segments[0][1] == self.segments[1][1]


@dataclass
class PlacementResult:
    grid: Grid
    ships: list[Ship]


def footprint(row: int, col: int, length: int, *, vertical: bool) -> list[Coord]:
    if vertical:
        return [(row + i, col) for i in range(length)]
    return [(row, col + i) for i in range(length)]


def can_place(grid: Grid, coords: Sequence[Coord]) -> bool:
    """True if every coord is on the board and nothing occupies its 3x3 block."""
    size = len(grid)
    for r, c in coords:
        if not in_bounds(size, r, c):
            return False
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                nr, nc = r + dr, c + dc
                if in_bounds(size, nr, nc) and grid[nr][nc] is not CellState.EMPTY:
                    return False
    return True


def ships_touch(a: Ship, b: Ship) -> bool:
    """True if any segment of ``a`` is orthogonally or diagonally next to ``b``."""
    others = set(b.segments)
    for r, c in a.segments:
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if (r + dr, c + dc) in others:
                    return True
    return False


def place_fleet(
    fleet: Sequence[int],
    size: int,
    rng: random.Random,
    max_attempts: int = PLACEMENT_SHIP_ATTEMPTS,
) -> PlacementResult | None:
    """Place every ship of ``fleet`` in order, or return None if one does not fit."""
    grid = new_grid(size, CellState.EMPTY)
    ships: list[Ship] = []

    for ship_id, length in enumerate(fleet):
        if length > size:
            return None
        placed = False
        for _ in range(max_attempts):
            vertical = rng.random() < 0.5
            if vertical:
                row = rng.randrange(size - length + 1)
                col = rng.randrange(size)
            else:
                row = rng.randrange(size)
                col = rng.randrange(size - length + 1)

            coords = footprint(row, col, length, vertical=vertical)
            if can_place(grid, coords):
                for r, c in coords:
                    grid[r][c] = CellState.SHIP
                ships.append(Ship(id=ship_id, length=length, segments=coords))
                placed = True
                break
        if not placed:
            logger.debug(
                "Could not place ship %d (length %d) on %dx%d board",
                ship_id,
                length,
                size,
                size,
            )
            return None

    # the solution grid is fully determined: everything else is water
    for r in range(size):
        for c in range(size):
            if grid[r][c] is CellState.EMPTY:
                grid[r][c] = CellState.WATER
    return PlacementResult(grid=grid, ships=ships)


def generate_solution(
    fleet: Sequence[int],
    size: int,
    rng: random.Random,
    ship_attempts: int = PLACEMENT_SHIP_ATTEMPTS,
    board_attempts: int = PLACEMENT_BOARD_ATTEMPTS,
) -> PlacementResult:
    """Retry whole boards until the fleet fits, raising GenerationFailure if not."""
    for attempt in range(1, board_attempts + 1):
        result = place_fleet(fleet, size, rng, max_attempts=ship_attempts)
        if result is not None:
            if attempt > 1:
                logger.debug("Board placed after %d attempts", attempt)
            return result

    logger.warning(
        "Giving up on %dx%d board for fleet %s after %d attempts",
        size,
        size,
        list(fleet),
        board_attempts,
    )
    raise GenerationFailure(size, board_attempts)
