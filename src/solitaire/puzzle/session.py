"""Live play state for one puzzle: moves, auto water, hints, checks and undo."""

from __future__ import annotations

import logging
import random
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from src.solitaire.core.config import MISTAKE_MODE_DEFAULT, UNDO_HISTORY_LIMIT
from src.solitaire.core.result import ServiceResult
from src.solitaire.puzzle.grid import (
    ORTHOGONAL,
    CellState,
    Coord,
    Grid,
    copy_grid,
    in_bounds,
    neighbours,
)
from src.solitaire.puzzle.solver import fill_completed_lines, solve

if TYPE_CHECKING:
    from src.solitaire.puzzle.generator import Puzzle
    from src.solitaire.puzzle.placement import Ship

logger = logging.getLogger(__name__)

NEXT_STATE: dict[CellState, CellState] = {
    CellState.EMPTY: CellState.SHIP,
    CellState.SHIP: CellState.WATER,
    CellState.WATER: CellState.EMPTY,
}

NO_HINT_MESSAGE = "No logical moves available."
MISTAKE_MESSAGE = "That cell is water."
LOCKED_MESSAGE = "That cell was given at the start."
FINISHED_MESSAGE = "This puzzle is already finished."


@dataclass
class SolutionCheck:
    solved: bool
    mismatches: list[Coord] = field(default_factory=list)


@dataclass
class FleetEntry:
    """One line of the fleet checklist."""

    length: int
    total: int
    found: int

    @property
    def complete(self) -> bool:
        return self.found >= self.total


def find_ship_components(grid: Grid) -> list[list[Coord]]:
    """4-connected groups of SHIP cells, each in flood-fill order."""
    size = len(grid)
    checked = [[False] * size for _ in range(size)]
    components: list[list[Coord]] = []
    for r in range(size):
        for c in range(size):
            if grid[r][c] is not CellState.SHIP or checked[r][c]:
                continue
            checked[r][c] = True
            queue = deque([(r, c)])
            component: list[Coord] = []
            while queue:
                cr, cc = queue.popleft()
                component.append((cr, cc))
                for nr, nc in neighbours(size, cr, cc, ORTHOGONAL):
                    if grid[nr][nc] is CellState.SHIP and not checked[nr][nc]:
                        checked[nr][nc] = True
                        queue.append((nr, nc))
            components.append(component)
    return components


class PuzzleSession:
    """Owns the player grid for one puzzle and applies every player action to it."""

    def __init__(
        self,
        puzzle: Puzzle,
        *,
        mistake_mode: bool = MISTAKE_MODE_DEFAULT,
        auto_water: bool = True,
        undo_limit: int = UNDO_HISTORY_LIMIT,
        rng: random.Random | None = None,
    ) -> None:
        self.puzzle = puzzle
        self.mistake_mode = mistake_mode
        self.auto_water = auto_water
        self.rng = rng or random.Random()  # noqa: S311
        self.player_grid: Grid = puzzle.starting_grid()
        self.givens: frozenset[Coord] = frozenset(
            (r, c)
            for r, row in enumerate(self.player_grid)
            for c, cell in enumerate(row)
            if cell is not CellState.EMPTY
        )
        self._history: deque[Grid] = deque(maxlen=max(0, undo_limit))
        self.started_at = time.monotonic()
        self.completed_ms: int | None = None
        self.revealed = False

    # -- properties -------------------------------------------------------

    @property
    def size(self) -> int:
        return self.puzzle.grid_size

    @property
    def finished(self) -> bool:
        return self.revealed or self.completed_ms is not None

    @property
    def is_solved(self) -> bool:
        return self.check_solution().solved

    @property
    def elapsed_ms(self) -> int:
        if self.completed_ms is not None:
            return self.completed_ms
        return int((time.monotonic() - self.started_at) * 1000)

    @property
    def can_undo(self) -> bool:
        return bool(self._history) and not self.finished

    # -- moves ------------------------------------------------------------

    def cycle(self, row: int, col: int) -> ServiceResult[CellState]:
        """Advance a cell EMPTY -> SHIP -> WATER -> EMPTY."""
        self._check_coords(row, col)
        return self._apply(row, col, NEXT_STATE[self.player_grid[row][col]])

    def mark(self, row: int, col: int, state: CellState) -> ServiceResult[CellState]:
        """Set a cell to ``state`` directly."""
        self._check_coords(row, col)
        return self._apply(row, col, state)

    def _apply(self, row: int, col: int, state: CellState) -> ServiceResult[CellState]:
        current = self.player_grid[row][col]
        if self.finished:
            return ServiceResult.fail(FINISHED_MESSAGE, current)
        if (row, col) in self.givens:
            return ServiceResult.fail(LOCKED_MESSAGE, current)
        if (
            self.mistake_mode
            and state is CellState.SHIP
            and self.puzzle.solution_grid[row][col] is not CellState.SHIP
        ):
            return ServiceResult.fail(MISTAKE_MESSAGE, current)
        if state is current:
            return ServiceResult.ok(current)

        self._history.append(copy_grid(self.player_grid))
        self.player_grid[row][col] = state
        self._after_move()
        return ServiceResult.ok(self.player_grid[row][col])

    def _after_move(self) -> None:
        if self.auto_water:
            self.auto_water_fill()
        if self.completed_ms is None and self.check_solution().solved:
            self.completed_ms = max(1, int((time.monotonic() - self.started_at) * 1000))
            logger.info(
                "Puzzle %s solved in %d ms", self.puzzle.config_key, self.completed_ms
            )

    def auto_water_fill(self) -> int:
        """Fill lines that already hold their clue's worth of ships with water."""
        return fill_completed_lines(
            self.player_grid, self.puzzle.row_clues, self.puzzle.col_clues
        )

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        self.player_grid = self._history.pop()
        return True

    def hint(self) -> ServiceResult[Coord]:
        """Reveal one EMPTY cell the solver can deduce from the current grid."""
        if self.finished:
            return ServiceResult.fail(FINISHED_MESSAGE)
        solution = self.puzzle.solution_grid
        deduced = solve(self.player_grid, self.puzzle.row_clues, self.puzzle.col_clues)
        candidates = [
            (r, c)
            for r in range(self.size)
            for c in range(self.size)
            if self.player_grid[r][c] is CellState.EMPTY
            and deduced[r][c] is not CellState.EMPTY
            # a wrong player mark can push the solver to a wrong conclusion
            and deduced[r][c] is solution[r][c]
        ]
        if not candidates:
            return ServiceResult.fail(NO_HINT_MESSAGE)

        r, c = self.rng.choice(candidates)
        self._history.append(copy_grid(self.player_grid))
        self.player_grid[r][c] = solution[r][c]
        self._after_move()
        return ServiceResult.ok((r, c))

    def reveal_solution(self) -> None:
        """Show the solution and end the session without a completion time."""
        self.player_grid = copy_grid(self.puzzle.solution_grid)
        self.revealed = True
        self._history.clear()

    # -- inspection -------------------------------------------------------

    def check_solution(self) -> SolutionCheck:
        """Compare ship placement against the solution; non-SHIP counts as water."""
        solution = self.puzzle.solution_grid
        mismatches = [
            (r, c)
            for r in range(self.size)
            for c in range(self.size)
            if (self.player_grid[r][c] is CellState.SHIP)
            != (solution[r][c] is CellState.SHIP)
        ]
        return SolutionCheck(solved=not mismatches, mismatches=mismatches)

    def identify_found_ships(self) -> list[Ship]:
        """Solution ships whose exact cells form a ship group on the player grid."""
        player_signatures = {
            tuple(sorted(component))
            for component in find_ship_components(self.player_grid)
        }
        return [ship for ship in self.puzzle.ships if ship.signature in player_signatures]

    def fleet_status(self) -> list[FleetEntry]:
        totals = Counter(self.puzzle.fleet)
        found = Counter(ship.length for ship in self.identify_found_ships())
        return [
            FleetEntry(length=length, total=totals[length], found=found[length])
            for length in sorted(totals, reverse=True)
        ]

    def row_counts(self) -> list[int]:
        return [
            sum(1 for cell in row if cell is CellState.SHIP) for row in self.player_grid
        ]

    def col_counts(self) -> list[int]:
        return [
            sum(1 for r in range(self.size) if self.player_grid[r][c] is CellState.SHIP)
            for c in range(self.size)
        ]

    def satisfied_rows(self) -> list[bool]:
        return [
            count == clue for count, clue in zip(self.row_counts(), self.puzzle.row_clues)
        ]

    def satisfied_cols(self) -> list[bool]:
        return [
            count == clue for count, clue in zip(self.col_counts(), self.puzzle.col_clues)
        ]

    def _check_coords(self, row: int, col: int) -> None:
        if not in_bounds(self.size, row, col):
            raise ValueError(f"Cell ({row}, {col}) is outside the {self.size}x{self.size} grid")
