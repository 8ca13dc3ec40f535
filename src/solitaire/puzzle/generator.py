"""Puzzle generation: fleet placement, clues and clue reduction in one call."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.solitaire.core.config import PLACEMENT_BOARD_ATTEMPTS, PLACEMENT_SHIP_ATTEMPTS
from src.solitaire.puzzle.clues import derive_clues
from src.solitaire.puzzle.fleet import get_fleet_config
from src.solitaire.puzzle.grid import Grid, copy_grid
from src.solitaire.puzzle.placement import GenerationFailure, Ship, generate_solution
from src.solitaire.puzzle.reducer import legacy_hints, reduce_clues

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


def config_key(grid_size: int, difficulty: str) -> str:
    """Key under which best times for this grid size and difficulty are kept."""
    return f"battleship-{grid_size}-{difficulty}"


@dataclass(frozen=True)
class Puzzle:
    """A generated puzzle. ``player_grid`` is the starting state shown to the player."""

    grid_size: int
    difficulty: str
    fleet: tuple[int, ...]
    solution_grid: Grid
    ships: tuple[Ship, ...]
    row_clues: tuple[int, ...]
    col_clues: tuple[int, ...]
    player_grid: Grid

    @property
    def config_key(self) -> str:
        return config_key(self.grid_size, self.difficulty)

    def starting_grid(self) -> Grid:
        """Fresh mutable copy of the starting state."""
        return copy_grid(self.player_grid)


def generate_puzzle(
    grid_size: int,
    difficulty: str,
    rng: random.Random | None = None,
    *,
    legacy: bool = False,
    ship_attempts: int | None = None,
    board_attempts: int | None = None,
) -> Puzzle:
    """Generate a puzzle for ``grid_size`` at ``difficulty``.

    Raises ValueError for an unknown size or difficulty, and GenerationFailure
    when no board could be placed within the retry budget.
    """
    fleet_config = get_fleet_config(grid_size)
    # resolve the difficulty up front so a typo fails before any work is done
    target = fleet_config.reveal_target(difficulty)
    rng = rng or random.Random()  # noqa: S311
    started = time.perf_counter()

    try:
        placement = generate_solution(
            fleet_config.ships,
            grid_size,
            rng,
            ship_attempts=ship_attempts or PLACEMENT_SHIP_ATTEMPTS,
            board_attempts=board_attempts or PLACEMENT_BOARD_ATTEMPTS,
        )
    except GenerationFailure:
        logger.warning(
            "Puzzle generation failed: size=%d difficulty=%s", grid_size, difficulty
        )
        raise

    row_clues, col_clues = derive_clues(placement.grid)
    if legacy:
        player_grid = legacy_hints(
            placement.grid, fleet_config.legacy_hint_count(difficulty), rng
        )
    else:
        player_grid = reduce_clues(placement.grid, row_clues, col_clues, target, rng)

    logger.info(
        "Generated %dx%d %s puzzle in %.1f ms%s",
        grid_size,
        grid_size,
        difficulty,
        (time.perf_counter() - started) * 1000,
        " (legacy hints)" if legacy else "",
    )
    return Puzzle(
        grid_size=grid_size,
        difficulty=difficulty,
        fleet=fleet_config.ships,
        solution_grid=placement.grid,
        ships=tuple(placement.ships),
        row_clues=tuple(row_clues),
        col_clues=tuple(col_clues),
        player_grid=player_grid,
    )


def generate_batch(
    count: int,
    grid_size: int,
    difficulty: str,
    rng: random.Random | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> list[Puzzle]:
    """Generate up to ``count`` puzzles, e.g. for a printable book.

    ``should_stop`` is polled between puzzles; a puzzle already in progress is
    always finished. The puzzles produced so far are returned on a stop.
    """
    rng = rng or random.Random()  # noqa: S311
    puzzles: list[Puzzle] = []
    for index in range(count):
        if should_stop is not None and should_stop():
            logger.info("Batch stopped after %d of %d puzzles", index, count)
            break
        puzzles.append(generate_puzzle(grid_size, difficulty, rng))
    return puzzles
