"""Pydantic schemas for the read-only JSON endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from src.solitaire.puzzle.grid import grid_to_rows

if TYPE_CHECKING:
    from src.solitaire.puzzle.session import PuzzleSession


class ShipOut(BaseModel):
    id: int
    length: int
    segments: list[tuple[int, int]]
    found: bool = False


class PuzzleOut(BaseModel):
    """Snapshot of the current puzzle, as consumed by export tooling.

    Cell values: 0 = empty, 1 = water, 2 = ship.
    """

    grid_size: int
    difficulty: str
    fleet: list[int]
    row_clues: list[int]
    col_clues: list[int]
    player_grid: list[list[int]]
    starting_grid: list[list[int]]
    solution_grid: list[list[int]]
    ships: list[ShipOut]
    solved: bool
    elapsed_ms: int = Field(ge=0)

    @classmethod
    def from_session(cls, session: PuzzleSession) -> PuzzleOut:
        puzzle = session.puzzle
        found_ids = {ship.id for ship in session.identify_found_ships()}
        return cls(
            grid_size=puzzle.grid_size,
            difficulty=puzzle.difficulty,
            fleet=list(puzzle.fleet),
            row_clues=list(puzzle.row_clues),
            col_clues=list(puzzle.col_clues),
            player_grid=grid_to_rows(session.player_grid),
            starting_grid=grid_to_rows(puzzle.player_grid),
            solution_grid=grid_to_rows(puzzle.solution_grid),
            ships=[
                ShipOut(
                    id=ship.id,
                    length=ship.length,
                    segments=list(ship.segments),
                    found=ship.id in found_ids,
                )
                for ship in puzzle.ships
            ],
            solved=session.is_solved,
            elapsed_ms=session.elapsed_ms,
        )


class BestTimeOut(BaseModel):
    config_key: str
    best_ms: int | None = None
    best: str
