"""Tests for the deductive constraint solver."""

from __future__ import annotations

from src.solitaire.puzzle.grid import CellState, copy_grid, new_grid
from src.solitaire.puzzle.solver import (
    fill_completed_lines,
    is_fully_determined,
    matches_solution,
    solve,
)
from tests.factories import COL_CLUES, ROW_CLUES

S = CellState.SHIP
W = CellState.WATER
E = CellState.EMPTY

GIVEN_ROW = 3
GIVEN_SHIP = (3, 3)
DIAGONALS_OF_GIVEN = [(2, 2), (2, 4), (4, 2), (4, 4)]


class TestSolverRules:
    def test_completed_row_becomes_water(self: TestSolverRules) -> None:
        """A row whose ship count meets its clue fills with water."""
        grid = new_grid(8)
        grid[GIVEN_SHIP[0]][GIVEN_SHIP[1]] = S

        result = solve(grid, ROW_CLUES, COL_CLUES)

        for c in range(8):
            expected = S if (GIVEN_ROW, c) == GIVEN_SHIP else W
            assert result[GIVEN_ROW][c] is expected

    def test_diagonals_of_ship_become_water(self: TestSolverRules) -> None:
        """Diagonal neighbours of a known ship cell are water."""
        grid = new_grid(8)
        grid[GIVEN_SHIP[0]][GIVEN_SHIP[1]] = S

        result = solve(grid, ROW_CLUES, COL_CLUES)

        for r, c in DIAGONALS_OF_GIVEN:
            assert result[r][c] is W

    def test_single_completion_pass(self: TestSolverRules) -> None:
        """fill_completed_lines alone waters the completed row in place."""
        grid = new_grid(8)
        grid[GIVEN_SHIP[0]][GIVEN_SHIP[1]] = S

        changed = fill_completed_lines(grid, ROW_CLUES, COL_CLUES)

        assert changed > 0
        assert all(grid[GIVEN_ROW][c] is W for c in range(8) if c != GIVEN_SHIP[1])

    def test_saturated_line_becomes_ship(self: TestSolverRules) -> None:
        """A line whose unknowns are all needed for its clue fills with ships."""
        grid = [
            [E, W, E],
            [E, E, E],
            [E, E, E],
        ]
        result = solve(grid, [2, 0, 0], [1, 0, 1])
        assert result == [
            [S, W, S],
            [W, W, W],
            [W, W, W],
        ]

    def test_zero_clue_lines_become_water(self: TestSolverRules) -> None:
        """Rows and columns with a zero clue are all water."""
        result = solve(new_grid(8), ROW_CLUES, COL_CLUES)
        for c in range(8):
            assert result[1][c] is W
            assert result[4][c] is W
        for r in range(8):
            assert result[r][4] is W


class TestSolverContract:
    def test_input_not_mutated(self: TestSolverContract) -> None:
        """solve() works on a copy."""
        grid = new_grid(8)
        grid[0][0] = S
        before = copy_grid(grid)
        solve(grid, ROW_CLUES, COL_CLUES)
        assert grid == before

    def test_deterministic(self: TestSolverContract) -> None:
        """The same input always gives the same output."""
        grid = new_grid(8)
        grid[2][3] = S
        assert solve(grid, ROW_CLUES, COL_CLUES) == solve(grid, ROW_CLUES, COL_CLUES)

    def test_idempotent(self: TestSolverContract) -> None:
        """Solving a solved output changes nothing."""
        grid = new_grid(8)
        grid[0][1] = S
        once = solve(grid, ROW_CLUES, COL_CLUES)
        assert solve(once, ROW_CLUES, COL_CLUES) == once

    def test_complete_solution_is_fixed_point(
        self: TestSolverContract, solution: list
    ) -> None:
        """A fully known solution comes back unchanged."""
        assert solve(solution, ROW_CLUES, COL_CLUES) == solution

    def test_stalls_without_guessing(self: TestSolverContract) -> None:
        """When nothing is forced, EMPTY cells remain."""
        result = solve(new_grid(3), [1, 0, 1], [1, 0, 1])
        assert not is_fully_determined(result)
        assert result[1] == [W, W, W]
        assert result[0][0] is E

    def test_matches_solution(self: TestSolverContract, solution: list) -> None:
        """matches_solution needs an exact, fully determined match."""
        assert matches_solution(copy_grid(solution), solution)
        partial = copy_grid(solution)
        partial[0][0] = E
        assert not matches_solution(partial, solution)
