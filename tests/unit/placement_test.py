"""Tests for the ship placement engine."""

from __future__ import annotations

import random
from itertools import combinations
from unittest.mock import patch

import pytest

from src.solitaire.puzzle.fleet import FLEET_CONFIGS
from src.solitaire.puzzle.grid import CellState, new_grid
from src.solitaire.puzzle.placement import (
    GenerationFailure,
    Ship,
    can_place,
    footprint,
    generate_solution,
    place_fleet,
    ships_touch,
)

GRID_SIZE = 8
SMALL_FLEET = [3, 2, 2, 1, 1, 1]
SEEDS = range(20)


def _grid_with(*cells: tuple[int, int], size: int = GRID_SIZE):
    grid = new_grid(size)
    for r, c in cells:
        grid[r][c] = CellState.SHIP
    return grid


class TestFootprint:
    def test_horizontal(self: TestFootprint) -> None:
        """Horizontal ships extend along the row."""
        assert footprint(2, 3, 3, vertical=False) == [(2, 3), (2, 4), (2, 5)]

    def test_vertical(self: TestFootprint) -> None:
        """Vertical ships extend down the column."""
        assert footprint(2, 3, 2, vertical=True) == [(2, 3), (3, 3)]


class TestCanPlace:
    def test_diagonal_distance_two_is_allowed(self: TestCanPlace) -> None:
        """Single-cell ships at (0,0) and (2,2) do not touch."""
        grid = _grid_with((0, 0))
        assert can_place(grid, [(2, 2)])

    def test_diagonal_touch_is_rejected(self: TestCanPlace) -> None:
        """Ships at (0,0) and (1,1) touch diagonally."""
        grid = _grid_with((0, 0))
        assert not can_place(grid, [(1, 1)])

    def test_orthogonal_touch_is_rejected(self: TestCanPlace) -> None:
        """A ship right next to another is rejected on every side."""
        grid = _grid_with((4, 4))
        for cell in [(3, 4), (5, 4), (4, 3), (4, 5)]:
            assert not can_place(grid, [cell])

    def test_overlap_is_rejected(self: TestCanPlace) -> None:
        """A ship cannot cover an occupied cell."""
        grid = _grid_with((4, 4))
        assert not can_place(grid, [(4, 3), (4, 4)])

    def test_out_of_bounds_is_rejected(self: TestCanPlace) -> None:
        """Footprints running off the grid are rejected."""
        grid = new_grid(GRID_SIZE)
        assert not can_place(grid, footprint(0, GRID_SIZE - 1, 2, vertical=False))

    def test_water_counts_as_occupied(self: TestCanPlace) -> None:
        """Only EMPTY neighbourhoods accept a ship."""
        grid = new_grid(GRID_SIZE)
        grid[0][1] = CellState.WATER
        assert not can_place(grid, [(0, 0)])


class TestShipsTouch:
    def test_diagonal(self: TestShipsTouch) -> None:
        """Diagonally adjacent ships touch."""
        assert ships_touch(Ship(0, 1, [(0, 0)]), Ship(1, 1, [(1, 1)]))

    def test_separated(self: TestShipsTouch) -> None:
        """Ships two cells apart do not touch."""
        assert not ships_touch(Ship(0, 1, [(0, 0)]), Ship(1, 1, [(2, 2)]))


class TestPlaceFleet:
    @pytest.mark.parametrize("seed", SEEDS)
    def test_non_adjacency(self: TestPlaceFleet, seed: int) -> None:
        """No two placed ships touch, orthogonally or diagonally."""
        result = generate_solution(SMALL_FLEET, GRID_SIZE, random.Random(seed))
        for a, b in combinations(result.ships, 2):
            assert not ships_touch(a, b), f"ships {a.id} and {b.id} touch"

    @pytest.mark.parametrize("size", sorted(FLEET_CONFIGS))
    def test_every_ship_placed_once(self: TestPlaceFleet, size: int) -> None:
        """Each fleet member appears exactly once with its declared length."""
        fleet = list(FLEET_CONFIGS[size].ships)
        result = generate_solution(fleet, size, random.Random(size))
        assert [ship.length for ship in result.ships] == fleet
        assert [ship.id for ship in result.ships] == list(range(len(fleet)))
        for ship in result.ships:
            assert len(ship.segments) == ship.length
            for r, c in ship.segments:
                assert 0 <= r < size and 0 <= c < size

    def test_grid_matches_ships(self: TestPlaceFleet) -> None:
        """The solution grid is SHIP exactly on ship segments and WATER elsewhere."""
        result = generate_solution(SMALL_FLEET, GRID_SIZE, random.Random(7))
        segments = {cell for ship in result.ships for cell in ship.segments}
        for r in range(GRID_SIZE):
            for c in range(GRID_SIZE):
                expected = CellState.SHIP if (r, c) in segments else CellState.WATER
                assert result.grid[r][c] is expected

    def test_ships_are_straight(self: TestPlaceFleet) -> None:
        """Segments run in a single row or a single column."""
        result = generate_solution(SMALL_FLEET, GRID_SIZE, random.Random(3))
        for ship in result.ships:
            rows = {r for r, _ in ship.segments}
            cols = {c for _, c in ship.segments}
            assert len(rows) == 1 or len(cols) == 1

    def test_same_seed_same_board(self: TestPlaceFleet) -> None:
        """A seeded random source makes placement reproducible."""
        first = generate_solution(SMALL_FLEET, GRID_SIZE, random.Random(99))
        second = generate_solution(SMALL_FLEET, GRID_SIZE, random.Random(99))
        assert first.grid == second.grid

    def test_impossible_fleet_returns_none(self: TestPlaceFleet) -> None:
        """A fleet that cannot fit yields None instead of a partial board."""
        assert place_fleet([1] * 10, 3, random.Random(0), max_attempts=50) is None

    def test_ship_longer_than_grid(self: TestPlaceFleet) -> None:
        """A ship longer than the grid side can never be placed."""
        assert place_fleet([5], 4, random.Random(0)) is None


class TestGenerateSolution:
    def test_raises_after_board_budget(self: TestGenerateSolution) -> None:
        """GenerationFailure is raised once every board attempt fails."""
        with pytest.raises(GenerationFailure) as excinfo:
            generate_solution([1] * 10, 3, random.Random(0), ship_attempts=5, board_attempts=4)
        assert excinfo.value.attempts == 4
        assert excinfo.value.size == 3
        assert "after 4 attempts" in str(excinfo.value)

    def test_restarts_whole_board(self: TestGenerateSolution) -> None:
        """A failed board is retried from scratch until one succeeds."""
        good = place_fleet(SMALL_FLEET, GRID_SIZE, random.Random(1))
        with patch(
            "src.solitaire.puzzle.placement.place_fleet",
            side_effect=[None, None, good],
        ) as mock_place:
            result = generate_solution(SMALL_FLEET, GRID_SIZE, random.Random(1))
        assert result is good
        assert mock_place.call_count == 3

    def test_failure_is_logged(self: TestGenerateSolution) -> None:
        """Exhausting the budget logs a warning."""
        with (
            patch("src.solitaire.puzzle.placement.place_fleet", return_value=None),
            patch("src.solitaire.puzzle.placement.logger") as mock_logger,
            pytest.raises(GenerationFailure),
        ):
            generate_solution(SMALL_FLEET, GRID_SIZE, random.Random(1), board_attempts=2)
        assert mock_logger.warning.called
