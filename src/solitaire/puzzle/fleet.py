"""Fleet catalog: ship lengths and clue targets per grid size."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

DIFFICULTIES: Final[tuple[str, ...]] = ("easy", "medium", "hard", "expert")


@dataclass(frozen=True)
class FleetConfig:
    """Ships to place on one grid size and how much each difficulty reveals."""

    size: int
    ships: tuple[int, ...]
    # revealed cells the solver-guided reducer aims for
    reveal_targets: dict[str, int] = field(default_factory=dict)
    # cells revealed at random by the legacy hint mode
    legacy_hints: dict[str, int] = field(default_factory=dict)

    @property
    def total_ship_cells(self) -> int:
        return sum(self.ships)

    def reveal_target(self, difficulty: str) -> int:
        return self.reveal_targets[_check_difficulty(difficulty)]

    def legacy_hint_count(self, difficulty: str) -> int:
        return self.legacy_hints[_check_difficulty(difficulty)]


FLEET_CONFIGS: Final[dict[int, FleetConfig]] = {
    8: FleetConfig(
        size=8,
        ships=(3, 2, 2, 1, 1, 1),
        reveal_targets={"easy": 20, "medium": 12, "hard": 6, "expert": 0},
        legacy_hints={"easy": 6, "medium": 3, "hard": 0, "expert": 0},
    ),
    10: FleetConfig(
        size=10,
        ships=(4, 3, 3, 2, 2, 2, 1, 1, 1, 1),
        reveal_targets={"easy": 30, "medium": 18, "hard": 9, "expert": 0},
        legacy_hints={"easy": 10, "medium": 5, "hard": 0, "expert": 0},
    ),
    12: FleetConfig(
        size=12,
        ships=(5, 4, 3, 3, 2, 2, 2, 1, 1, 1, 1),
        reveal_targets={"easy": 42, "medium": 26, "hard": 13, "expert": 0},
        legacy_hints={"easy": 15, "medium": 8, "hard": 0, "expert": 0},
    ),
}

GRID_SIZES: Final[tuple[int, ...]] = tuple(sorted(FLEET_CONFIGS))


def _check_difficulty(difficulty: str) -> str:
    if difficulty not in DIFFICULTIES:
        raise ValueError(
            f"Unknown difficulty {difficulty!r}; expected one of {', '.join(DIFFICULTIES)}"
        )
    return difficulty


def get_fleet_config(size: int) -> FleetConfig:
    try:
        return FLEET_CONFIGS[size]
    except KeyError:
        raise ValueError(
            f"Unsupported grid size {size}; expected one of {GRID_SIZES}"
        ) from None
