from __future__ import annotations

from typing import Final

from decouple import config

ENVIRONMENT: Final[str] = config("ENVIRONMENT", default="production")
DEBUG: Final[bool] = ENVIRONMENT != "production"

SECRET_KEY: Final[str] = config("SECRET_KEY", default="super-secret-dev-key")

APP_VERSION: Final[str] = config("APP_VERSION", default="dev")

# --- Puzzle defaults ---
DEFAULT_GRID_SIZE: Final[int] = config("DEFAULT_GRID_SIZE", default=8, cast=int)
DEFAULT_DIFFICULTY: Final[str] = config("DEFAULT_DIFFICULTY", default="medium")

# --- Generation budgets ---
PLACEMENT_SHIP_ATTEMPTS: Final[int] = config(
    "PLACEMENT_SHIP_ATTEMPTS", default=200, cast=int
)
PLACEMENT_BOARD_ATTEMPTS: Final[int] = config(
    "PLACEMENT_BOARD_ATTEMPTS", default=50, cast=int
)

# --- Play policy ---
UNDO_HISTORY_LIMIT: Final[int] = config("UNDO_HISTORY_LIMIT", default=10, cast=int)
MISTAKE_MODE_DEFAULT: Final[bool] = config(
    "MISTAKE_MODE_DEFAULT", default=False, cast=bool
)
