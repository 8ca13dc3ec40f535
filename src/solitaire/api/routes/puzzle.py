"""HTMX routes for playing Battleship solitaire puzzles."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from src.solitaire.api.schemas import BestTimeOut, PuzzleOut
from src.solitaire.core.config import (
    DEFAULT_DIFFICULTY,
    DEFAULT_GRID_SIZE,
    MISTAKE_MODE_DEFAULT,
)
from src.solitaire.puzzle.fleet import DIFFICULTIES, GRID_SIZES
from src.solitaire.puzzle.generator import config_key, generate_puzzle
from src.solitaire.puzzle.grid import CellState
from src.solitaire.puzzle.placement import GenerationFailure
from src.solitaire.puzzle.session import PuzzleSession
from src.solitaire.records.best_times import (
    BestTimeService,
    format_time,
    get_best_time_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()

BASE_DIR = Path(__file__).resolve().parents[2]
templates = Jinja2Templates(directory=str(BASE_DIR / "web" / "templates"))

SESSION_COOKIE_KEY = "puzzle_sid"
LOG_LENGTH = 5

MARK_STATES = {
    "empty": CellState.EMPTY,
    "water": CellState.WATER,
    "ship": CellState.SHIP,
}

# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------


@dataclass
class PlayState:
    puzzle_session: PuzzleSession | None = None
    log: list[str] = field(default_factory=list)
    best_ms: int | None = None
    new_best: bool = False
    mismatches: list[tuple[int, int]] = field(default_factory=list)
    hint_cell: tuple[int, int] | None = None

    def append_log(self, message: str) -> None:
        self.log.append(message)
        if len(self.log) > LOG_LENGTH:
            self.log.pop(0)


_SESSIONS: dict[str, PlayState] = {}


def _session_key(request: Request) -> str:
    key = request.session.get(SESSION_COOKIE_KEY)
    if not key:
        key = uuid.uuid4().hex
        request.session[SESSION_COOKIE_KEY] = key
    return key


def get_play_state(request: Request) -> PlayState:
    key = _session_key(request)
    if key not in _SESSIONS:
        _SESSIONS[key] = PlayState()
    return _SESSIONS[key]


def _parse_grid_size(value: int | None) -> int:
    return value if value in GRID_SIZES else DEFAULT_GRID_SIZE


def _parse_difficulty(value: str | None) -> str:
    value = (value or "").strip().lower()
    return value if value in DIFFICULTIES else DEFAULT_DIFFICULTY


# ---------------------------------------------------------------------------
# Completion helper
# ---------------------------------------------------------------------------


def _record_completion(state: PlayState, service: BestTimeService) -> None:
    """Persist a fresh completion and note the outcome in the status log."""
    session = state.puzzle_session
    if session is None or session.completed_ms is None:
        return
    puzzle = session.puzzle
    try:
        result = service.record(puzzle.grid_size, puzzle.difficulty, session.completed_ms)
    except Exception:
        logger.exception("Failed to save best time for %s", puzzle.config_key)
        state.append_log(f"Solved in {format_time(session.completed_ms)}!")
        return

    if not result.success or result.data is None:
        state.append_log(f"Solved in {format_time(session.completed_ms)}!")
        return
    state.best_ms = result.data.best_ms
    state.new_best = result.data.is_new_best
    suffix = " New best time!" if result.data.is_new_best else ""
    state.append_log(f"Solved in {format_time(session.completed_ms)}!{suffix}")


def _after_move(
    state: PlayState, service: BestTimeService, *, was_finished: bool
) -> None:
    session = state.puzzle_session
    if session is not None and not was_finished and session.completed_ms is not None:
        _record_completion(state, service)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _render_board_response(request: Request, state: PlayState) -> HTMLResponse:
    session = state.puzzle_session
    context = {
        "session": session,
        "puzzle": session.puzzle if session else None,
        "fleet_status": session.fleet_status() if session else [],
        "satisfied_rows": session.satisfied_rows() if session else [],
        "satisfied_cols": session.satisfied_cols() if session else [],
        "mismatches": set(state.mismatches),
        "hint_cell": state.hint_cell,
        "status_message": state.log[-1] if state.log else "Ready.",
        "status_log": state.log,
        "best_time": format_time(state.best_ms),
        "new_best": state.new_best,
        "grid_sizes": GRID_SIZES,
        "difficulties": DIFFICULTIES,
        "CellState": CellState,
        "format_time": format_time,
    }
    return templates.TemplateResponse(request, "_board.html", context)


def _active_session(state: PlayState) -> PuzzleSession | None:
    state.mismatches = []
    state.hint_cell = None
    if state.puzzle_session is None:
        state.append_log("No puzzle yet. Generate one first.")
    return state.puzzle_session


# ---------------------------------------------------------------------------
# HTMX endpoints
# ---------------------------------------------------------------------------


@router.post("/new", response_class=HTMLResponse)
async def new_puzzle(
    request: Request,
    service: Annotated[BestTimeService, Depends(get_best_time_service)],
    grid_size: Annotated[int | None, Form()] = None,
    difficulty: Annotated[str | None, Form()] = None,
    mistake_mode: Annotated[bool, Form()] = MISTAKE_MODE_DEFAULT,
) -> HTMLResponse:
    state = get_play_state(request)
    size = _parse_grid_size(grid_size)
    level = _parse_difficulty(difficulty)

    try:
        puzzle = await run_in_threadpool(generate_puzzle, size, level)
    except GenerationFailure as e:
        state.append_log(f"Error: {e}")
        return _render_board_response(request, state)

    state.puzzle_session = PuzzleSession(puzzle, mistake_mode=mistake_mode)
    state.mismatches = []
    state.hint_cell = None
    state.new_best = False
    try:
        state.best_ms = service.get_best(puzzle.config_key)
    except Exception:
        logger.exception("Failed to load best time for %s", puzzle.config_key)
        state.best_ms = None
    state.log.clear()
    state.append_log(f"Grid: {size}x{size} | Difficulty: {level.capitalize()}")
    return _render_board_response(request, state)


@router.post("/cycle", response_class=HTMLResponse)
async def cycle_cell(
    request: Request,
    service: Annotated[BestTimeService, Depends(get_best_time_service)],
    row: Annotated[int, Form()],
    col: Annotated[int, Form()],
) -> HTMLResponse:
    state = get_play_state(request)
    session = _active_session(state)
    if session is None:
        return _render_board_response(request, state)
    if not (0 <= row < session.size and 0 <= col < session.size):
        state.append_log("Invalid coordinates.")
        return _render_board_response(request, state)

    was_finished = session.finished
    result = session.cycle(row, col)
    if not result.success:
        state.append_log(result.error)
    _after_move(state, service, was_finished=was_finished)
    return _render_board_response(request, state)


@router.post("/mark", response_class=HTMLResponse)
async def mark_cell(
    request: Request,
    service: Annotated[BestTimeService, Depends(get_best_time_service)],
    row: Annotated[int, Form()],
    col: Annotated[int, Form()],
    state_name: Annotated[str, Form(alias="state")] = "water",
) -> HTMLResponse:
    state = get_play_state(request)
    session = _active_session(state)
    if session is None:
        return _render_board_response(request, state)
    target = MARK_STATES.get(state_name.strip().lower())
    if target is None:
        state.append_log(f"Unknown cell state {state_name!r}.")
        return _render_board_response(request, state)
    if not (0 <= row < session.size and 0 <= col < session.size):
        state.append_log("Invalid coordinates.")
        return _render_board_response(request, state)

    was_finished = session.finished
    result = session.mark(row, col, target)
    if not result.success:
        state.append_log(result.error)
    _after_move(state, service, was_finished=was_finished)
    return _render_board_response(request, state)


@router.post("/hint", response_class=HTMLResponse)
async def hint(
    request: Request,
    service: Annotated[BestTimeService, Depends(get_best_time_service)],
) -> HTMLResponse:
    state = get_play_state(request)
    session = _active_session(state)
    if session is None:
        return _render_board_response(request, state)

    was_finished = session.finished
    result = session.hint()
    if result.success and result.data is not None:
        state.hint_cell = result.data
        r, c = result.data
        state.append_log(f"Hint: revealed row {r + 1}, column {c + 1}.")
    else:
        state.append_log(result.error)
    _after_move(state, service, was_finished=was_finished)
    return _render_board_response(request, state)


@router.post("/undo", response_class=HTMLResponse)
async def undo(request: Request) -> HTMLResponse:
    state = get_play_state(request)
    session = _active_session(state)
    if session is not None and not session.undo():
        state.append_log("Nothing to undo.")
    return _render_board_response(request, state)


@router.post("/check", response_class=HTMLResponse)
async def check(request: Request) -> HTMLResponse:
    state = get_play_state(request)
    session = _active_session(state)
    if session is None:
        return _render_board_response(request, state)

    result = session.check_solution()
    if result.solved:
        state.append_log("Every ship is in place.")
    else:
        state.mismatches = result.mismatches
        state.append_log(f"{len(result.mismatches)} cell(s) do not match the solution.")
    return _render_board_response(request, state)


@router.post("/reveal", response_class=HTMLResponse)
async def reveal(request: Request) -> HTMLResponse:
    state = get_play_state(request)
    session = _active_session(state)
    if session is not None:
        session.reveal_solution()
        state.append_log("Solution revealed.")
    return _render_board_response(request, state)


# ---------------------------------------------------------------------------
# JSON endpoints
# ---------------------------------------------------------------------------


@router.get("/api/puzzle", response_model=PuzzleOut)
async def current_puzzle(request: Request) -> PuzzleOut:
    state = get_play_state(request)
    if state.puzzle_session is None:
        raise HTTPException(status_code=404, detail="No active puzzle")
    return PuzzleOut.from_session(state.puzzle_session)


@router.get("/api/best-time", response_model=BestTimeOut)
async def best_time(
    service: Annotated[BestTimeService, Depends(get_best_time_service)],
    grid_size: int = DEFAULT_GRID_SIZE,
    difficulty: str = DEFAULT_DIFFICULTY,
) -> BestTimeOut:
    key = config_key(_parse_grid_size(grid_size), _parse_difficulty(difficulty))
    best_ms = service.get_best(key)
    return BestTimeOut(config_key=key, best_ms=best_ms, best=format_time(best_ms))
