"""Battleship Solitaire ASGI entrypoint (FastAPI + HTMX)."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

from decouple import config as env_config
from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import RequestResponseEndpoint
from starlette.middleware.sessions import SessionMiddleware

from src.solitaire.api.routes.puzzle import router as puzzle_router
from src.solitaire.core.config import (
    APP_VERSION,
    DEFAULT_DIFFICULTY,
    DEFAULT_GRID_SIZE,
    ENVIRONMENT,
    MISTAKE_MODE_DEFAULT,
    SECRET_KEY,
)
from src.solitaire.core.database import TESTING, Base, engine
from src.solitaire.puzzle.fleet import DIFFICULTIES, GRID_SIZES

# registers the best_times table on Base.metadata
from src.solitaire.records import best_times  # noqa: F401

logger = logging.getLogger(__name__)

DB_AUTO_CREATE = (
    env_config("DB_AUTO_CREATE", default="0" if TESTING else "1", cast=str) == "1"
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    if DB_AUTO_CREATE:
        try:
            await run_in_threadpool(Base.metadata.create_all, bind=engine)
            logger.info("Database tables ensured")
        except Exception as e:
            logger.error("DB Init Failed: %s", e)
    yield


app = FastAPI(title="Battleship Solitaire", lifespan=lifespan)

app.add_middleware(SessionMiddleware, secret_key=SECRET_KEY)
app.add_middleware(GZipMiddleware, minimum_size=1000)

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "web" / "static"
TEMPLATES_DIR = BASE_DIR / "web" / "templates"

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

templates.env.globals["STATIC_VERSION"] = APP_VERSION
templates.env.globals["ENVIRONMENT"] = ENVIRONMENT


def is_hx(request: Request) -> bool:
    """Return True if the request came from HTMX (HX-Request: true)."""
    return request.headers.get("HX-Request", "").lower() == "true"


@app.middleware("http")
async def add_cache_headers(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    response = await call_next(request)
    if request.url.path.startswith("/static/"):
        response.headers["Cache-Control"] = "public, max-age=600"
    return response


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "ts": datetime.now(UTC).isoformat()}


@app.head("/")
async def home_head() -> Response:
    return Response(status_code=200)


def _page_context() -> dict[str, object]:
    return {
        "grid_sizes": GRID_SIZES,
        "difficulties": DIFFICULTIES,
        "default_grid_size": DEFAULT_GRID_SIZE,
        "default_difficulty": DEFAULT_DIFFICULTY,
        "mistake_mode_default": MISTAKE_MODE_DEFAULT,
    }


@app.get("/", response_class=HTMLResponse, name="home")
async def home(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "puzzle.html", _page_context())


@app.get("/puzzle", response_class=HTMLResponse, name="puzzle")
async def puzzle_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "puzzle.html", _page_context())


app.include_router(puzzle_router)
