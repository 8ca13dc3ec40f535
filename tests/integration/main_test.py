"""Tests for the application shell: health, pages and helpers."""

from __future__ import annotations

from http import HTTPStatus
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from src.solitaire.main import app, is_hx


# pylint: disable=redefined-outer-name
@pytest.fixture()
def client_fx() -> TestClient:
    """Fixture to provide a test client."""
    return TestClient(app)


def test_app_creation() -> None:
    """Application object is created with the right title."""
    assert app.title == "Battleship Solitaire"


def test_health_endpoint(client_fx: TestClient) -> None:
    """GET /health returns ok + timestamp."""
    resp = client_fx.get("/health")
    assert resp.status_code == HTTPStatus.OK
    data = resp.json()
    assert data["status"] == "ok"
    assert "ts" in data


def test_home_head(client_fx: TestClient) -> None:
    """HEAD / answers without a body."""
    resp = client_fx.head("/")
    assert resp.status_code == HTTPStatus.OK


@pytest.mark.parametrize("path", ["/", "/puzzle"])
def test_pages_render_controls(client_fx: TestClient, path: str) -> None:
    """Both page routes render the new-puzzle form."""
    resp = client_fx.get(path)
    assert resp.status_code == HTTPStatus.OK
    assert 'hx-post="/new"' in resp.text
    assert 'name="grid_size"' in resp.text
    assert '<option value="12"' in resp.text
    assert "Expert" in resp.text


def test_static_cache_headers(client_fx: TestClient) -> None:
    """Static assets are served with a cache header."""
    resp = client_fx.get("/static/css/style.css")
    assert resp.status_code == HTTPStatus.OK
    assert resp.headers["Cache-Control"] == "public, max-age=600"


def test_is_hx() -> None:
    """is_hx reads the HX-Request header case-insensitively."""
    request = Mock()
    request.headers = {"HX-Request": "TRUE"}
    assert is_hx(request)
    request.headers = {}
    assert not is_hx(request)
