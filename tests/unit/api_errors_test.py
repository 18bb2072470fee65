"""Tests for mapping errors to ``{"error": ...}`` responses."""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from fragments.api.errors import register_error_handlers
from fragments.core.errors import ConversionError, NotFoundError


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/missing")
    async def missing() -> None:
        raise NotFoundError("owner", "abc")

    @app.get("/broken-image")
    async def broken_image() -> None:
        raise ConversionError("Failed to convert image: bad header")

    @app.get("/locked")
    async def locked() -> None:
        raise HTTPException(status_code=401, detail="Unauthorized", headers={"WWW-Authenticate": "Basic"})

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("storage exploded")

    return TestClient(app, raise_server_exceptions=False)


def test_fragment_error_uses_its_status(client: TestClient) -> None:
    resp = client.get("/missing")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Fragment abc not found"}


def test_conversion_error_is_unprocessable(client: TestClient) -> None:
    resp = client.get("/broken-image")
    assert resp.status_code == 422
    assert resp.json() == {"error": "Failed to convert image: bad header"}


def test_http_exception_keeps_headers(client: TestClient) -> None:
    resp = client.get("/locked")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Basic"
    assert resp.json() == {"error": "Unauthorized"}


def test_unhandled_error_is_hidden(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Server error"}
    assert any("Unhandled error on GET /boom" in r.getMessage() for r in caplog.records)
