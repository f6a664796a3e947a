"""
Tests for the request ID and request timeout middleware.
"""

import asyncio
import logging

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.core.logging import request_id_var
from app.core.middleware import RequestIdMiddleware, RequestTimeoutMiddleware
from app.main import create_app


def build_app(timeout_s: float) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestTimeoutMiddleware, timeout_s=timeout_s)
    app.add_middleware(RequestIdMiddleware)

    @app.get("/slow")
    async def slow() -> dict:
        await asyncio.sleep(1)
        return {"done": True}

    @app.get("/fast")
    async def fast() -> dict:
        return {"done": True}

    return app


async def request(app: FastAPI, path: str, **kwargs):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        return await ac.get(path, **kwargs)


async def test_slow_request_returns_504():
    resp = await request(build_app(timeout_s=0.05), "/slow")
    assert resp.status_code == 504
    assert resp.json()["error"]["code"] == "REQUEST_TIMEOUT"


async def test_fast_request_passes_through():
    resp = await request(build_app(timeout_s=5), "/fast")
    assert resp.status_code == 200
    assert resp.json() == {"done": True}


async def test_request_id_is_echoed():
    resp = await request(build_app(timeout_s=5), "/fast", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"


async def test_request_id_is_generated():
    resp = await request(build_app(timeout_s=5), "/fast")
    assert len(resp.headers["X-Request-ID"]) == 32


class _RequestIdCapture(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.request_ids: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.request_ids.append(request_id_var.get())


async def test_timeout_in_app_carries_request_id(monkeypatch):
    monkeypatch.setattr(settings, "request_timeout_s", 0.05)
    app = create_app()

    @app.get("/slow")
    async def slow() -> dict:
        await asyncio.sleep(1)
        return {"done": True}

    capture = _RequestIdCapture()
    middleware_logger = logging.getLogger("app.core.middleware")
    middleware_logger.addHandler(capture)
    try:
        resp = await request(app, "/slow", headers={"X-Request-ID": "trace-1"})
    finally:
        middleware_logger.removeHandler(capture)

    assert resp.status_code == 504
    assert resp.headers["X-Request-ID"] == "trace-1"
    assert capture.request_ids == ["trace-1"]
