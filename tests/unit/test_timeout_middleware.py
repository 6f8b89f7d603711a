"""TimeoutMiddleware: a handler that overruns its deadline gets a 504 envelope."""

import asyncio

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.pm_gateway.middleware.request_log import RequestLogMiddleware
from src.pm_gateway.middleware.timeout import TimeoutMiddleware


@pytest.fixture
def cancelled() -> list[str]:
    return []


@pytest.fixture
async def slow_client(cancelled: list[str]) -> AsyncClient:
    app = FastAPI()
    app.add_middleware(TimeoutMiddleware, timeout_seconds=0.05)
    app.add_middleware(RequestLogMiddleware)

    @app.get("/slow")
    async def slow() -> dict[str, str]:
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.append("slow")
            raise
        return {"status": "late"}

    @app.get("/fast")
    async def fast() -> dict[str, str]:
        return {"status": "ok"}

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def test_overrun_returns_504(slow_client: AsyncClient, cancelled: list[str]) -> None:
    resp = await slow_client.get("/slow")

    assert resp.status_code == 504
    body = resp.json()
    assert body["code"] == 9003
    assert body["data"] is None
    assert body["request_id"] == resp.headers["X-Request-ID"]
    assert cancelled == ["slow"]


async def test_fast_request_passes_through(slow_client: AsyncClient) -> None:
    resp = await slow_client.get("/fast")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
