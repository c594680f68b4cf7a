"""Request ID and request timeout middleware."""

import asyncio

from httpx import ASGITransport, AsyncClient

from app.middleware import TimeoutMiddleware
from app.middleware.request_id import resolve_request_id


async def test_request_id_forwarded(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "trace-42_a"})
    assert response.headers["x-request-id"] == "trace-42_a"


async def test_request_id_generated_when_absent(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert len(response.headers["x-request-id"]) == 32


def test_unsafe_request_id_replaced() -> None:
    generated = resolve_request_id("abc\nFAKE LOG LINE")
    assert "\n" not in generated
    assert len(generated) == 32
    assert resolve_request_id("x" * 65) != "x" * 65


async def _slow_app(scope, receive, send) -> None:
    await asyncio.sleep(1)


async def _responds_then_stalls(scope, receive, send) -> None:
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"done"})
    await asyncio.sleep(1)


async def test_timeout_returns_504() -> None:
    app = TimeoutMiddleware(_slow_app, timeout_seconds=0.05)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/api/v1/search")
    assert response.status_code == 504
    assert response.json()["error"] == "GATEWAY_TIMEOUT"


async def test_timeout_after_response_started_keeps_status() -> None:
    app = TimeoutMiddleware(_responds_then_stalls, timeout_seconds=0.05)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/api/v1/search")
    assert response.status_code == 200
    assert response.content == b"done"
