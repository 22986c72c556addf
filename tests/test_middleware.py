"""Middleware tests — request ID, rate limiting, CORS, error envelopes."""

import pytest
from httpx import ASGITransport, AsyncClient

from jgp.config import get_settings


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    """Request ID is auto-generated when not provided."""
    response = await client.get("/health")
    assert "x-request-id" in response.headers
    assert len(response.headers["x-request-id"]) == 36  # UUID format


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    """Custom request ID is echoed back in the header and the envelope meta."""
    response = await client.get("/version", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"
    meta = response.json()["meta"]
    assert meta["requestId"] == "test-abc-123"
    assert "timestamp" in meta


@pytest.mark.asyncio
async def test_rate_limit_headers(client: AsyncClient, fake_redis) -> None:
    """Rate limit headers are present on non-exempt endpoints."""
    response = await client.get("/version")
    assert response.headers["x-ratelimit-limit"] == "100"
    assert response.headers["x-ratelimit-remaining"] == "99"


@pytest.mark.asyncio
async def test_rate_limit_blocks_excess(client: AsyncClient, fake_redis) -> None:
    """Once the window counter passes the limit the request gets a 429 envelope."""
    fake_redis.count = 100
    response = await client.get("/version")
    assert response.status_code == 429
    assert response.headers["retry-after"] == "60"
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "RATE_LIMIT_EXCEEDED"


@pytest.mark.asyncio
async def test_health_exempt_from_rate_limit(client: AsyncClient, fake_redis) -> None:
    """Health probes never touch the counter."""
    fake_redis.count = 1000
    for _ in range(5):
        response = await client.get("/health")
        assert response.status_code == 200
    assert fake_redis.count == 1000


@pytest.mark.asyncio
async def test_rate_limiter_passes_through_without_redis(client: AsyncClient) -> None:
    response = await client.get("/version")
    assert response.status_code == 200
    assert "x-ratelimit-limit" not in response.headers


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient) -> None:
    """CORS preflight returns access-control-allow-origin for a configured origin."""
    response = await client.options(
        "/api/v1/children",
        headers={
            "Origin": "http://localhost:8103",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:8103"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient) -> None:
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_validation_error_envelope(client: AsyncClient) -> None:
    response = await client.post("/api/v1/auth/register", json={"email": "not-an-email"})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert isinstance(error["details"], list)
    assert error["details"]


def _failing_app():
    from jgp.main import create_app

    app = create_app()

    @app.get("/boom")
    async def boom() -> None:
        raise ValueError("secret db detail")

    return app


@pytest.mark.asyncio
async def test_unhandled_error_is_redacted() -> None:
    """Unexpected exceptions leave as INTERNAL_ERROR without their message outside development."""
    transport = ASGITransport(app=_failing_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/boom", headers={"X-Request-Id": "boom-1"})
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == {"code": "INTERNAL_ERROR", "message": "Internal server error"}
    assert response.headers["x-request-id"] == "boom-1"


@pytest.mark.asyncio
async def test_unhandled_error_message_shown_in_development(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JGP_ENVIRONMENT", "development")
    get_settings.cache_clear()
    transport = ASGITransport(app=_failing_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/boom")
    assert response.status_code == 500
    assert response.json()["error"]["message"] == "secret db detail"
    assert "x-request-id" in response.headers
