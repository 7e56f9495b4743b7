"""Unit tests for RateLimitMiddleware — Redis replaced by an in-memory fake."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.mk_gateway.auth.jwt_handler import create_access_token
from src.mk_gateway.middleware.rate_limit import RateLimitMiddleware, client_key


class FakeRedis:
    def __init__(self) -> None:
        self.counts: dict[str, int] = {}
        self.expire = AsyncMock()

    async def incr(self, key: str) -> int:
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]


def _make_app(redis: FakeRedis, limit: int) -> FastAPI:
    async def factory() -> FakeRedis:
        return redis

    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limit=limit, redis_factory=factory)

    @app.get("/api/v1/ping")
    async def ping() -> dict[str, str]:
        return {"pong": "ok"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


@pytest.fixture
def redis() -> FakeRedis:
    return FakeRedis()


class TestRateLimitMiddleware:
    async def test_requests_under_limit_pass(self, redis: FakeRedis) -> None:
        transport = ASGITransport(app=_make_app(redis, limit=3))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            for _ in range(3):
                resp = await ac.get("/api/v1/ping")
                assert resp.status_code == 200
        redis.expire.assert_awaited_once()

    async def test_over_limit_returns_429_envelope(self, redis: FakeRedis) -> None:
        transport = ASGITransport(app=_make_app(redis, limit=2))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            await ac.get("/api/v1/ping")
            await ac.get("/api/v1/ping")
            resp = await ac.get("/api/v1/ping")
        assert resp.status_code == 429
        body = resp.json()
        assert body["code"] == 9001
        assert body["data"] is None
        assert 0 < int(resp.headers["Retry-After"]) <= 60

    async def test_non_api_paths_not_counted(self, redis: FakeRedis) -> None:
        transport = ASGITransport(app=_make_app(redis, limit=1))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            for _ in range(3):
                assert (await ac.get("/health")).status_code == 200
        assert redis.counts == {}

    async def test_parties_counted_separately(self, redis: FakeRedis) -> None:
        transport = ASGITransport(app=_make_app(redis, limit=1))
        alice = {"Authorization": f"Bearer {create_access_token('alice')}"}
        bob = {"Authorization": f"Bearer {create_access_token('bob')}"}
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            assert (await ac.get("/api/v1/ping", headers=alice)).status_code == 200
            assert (await ac.get("/api/v1/ping", headers=bob)).status_code == 200
            assert (await ac.get("/api/v1/ping", headers=alice)).status_code == 429


def _make_request(headers: dict[str, str], host: str = "10.0.0.1") -> MagicMock:
    request = MagicMock()
    request.headers = {k.lower(): v for k, v in headers.items()}
    request.client.host = host
    return request


class TestClientKey:
    def test_verified_token_uses_party(self) -> None:
        token = create_access_token("alice")
        assert client_key(_make_request({"Authorization": f"Bearer {token}"})) == "party:alice"

    def test_bad_token_falls_back_to_ip(self) -> None:
        assert client_key(_make_request({"Authorization": "Bearer junk"})) == "ip:10.0.0.1"

    def test_forwarded_for_first_hop(self) -> None:
        request = _make_request({"X-Forwarded-For": "203.0.113.5, 10.0.0.2"})
        assert client_key(request) == "ip:203.0.113.5"

    def test_no_client(self) -> None:
        request = _make_request({})
        request.client = None
        assert client_key(request) == "ip:unknown"
