"""Rate limiting middleware — Redis fixed-window counter.

Rule: RATE_LIMIT_PER_MINUTE requests per client per 60 s window on /api/*.
Client key is the bearer token subject when the token verifies, otherwise
the real client IP (X-Forwarded-For aware).

Redis logic:
    count = INCR ratelimit:{client}:{window}
    if count == 1: EXPIRE key 60
    if count > limit: 429 + Retry-After

Errors raised inside middleware bypass FastAPI's exception handlers, so the
429 envelope is built here directly.
"""

import logging
import time
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.mk_common.errors import InvalidCredentialsError, RateLimitError
from src.mk_common.redis_client import get_redis
from src.mk_common.response import error_response
from src.mk_gateway.auth.jwt_handler import decode_token

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60


def client_key(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        try:
            sub = decode_token(auth[7:]).get("sub")
        except InvalidCredentialsError:
            sub = None
        if sub:
            return f"party:{sub}"
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    host = request.client.host if request.client else "unknown"
    return f"ip:{host}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limit: int,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
    ) -> None:
        super().__init__(app)
        self._limit = limit
        self._redis_factory = redis_factory

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:{client_key(request)}:{window}"
        redis = await self._redis_factory()
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, _WINDOW_SECONDS)

        if count > self._limit:
            err = RateLimitError()
            retry_after = _WINDOW_SECONDS - int(time.time()) % _WINDOW_SECONDS
            logger.warning("Rate limit hit: %s (%d requests)", key, count)
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
