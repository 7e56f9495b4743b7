"""One log line per marketplace request, tagged with its request id.

The id is stored on ``request.state`` for the routers and the AppError
handler to copy into ApiResponse, and returned as the X-Request-ID header so
a client can match even a non-JSON failure (e.g. a 422 from body parsing) to
the server log. Responses with status >= 500 are logged at WARNING.

    INFO [POST] /api/v1/marketplace/items → 201 (12ms) req_a1b2c3d4e5f6
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.mk_common.response import new_request_id

logger = logging.getLogger("mk.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = new_request_id()
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response
