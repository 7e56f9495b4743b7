"""ApiResponse: the body of every marketplace and admin endpoint.

Successful calls carry code 0 and the payload in ``data``. Failed calls carry
the AppError code (1xxx auth, 2xxx funds, 3xxx item, 9xxx system) with
``data`` set to null. ``request_id`` is the id RequestLogMiddleware put on the
request, so a client can quote it against the server log line.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from src.mk_common.datetime_utils import utc_isoformat


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=utc_isoformat)
    request_id: str = Field(default_factory=new_request_id)


def success_response(data: Any = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data)


def error_response(code: int, message: str) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None)
