"""
Transaction Validation API — Request ID Middleware
===================================================

What:  Tags each request with a correlation ID and echoes it in X-Request-ID.
How:   A client-supplied ID is reused only when it is short and made of safe
       characters; anything else (too long, spaces, control characters that
       could forge log lines) is replaced by a fresh ID. The ID is stored in a
       ContextVar for log formatting and on request.state for handlers.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]+$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accept_client_request_id(value: Optional[str]) -> Optional[str]:
    """Returns the client's ID if it is safe to log and echo, else None."""
    if not value or len(value) > MAX_REQUEST_ID_LENGTH:
        return None
    if not _SAFE_REQUEST_ID.match(value):
        return None
    return value


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accept_client_request_id(request.headers.get(REQUEST_ID_HEADER)) or new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
