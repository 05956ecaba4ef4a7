"""
Transaction Validation API — Access Log Middleware
===================================================

What:  One access line per request, naming who made it.
How:   The access control gate records the resolved caller on
       `request.state.current_user`; this middleware reads it after the
       handler ran, so each line says which user and role hit the route.
       Requests that never passed the gate are logged as anonymous.

Line format:
    PATCH /transactions/<id>/status -> 200 in 12.3ms rid=ab12cd34 user=<uuid> role=ADMIN

Never logged: bodies (passwords, amounts), Authorization headers (tokens).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from transval.middleware.request_id import request_id_var

logger = logging.getLogger("transval.access")

UNLOGGED_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def describe_caller(request: Request) -> str:
    """`user=<id> role=<ROLE>` for authenticated callers, `user=anonymous` otherwise."""
    user = getattr(request.state, "current_user", None)
    if user is None:
        return "user=anonymous"
    return f"user={user.id} role={user.role.value}"


class AccessLogMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # Unhandled errors still get an access line before propagating
            self._log(request, 500, started)
            raise

        self._log(request, response.status_code, started)
        return response

    @staticmethod
    def _log(request: Request, status: int, started: float) -> None:
        duration_ms = (time.perf_counter() - started) * 1000
        logger.log(
            level_for_status(status),
            "%s %s -> %d in %.1fms rid=%s %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            request_id_var.get(""),
            describe_caller(request),
        )
