"""
Student Records — Request ID Middleware
=========================================

What:  Assigns a correlation ID to each incoming request and returns it in
       the X-Request-ID response header.
How:   Reuses a client-provided X-Request-ID when it is a short token of
       letters, digits, '.', '_' or '-' (at most 64); any other value is
       replaced by a generated short UUID. The ID is stored in a ContextVar for loggers
       and exception handlers, and in request.state for route handlers.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    # 8 hex chars are enough to correlate log lines of one process
    return uuid.uuid4().hex[:8]


def resolve_request_id(header_value: str | None) -> str:
    """Return the client's ID if it is a safe token, else a fresh one."""
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags every request and response with a correlation ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        # Not reset afterwards: the catch-all handler in ServerErrorMiddleware
        # runs outside this middleware and still reads it
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
