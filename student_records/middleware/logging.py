"""
Student Records — Access Log Middleware
=========================================

What:  One access-log line per HTTP request with status and duration.
How:   Measures wall time around call_next and logs on the
       `student_records.access` logger. The query string is included so a
       line for GET /students shows the page and filters that were asked for.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Not logged:
    - request bodies (student names and dates of birth are personal data)
    - /health probes and the interactive docs (/docs, /redoc, /openapi.json)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from student_records.middleware.request_id import request_id_var

logger = logging.getLogger("student_records.access")

QUIET_PATHS = frozenset({"/health", "/openapi.json"})
QUIET_PREFIXES = ("/docs", "/redoc")


def is_quiet(path: str) -> bool:
    """True for paths polled by probes or browsed by humans."""
    return path in QUIET_PATHS or path.startswith(QUIET_PREFIXES)


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes the access log for the /students API."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if is_quiet(path):
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        target = f"{path}?{request.url.query}" if request.url.query else path
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            target,
            response.status_code,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
