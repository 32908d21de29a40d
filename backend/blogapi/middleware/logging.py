"""
Blog Posts API — Request Logging Middleware
=============================================

What:  One access log line per request on the `blogapi.access` logger.
How:   Times the rest of the stack and logs method, path, status, duration,
       request ID and client address.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Example lines:
    POST /api/posts 201 12.4ms [1a2b3c4d] from 10.0.0.5
    GET /api/posts/hello-world 200 3.1ms [5e6f7a8b] from 10.0.0.5
    PUT /api/posts/0b7c.../view 404 1.9ms [9c0d1e2f] from 10.0.0.7

Rejected writes (400) and unknown posts (404) log at WARNING, server errors
at ERROR. GET /health is polled by probes and is not logged. Post bodies
and comment text are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blogapi.middleware.request_id import request_id_var

logger = logging.getLogger("blogapi.access")

_UNLOGGED_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging for the posts API."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in _UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
