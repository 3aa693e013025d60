"""
Blog Backend — Access Log Middleware
======================================

What:  One access-log line per request, e.g.

           PUT /api/blogPosts/6f1c.../comments/ab12 200 12.4ms rid=1a2b3c4d author=6f1c...

How:   Times the downstream call and logs on the "blog.access" logger with
       the request ID and the acting author (set by get_current_author).

Bodies and headers are never logged (passwords, tokens, cookies).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("blog.access")

# Container health checks hit this every few seconds
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        began = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - began) * 1000

        author_id = getattr(request.state, "author_id", None) or "-"
        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms rid=%s author=%s",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            request_id_var.get("") or "-",
            author_id,
            extra={
                "http_method": request.method,
                "http_path": path,
                "http_status": response.status_code,
                "elapsed_ms": round(elapsed_ms, 1),
                "author_id": author_id,
                "client": request.client.host if request.client else None,
            },
        )
        return response
