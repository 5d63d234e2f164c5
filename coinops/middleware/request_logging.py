"""
Request logging middleware. Logs method, path, status, duration only.
Query strings are not logged.
"""

from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from coinops.middleware.request_id import get_request_id

logger = logging.getLogger("coinops.request")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        method = request.method
        path = request.scope.get("path", "")
        request_id = get_request_id(request)
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "request_failed method=%s path=%s duration_ms=%.1f",
                method, path, duration_ms,
                extra={"request_id": request_id, "method": method, "path": path},
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        status = response.status_code
        extra = {
            "request_id": request_id,
            "method": method,
            "path": path,
            "status": status,
            "duration_ms": round(duration_ms, 1),
        }
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level,
            "request_finished method=%s path=%s status=%s duration_ms=%.1f",
            method, path, status, duration_ms,
            extra=extra,
        )
        return response
