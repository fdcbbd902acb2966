from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import get_logger
from app.core.metrics import increment_requests_total

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            increment_requests_total()
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            status_code = response.status_code if response is not None else 500
            log = logger.warning if status_code >= 500 else logger.info

            log(
                "http.request",
                method=request.method,
                path=request.url.path,
                query=str(request.query_params) or None,
                status_code=status_code,
                duration_ms=duration_ms,
                request_id=getattr(request.state, "request_id", None),
            )
