from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from app.config import settings

CONSULTA_LIMIT = "60/minute"
HEALTH_LIMIT = "120/minute"


def client_ip(request: Request) -> str:
    if settings.TRUST_PROXY:
        forwarded = request.headers.get("X-Forwarded-For", "")
        if forwarded:
            return forwarded.split(",")[0].strip()

    return request.client.host if request.client else "unknown"


limiter = Limiter(key_func=client_ip, enabled=settings.RATE_LIMIT_ENABLED)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    headers = dict(getattr(exc, "headers", {}) or {})
    headers.setdefault("Retry-After", "60")

    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "TOO_MANY_REQUESTS",
                "message": "Limite de consultas excedido",
                "request_id": getattr(request.state, "request_id", None),
            }
        },
        headers=headers,
    )
