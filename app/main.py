from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.creditos import AUDITED_ENDPOINTS
from app.api.v1.creditos import router as creditos_router
from app.api.v1.metrics import router as metrics_router
from app.config import settings
from app.core.audit import audit_rejected_request, get_audit_publisher, shutdown_audit_publisher
from app.core.exceptions import AppError, StoreError
from app.core.logging import get_logger, setup_logging
from app.core.metrics import (
    get_uptime_seconds,
    increment_db_errors_total,
    increment_not_found_total,
    set_startup_time,
)
from app.database import SessionLocal
from app.middleware.rate_limit import HEALTH_LIMIT, limiter, rate_limit_exceeded_handler
from app.middleware.request_id import RequestIDMiddleware
from app.middleware.request_logging import RequestLoggingMiddleware
from app.schemas.api_responses import ErrorResponse, HealthResponse

APP_VERSION = "1.0.0"
logger = get_logger(__name__)


def _get_request_id(request: Request) -> str | None:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return request_id
    return request.headers.get("X-Request-ID")


def _error_response(request: Request, exc: AppError) -> JSONResponse:
    payload = ErrorResponse(
        error={
            "code": exc.code,
            "message": exc.message,
            "request_id": _get_request_id(request),
        }
    )
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump())


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    set_startup_time()
    get_audit_publisher()
    logger.info("api.startup", version=APP_VERSION, environment=settings.ENVIRONMENT)
    yield
    shutdown_audit_publisher()
    logger.info("api.shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    description="API de consulta de creditos constituidos por NFS-e",
    version=APP_VERSION,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    openapi_tags=[
        {"name": "creditos", "description": "Consulta de creditos por NFS-e, numero do credito e filtros"},
        {"name": "metrics", "description": "Contadores operacionais da API"},
    ],
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)

app.include_router(creditos_router, prefix=settings.API_V1_PREFIX)
app.include_router(metrics_router, prefix=settings.API_V1_PREFIX)


@app.exception_handler(AppError)
def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code == 404:
        increment_not_found_total()
    elif exc.status_code >= 500:
        increment_db_errors_total()
    return _error_response(request, exc)


@app.exception_handler(SQLAlchemyError)
def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    increment_db_errors_total()
    logger.error("api.store_failure", path=request.url.path, error=exc.__class__.__name__, exc_info=exc)
    return _error_response(request, StoreError())


@app.exception_handler(RequestValidationError)
def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Dados de requisicao invalidos") if errors else "Dados de requisicao invalidos"

    event_type = AUDITED_ENDPOINTS.get(request.scope.get("endpoint"))
    if event_type is not None:
        # same publisher the route would have received
        resolve_publisher = request.app.dependency_overrides.get(get_audit_publisher, get_audit_publisher)
        audit_rejected_request(resolve_publisher(), request, event_type, 422, message)

    payload = ErrorResponse(
        error={
            "code": "VALIDATION_ERROR",
            "message": message,
            "request_id": _get_request_id(request),
        }
    )
    return JSONResponse(status_code=422, content=payload.model_dump())


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("api.unhandled_exception", path=request.url.path)
    return _error_response(request, AppError("Erro interno"))


@app.get(
    f"{settings.API_V1_PREFIX}/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Verifica disponibilidade da base de creditos e do destino de auditoria.",
)
@limiter.limit(HEALTH_LIMIT)
def health(request: Request, response: Response) -> HealthResponse:
    publisher = get_audit_publisher()
    if not publisher.enabled:
        audit_status = "disabled"
    elif publisher.ping():
        audit_status = "ok"
    else:
        audit_status = "unavailable"

    db_started = time.perf_counter()
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        increment_db_errors_total()
        logger.exception("health.database_unavailable")
        response.status_code = 503
        return HealthResponse(
            status="unhealthy",
            database="unavailable",
            audit=audit_status,
            version=APP_VERSION,
            uptime_seconds=get_uptime_seconds(),
        )

    db_duration = time.perf_counter() - db_started
    overall_status = "degraded" if db_duration > 0.2 or audit_status == "unavailable" else "ok"

    return HealthResponse(
        status=overall_status,
        database="ok",
        audit=audit_status,
        version=APP_VERSION,
        uptime_seconds=get_uptime_seconds(),
    )
