"""Audit trail of credit queries.

Every query produces one AuditEvent. Events are handed to a single background
worker that appends them to a Redis stream; the request never waits for the
delivery and delivery errors are only logged. When the backlog reaches
AUDIT_QUEUE_MAXSIZE new events are dropped. Without REDIS_URL the publisher
is disabled and events are dropped.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from datetime import datetime, timezone
from threading import Lock
from typing import Any

import redis
from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.core.exceptions import AppError, StoreError
from app.core.logging import get_logger
from app.core.metrics import increment_audit_failed_total, increment_audit_published_total
from app.middleware.rate_limit import client_ip

logger = get_logger(__name__)

CONSULTA_CREDITOS_POR_NFSE = "CONSULTA_CREDITOS_POR_NFSE"
CONSULTA_CREDITOS_POR_NFSE_PAGINADA = "CONSULTA_CREDITOS_POR_NFSE_PAGINADA"
CONSULTA_CREDITOS_COM_FILTROS = "CONSULTA_CREDITOS_COM_FILTROS"
CONSULTA_CREDITO_POR_NUMERO = "CONSULTA_CREDITO_POR_NUMERO"


class AuditEvent(BaseModel):
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str = "anonymous"
    user_ip: str | None = None
    request_id: str | None = None
    endpoint: str
    http_method: str = "GET"
    request_parameters: dict[str, Any] = Field(default_factory=dict)
    response_status: int
    execution_time_ms: int
    result_count: int = 0
    success: bool
    error_message: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuditPublisher:
    def __init__(
        self,
        redis_url: str = "",
        stream_key: str = "creditos:audit-events",
        maxlen: int | None = None,
        client: Any = None,
        max_pending: int = 1000,
    ) -> None:
        self.redis_url = (redis_url or "").strip()
        self.stream_key = stream_key
        self.maxlen = maxlen
        self.max_pending = max_pending
        self.client = client

        if self.client is None and self.redis_url:
            try:
                self.client = redis.Redis.from_url(self.redis_url, decode_responses=True, socket_timeout=2)
            except (ValueError, redis.RedisError):
                logger.exception("audit.disabled", reason="invalid_redis_url")
                self.client = None

        self.enabled = self.client is not None
        self._executor: ThreadPoolExecutor | None = None
        self._pending = 0
        self._pending_lock = Lock()
        if self.enabled:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="audit")
            logger.info("audit.enabled", stream=self.stream_key, max_pending=self.max_pending)
        else:
            logger.info("audit.disabled", reason="empty_redis_url")

    @property
    def pending(self) -> int:
        with self._pending_lock:
            return self._pending

    def publish(self, event: AuditEvent) -> Future | None:
        """Queues the event for delivery; drops it when the backlog is full."""
        if not self.enabled or self._executor is None:
            logger.debug("audit.skipped", event_id=event.event_id, event_type=event.event_type)
            return None

        with self._pending_lock:
            if self._pending >= self.max_pending:
                increment_audit_failed_total()
                logger.warning("audit.dropped", event_id=event.event_id, pending=self._pending)
                return None
            self._pending += 1

        try:
            future = self._executor.submit(self._send, event)
        except RuntimeError:
            self._release()
            logger.warning("audit.publisher_closed", event_id=event.event_id)
            return None

        future.add_done_callback(self._release)
        return future

    def _release(self, _: Future | None = None) -> None:
        with self._pending_lock:
            self._pending -= 1

    def _send(self, event: AuditEvent) -> None:
        payload = event.model_dump_json(by_alias=True)
        try:
            entry_id = self.client.xadd(
                self.stream_key,
                {"event_id": event.event_id, "event": payload},
                maxlen=self.maxlen,
                approximate=self.maxlen is not None,
            )
        except Exception:
            increment_audit_failed_total()
            logger.exception(
                "audit.publish_failed",
                event_id=event.event_id,
                event_type=event.event_type,
            )
            return

        increment_audit_published_total()
        logger.debug("audit.published", event_id=event.event_id, entry_id=entry_id)

    def ping(self) -> bool:
        if not self.enabled:
            return False
        try:
            return bool(self.client.ping())
        except Exception:
            logger.warning("audit.ping_failed")
            return False

    def close(self) -> None:
        if self._executor is not None:
            # events still queued are discarded; the one in flight finishes on its own
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        self.enabled = False


_PUBLISHER_SINGLETON: AuditPublisher | None = None
_PUBLISHER_LOCK = Lock()


def get_audit_publisher() -> AuditPublisher:
    global _PUBLISHER_SINGLETON
    if _PUBLISHER_SINGLETON is None:
        with _PUBLISHER_LOCK:
            if _PUBLISHER_SINGLETON is None:
                _PUBLISHER_SINGLETON = AuditPublisher(
                    redis_url=settings.REDIS_URL,
                    stream_key=settings.AUDIT_STREAM_KEY,
                    maxlen=settings.AUDIT_STREAM_MAXLEN or None,
                    max_pending=settings.AUDIT_QUEUE_MAXSIZE,
                )
    return _PUBLISHER_SINGLETON


def shutdown_audit_publisher() -> None:
    global _PUBLISHER_SINGLETON
    with _PUBLISHER_LOCK:
        if _PUBLISHER_SINGLETON is not None:
            _PUBLISHER_SINGLETON.close()
            _PUBLISHER_SINGLETON = None


class AuditTrail:
    def __init__(self) -> None:
        self.result_count = 0


def _emit(
    publisher: AuditPublisher,
    request: Request,
    event_type: str,
    request_parameters: dict[str, Any],
    status_code: int,
    started: float,
    result_count: int = 0,
    error_message: str | None = None,
) -> None:
    try:
        publisher.publish(
            AuditEvent(
                event_type=event_type,
                user_ip=client_ip(request),
                request_id=getattr(request.state, "request_id", None),
                endpoint=request.url.path,
                http_method=request.method,
                request_parameters=request_parameters,
                response_status=status_code,
                execution_time_ms=int((time.perf_counter() - started) * 1000),
                result_count=result_count,
                success=error_message is None,
                error_message=error_message,
            )
        )
    except Exception:
        logger.exception("audit.emit_failed", event_type=event_type)


@contextmanager
def audited_query(
    publisher: AuditPublisher,
    request: Request,
    event_type: str,
    request_parameters: dict[str, Any],
) -> Iterator[AuditTrail]:
    """Times the wrapped query and emits exactly one AuditEvent, success or not.

    Exceptions are re-raised untouched after the event is handed off.
    """
    trail = AuditTrail()
    started = time.perf_counter()
    status_code = 200
    error_message: str | None = None

    try:
        yield trail
    except AppError as exc:
        status_code, error_message = exc.status_code, exc.message
        raise
    except SQLAlchemyError as exc:
        status_code, error_message = StoreError().status_code, str(exc)
        raise
    except Exception as exc:
        status_code, error_message = 500, str(exc)
        raise
    finally:
        _emit(
            publisher,
            request,
            event_type,
            request_parameters,
            status_code,
            started,
            result_count=trail.result_count if error_message is None else 0,
            error_message=error_message,
        )


def audit_rejected_request(
    publisher: AuditPublisher,
    request: Request,
    event_type: str,
    status_code: int,
    error_message: str,
) -> None:
    """Emits the event of a query refused before it reached the store."""
    params: dict[str, Any] = {to_camel(key): value for key, value in request.path_params.items()}
    params.update(request.query_params)
    _emit(publisher, request, event_type, params, status_code, time.perf_counter(), error_message=error_message)
