"""Fixtures: in-memory SQLite store, credit factory, recording audit publisher."""

from __future__ import annotations

import os
from collections.abc import Generator
from datetime import date
from decimal import Decimal

# Precisa vir antes de qualquer import de app.*
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REDIS_URL"] = ""
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.core.audit import AuditEvent, get_audit_publisher
from app.database import Base, SessionLocal, engine
from app.models.credito import Credito


class RecordingPublisher:
    """Stands in for the Redis-backed publisher; keeps events in memory."""

    enabled = True

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    def publish(self, event: AuditEvent) -> None:
        self.events.append(event)

    def ping(self) -> bool:
        return True


@pytest.fixture(scope="session", autouse=True)
def _schema() -> Generator[None, None, None]:
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.execute(delete(Credito))
        session.commit()
        session.close()


@pytest.fixture
def criar_credito(db: Session):
    """Factory that persists a Credito; keyword arguments override the defaults."""
    contador = {"n": 0}

    def _criar(**overrides) -> Credito:
        contador["n"] += 1
        dados = {
            "numero_credito": f"CRED{contador['n']:06d}",
            "numero_nfse": "7891011",
            "data_constituicao": date(2024, 2, 25),
            "valor_issqn": Decimal("1500.75"),
            "tipo_credito": "ISSQN",
            "simples_nacional": True,
            "aliquota": Decimal("5.00"),
            "valor_faturado": Decimal("30000.00"),
            "valor_deducao": Decimal("5000.00"),
            "base_calculo": Decimal("25000.00"),
        }
        dados.update(overrides)
        credito = Credito(**dados)
        db.add(credito)
        db.commit()
        db.refresh(credito)
        return credito

    return _criar


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture(scope="session")
def app_client() -> Generator[TestClient, None, None]:
    from app.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def client(app_client: TestClient, publisher: RecordingPublisher, db: Session) -> Generator[TestClient, None, None]:
    app = app_client.app
    app.dependency_overrides[get_audit_publisher] = lambda: publisher
    try:
        yield app_client
    finally:
        app.dependency_overrides.clear()
