from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.core.pagination import Page, PageRequest
from app.models.credito import Credito
from app.schemas.credito import CreditoSchema

logger = get_logger(__name__)

_SORT_COLUMNS = {
    "data_constituicao": Credito.data_constituicao,
}


@dataclass(frozen=True)
class CreditoFiltros:
    numero_nfse: str | None = None
    tipo_credito: str | None = None
    simples_nacional: bool | None = None

    @property
    def is_empty(self) -> bool:
        return self.numero_nfse is None and self.tipo_credito is None and self.simples_nacional is None

    def as_params(self) -> dict[str, Any]:
        params = {
            "numeroNfse": self.numero_nfse,
            "tipoCredito": self.tipo_credito,
            "simplesNacional": self.simples_nacional,
        }
        return {key: value for key, value in params.items() if value is not None}


def build_predicates(filtros: CreditoFiltros) -> list[ColumnElement[bool]]:
    """One equality predicate per filter that is present, nothing for absent ones."""
    predicates: list[ColumnElement[bool]] = []
    if filtros.numero_nfse is not None:
        predicates.append(Credito.numero_nfse == filtros.numero_nfse)
    if filtros.tipo_credito is not None:
        predicates.append(Credito.tipo_credito == filtros.tipo_credito)
    if filtros.simples_nacional is not None:
        predicates.append(Credito.simples_nacional.is_(filtros.simples_nacional))
    return predicates


def _to_schemas(rows: list[Credito]) -> list[CreditoSchema]:
    return [CreditoSchema.model_validate(row) for row in rows]


class CreditoRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_numero_nfse(self, numero_nfse: str) -> list[CreditoSchema]:
        # no ORDER BY: this endpoint keeps the store's own order
        stmt = select(Credito).where(Credito.numero_nfse == numero_nfse)
        return _to_schemas(list(self.db.scalars(stmt).all()))

    def find_by_numero_credito(self, numero_credito: str) -> CreditoSchema | None:
        stmt = select(Credito).where(Credito.numero_credito == numero_credito).order_by(Credito.id).limit(1)
        row = self.db.scalars(stmt).first()
        return CreditoSchema.model_validate(row) if row is not None else None

    def find_page_by_numero_nfse(self, numero_nfse: str, page_request: PageRequest) -> Page[CreditoSchema]:
        return self.find_page_by_filters(CreditoFiltros(numero_nfse=numero_nfse), page_request)

    def find_page_by_filters(self, filtros: CreditoFiltros, page_request: PageRequest) -> Page[CreditoSchema]:
        predicates = build_predicates(filtros)

        count_stmt = select(func.count()).select_from(Credito).where(*predicates)
        total = int(self.db.scalar(count_stmt) or 0)

        sort_column = _SORT_COLUMNS[page_request.sort.field]
        if page_request.sort.descending:
            order_by = (sort_column.desc(), Credito.id.desc())
        else:
            order_by = (sort_column.asc(), Credito.id.asc())

        rows: list[Credito] = []
        if total > page_request.offset:
            data_stmt = (
                select(Credito)
                .where(*predicates)
                .order_by(*order_by)
                .limit(page_request.size)
                .offset(page_request.offset)
            )
            rows = list(self.db.scalars(data_stmt).all())

        logger.debug(
            "creditos.page_fetched",
            filtros=len(predicates),
            page=page_request.page,
            size=page_request.size,
            total=total,
            returned=len(rows),
        )

        return Page(
            content=tuple(_to_schemas(rows)),
            page=page_request.page,
            size=page_request.size,
            total_elements=total,
        )
