from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from app.core.audit import (
    CONSULTA_CREDITO_POR_NUMERO,
    CONSULTA_CREDITOS_COM_FILTROS,
    CONSULTA_CREDITOS_POR_NFSE,
    CONSULTA_CREDITOS_POR_NFSE_PAGINADA,
    AuditPublisher,
    audited_query,
    get_audit_publisher,
)
from app.core.exceptions import NotFoundError
from app.core.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from app.database import get_db
from app.middleware.rate_limit import CONSULTA_LIMIT, limiter
from app.repositories.credito_repository import CreditoFiltros, CreditoRepository
from app.schemas.api_responses import ErrorResponse, PaginatedCreditoResponse
from app.schemas.credito import CreditoSchema
from app.services.credito_service import CreditoQueryService

router = APIRouter(prefix="/creditos", tags=["creditos"])

CACHE_CONTROL = "private, max-age=60"
NOT_FOUND_RESPONSES = {404: {"model": ErrorResponse, "description": "Nenhum credito encontrado"}}


def get_credito_service(db: Session = Depends(get_db)) -> CreditoQueryService:
    return CreditoQueryService(CreditoRepository(db))


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@router.get(
    "/credito/{numero_credito}",
    response_model=CreditoSchema,
    responses=NOT_FOUND_RESPONSES,
    summary="Buscar credito por numero",
    description="Retorna o credito constituido identificado pelo numero do credito.",
)
@limiter.limit(CONSULTA_LIMIT)
def get_credito_por_numero(
    request: Request,
    response: Response,
    numero_credito: str,
    service: CreditoQueryService = Depends(get_credito_service),
    publisher: AuditPublisher = Depends(get_audit_publisher),
) -> CreditoSchema:
    response.headers["Cache-Control"] = CACHE_CONTROL

    with audited_query(publisher, request, CONSULTA_CREDITO_POR_NUMERO, {"numeroCredito": numero_credito}) as trail:
        credito = service.buscar_por_numero_credito(numero_credito)
        if credito is None:
            raise NotFoundError("Credito nao encontrado")
        trail.result_count = 1

    return credito


@router.get(
    "/paginated/{numero_nfse}",
    response_model=PaginatedCreditoResponse,
    responses=NOT_FOUND_RESPONSES,
    summary="Buscar creditos por NFS-e com paginacao",
    description=(
        "Retorna uma pagina de creditos da NFS-e, do mais recente para o mais antigo. "
        "Pagina negativa vira 0; tamanho fora de 1..100 e ajustado (<=0 vira 10, >100 vira 100)."
    ),
)
@limiter.limit(CONSULTA_LIMIT)
def get_creditos_por_nfse_paginado(
    request: Request,
    response: Response,
    numero_nfse: str,
    page: int = Query(DEFAULT_PAGE, description="Pagina atual, comecando em 0"),
    size: int = Query(DEFAULT_PAGE_SIZE, description="Quantidade de itens por pagina (maximo 100)"),
    service: CreditoQueryService = Depends(get_credito_service),
    publisher: AuditPublisher = Depends(get_audit_publisher),
) -> PaginatedCreditoResponse:
    response.headers["Cache-Control"] = CACHE_CONTROL
    params = {"numeroNfse": numero_nfse, "page": page, "size": size}

    with audited_query(publisher, request, CONSULTA_CREDITOS_POR_NFSE_PAGINADA, params) as trail:
        resultado = service.buscar_por_nfse_paginado(numero_nfse, page, size)
        if resultado.is_empty:
            raise NotFoundError("Nenhum credito encontrado para a NFS-e")
        trail.result_count = len(resultado.content)

    return resultado


@router.get(
    "/search/paginated",
    response_model=PaginatedCreditoResponse,
    responses=NOT_FOUND_RESPONSES,
    summary="Buscar creditos com filtros",
    description=(
        "Filtros opcionais por NFS-e, tipo de credito e Simples Nacional, combinados com E. "
        "Filtros ausentes nao restringem o resultado."
    ),
)
@limiter.limit(CONSULTA_LIMIT)
def search_creditos(
    request: Request,
    response: Response,
    numero_nfse: str | None = Query(None, alias="numeroNfse", max_length=50, description="Numero da NFS-e"),
    tipo_credito: str | None = Query(None, alias="tipoCredito", max_length=50, description="Tipo do credito"),
    simples_nacional: bool | None = Query(None, alias="simplesNacional", description="Optante do Simples"),
    page: int = Query(DEFAULT_PAGE, description="Pagina atual, comecando em 0"),
    size: int = Query(DEFAULT_PAGE_SIZE, description="Quantidade de itens por pagina (maximo 100)"),
    service: CreditoQueryService = Depends(get_credito_service),
    publisher: AuditPublisher = Depends(get_audit_publisher),
) -> PaginatedCreditoResponse:
    response.headers["Cache-Control"] = CACHE_CONTROL
    filtros = CreditoFiltros(
        numero_nfse=_blank_to_none(numero_nfse),
        tipo_credito=_blank_to_none(tipo_credito),
        simples_nacional=simples_nacional,
    )
    params = {**filtros.as_params(), "page": page, "size": size}

    with audited_query(publisher, request, CONSULTA_CREDITOS_COM_FILTROS, params) as trail:
        resultado = service.buscar_com_filtros(filtros, page, size)
        if resultado.is_empty:
            raise NotFoundError("Nenhum credito encontrado para os filtros informados")
        trail.result_count = len(resultado.content)

    return resultado


@router.get(
    "/{numero_nfse}",
    response_model=list[CreditoSchema],
    responses=NOT_FOUND_RESPONSES,
    summary="Buscar creditos por NFS-e",
    description="Retorna todos os creditos da NFS-e, sem paginacao e sem ordenacao explicita.",
)
@limiter.limit(CONSULTA_LIMIT)
def get_creditos_por_nfse(
    request: Request,
    response: Response,
    numero_nfse: str,
    service: CreditoQueryService = Depends(get_credito_service),
    publisher: AuditPublisher = Depends(get_audit_publisher),
) -> list[CreditoSchema]:
    response.headers["Cache-Control"] = CACHE_CONTROL

    with audited_query(publisher, request, CONSULTA_CREDITOS_POR_NFSE, {"numeroNfse": numero_nfse}) as trail:
        creditos = service.buscar_por_nfse(numero_nfse)
        if not creditos:
            raise NotFoundError("Nenhum credito encontrado para a NFS-e")
        trail.result_count = len(creditos)

    return creditos


AUDITED_ENDPOINTS = {
    get_credito_por_numero: CONSULTA_CREDITO_POR_NUMERO,
    get_creditos_por_nfse_paginado: CONSULTA_CREDITOS_POR_NFSE_PAGINADA,
    search_creditos: CONSULTA_CREDITOS_COM_FILTROS,
    get_creditos_por_nfse: CONSULTA_CREDITOS_POR_NFSE,
}
