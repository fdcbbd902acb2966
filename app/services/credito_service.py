from __future__ import annotations

from app.core.logging import get_logger
from app.core.pagination import normalize_page_request
from app.repositories.credito_repository import CreditoFiltros, CreditoRepository
from app.schemas.api_responses import PaginatedCreditoResponse
from app.schemas.credito import CreditoSchema

logger = get_logger(__name__)


class CreditoQueryService:
    def __init__(self, repository: CreditoRepository):
        self.repository = repository

    def buscar_por_nfse(self, numero_nfse: str) -> list[CreditoSchema]:
        return self.repository.find_by_numero_nfse(numero_nfse)

    def buscar_por_numero_credito(self, numero_credito: str) -> CreditoSchema | None:
        return self.repository.find_by_numero_credito(numero_credito)

    def buscar_por_nfse_paginado(self, numero_nfse: str, page: int, size: int) -> PaginatedCreditoResponse:
        page_request = normalize_page_request(page, size)
        if (page_request.page, page_request.size) != (page, size):
            logger.info(
                "creditos.pagination_clamped",
                requested_page=page,
                requested_size=size,
                page=page_request.page,
                size=page_request.size,
            )
        result = self.repository.find_page_by_numero_nfse(numero_nfse, page_request)
        return PaginatedCreditoResponse.from_page(result)

    def buscar_com_filtros(self, filtros: CreditoFiltros, page: int, size: int) -> PaginatedCreditoResponse:
        page_request = normalize_page_request(page, size)
        result = self.repository.find_page_by_filters(filtros, page_request)
        return PaginatedCreditoResponse.from_page(result)
