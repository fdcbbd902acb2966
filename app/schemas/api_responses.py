from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.pagination import Page
from app.schemas.credito import CreditoSchema


class ErrorDetail(BaseModel):
    code: str
    message: str
    request_id: str | None = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str
    database: str
    audit: str
    version: str
    uptime_seconds: float


class PaginatedCreditoResponse(BaseModel):
    content: list[CreditoSchema] = Field(default_factory=list, description="Creditos da pagina atual")
    page: int = Field(description="Pagina atual, comecando em 0")
    size: int = Field(description="Tamanho efetivo da pagina")
    total_elements: int = Field(description="Total de creditos em todas as paginas")
    total_pages: int
    first: bool
    last: bool
    has_next: bool
    has_previous: bool

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_page(cls, page: Page[CreditoSchema]) -> PaginatedCreditoResponse:
        return cls(
            content=list(page.content),
            page=page.page,
            size=page.size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
            first=page.first,
            last=page.last,
            has_next=page.has_next,
            has_previous=page.has_previous,
        )

    @property
    def is_empty(self) -> bool:
        return not self.content
