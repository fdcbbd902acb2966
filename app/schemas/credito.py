from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

BUSINESS_FIELDS = (
    "numero_credito",
    "numero_nfse",
    "data_constituicao",
    "valor_issqn",
    "tipo_credito",
    "simples_nacional",
    "aliquota",
    "valor_faturado",
    "valor_deducao",
    "base_calculo",
)


class CreditoSchema(BaseModel):
    id: int | None = None
    numero_credito: str
    numero_nfse: str
    data_constituicao: date
    valor_issqn: Decimal
    tipo_credito: str
    simples_nacional: bool | None = None
    aliquota: Decimal
    valor_faturado: Decimal
    valor_deducao: Decimal
    base_calculo: Decimal

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def business_key(self) -> tuple[Any, ...]:
        return tuple(getattr(self, field) for field in BUSINESS_FIELDS)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CreditoSchema):
            return NotImplemented
        return self.business_key() == other.business_key()

    def __hash__(self) -> int:
        return hash(self.business_key())


def mesmo_credito(a: Any, b: Any) -> bool:
    """Compares two credit rows by business fields, ignoring the storage id.

    Accepts ORM rows as well as schemas.
    """
    return all(getattr(a, field) == getattr(b, field) for field in BUSINESS_FIELDS)
