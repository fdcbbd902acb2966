from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Credito(Base):
    __tablename__ = "credito"
    __table_args__ = (
        Index("idx_credito_nfse_data", "numero_nfse", "data_constituicao"),
        Index("idx_credito_tipo_data", "tipo_credito", "data_constituicao"),
        Index("idx_credito_data_id", "data_constituicao", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    numero_credito: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    numero_nfse: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    data_constituicao: Mapped[date] = mapped_column(Date, nullable=False)
    valor_issqn: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    tipo_credito: Mapped[str] = mapped_column(String(50), nullable=False)
    simples_nacional: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    aliquota: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    valor_faturado: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    valor_deducao: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    base_calculo: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
