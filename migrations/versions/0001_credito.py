"""credito table

Revision ID: 0001_credito
Revises:
Create Date: 2026-10-16 00:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_credito"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "credito",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("numero_credito", sa.String(length=50), nullable=False),
        sa.Column("numero_nfse", sa.String(length=50), nullable=False),
        sa.Column("data_constituicao", sa.Date(), nullable=False),
        sa.Column("valor_issqn", sa.Numeric(15, 2), nullable=False),
        sa.Column("tipo_credito", sa.String(length=50), nullable=False),
        sa.Column("simples_nacional", sa.Boolean(), nullable=True),
        sa.Column("aliquota", sa.Numeric(5, 2), nullable=False),
        sa.Column("valor_faturado", sa.Numeric(15, 2), nullable=False),
        sa.Column("valor_deducao", sa.Numeric(15, 2), nullable=False),
        sa.Column("base_calculo", sa.Numeric(15, 2), nullable=False),
    )
    op.create_index("ix_credito_numero_credito", "credito", ["numero_credito"])
    op.create_index("ix_credito_numero_nfse", "credito", ["numero_nfse"])
    op.create_index("idx_credito_nfse_data", "credito", ["numero_nfse", "data_constituicao"])


def downgrade() -> None:
    op.drop_index("idx_credito_nfse_data", table_name="credito")
    op.drop_index("ix_credito_numero_nfse", table_name="credito")
    op.drop_index("ix_credito_numero_credito", table_name="credito")
    op.drop_table("credito")
