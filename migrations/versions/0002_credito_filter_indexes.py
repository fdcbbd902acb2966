"""indexes for the filtered credit search

Revision ID: 0002_credito_filter_indexes
Revises: 0001_credito
Create Date: 2026-10-16 00:00:00
"""

from __future__ import annotations

from alembic import op

revision = "0002_credito_filter_indexes"
down_revision = "0001_credito"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_index(
        "idx_credito_tipo_data",
        "credito",
        ["tipo_credito", "data_constituicao"],
    )
    op.create_index(
        "idx_credito_data_id",
        "credito",
        ["data_constituicao", "id"],
    )


def downgrade() -> None:
    op.drop_index("idx_credito_data_id", table_name="credito")
    op.drop_index("idx_credito_tipo_data", table_name="credito")
