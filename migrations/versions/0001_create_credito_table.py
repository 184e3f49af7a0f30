"""Create the credito table.

Revision ID: 0001
Revises:
Create Date: 2025-01-15 00:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

MONEY = sa.Numeric(15, 2)


def upgrade() -> None:
    op.create_table(
        "credito",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("numero_credito", sa.String(length=50), nullable=False),
        sa.Column("numero_nfse", sa.String(length=50), nullable=False),
        sa.Column("data_constituicao", sa.Date(), nullable=False),
        sa.Column("valor_issqn", MONEY, nullable=False),
        sa.Column("tipo_credito", sa.String(length=50), nullable=False),
        sa.Column("simples_nacional", sa.Boolean(), nullable=False),
        sa.Column("aliquota", sa.Numeric(5, 2), nullable=False),
        sa.Column("valor_faturado", MONEY, nullable=False),
        sa.Column("valor_deducao", MONEY, server_default="0", nullable=False),
        sa.Column("base_calculo", MONEY, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("valor_issqn > 0", name=op.f("ck_credito_valor_issqn_positivo")),
        sa.CheckConstraint(
            "aliquota > 0 AND aliquota <= 100", name=op.f("ck_credito_aliquota_faixa")
        ),
        sa.CheckConstraint(
            "valor_faturado > 0", name=op.f("ck_credito_valor_faturado_positivo")
        ),
        sa.CheckConstraint(
            "valor_deducao >= 0", name=op.f("ck_credito_valor_deducao_nao_negativo")
        ),
        sa.CheckConstraint(
            "base_calculo > 0", name=op.f("ck_credito_base_calculo_positiva")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_credito")),
    )
    op.create_index(
        op.f("ix_credito_numero_credito"), "credito", ["numero_credito"], unique=True
    )
    op.create_index(op.f("ix_credito_numero_nfse"), "credito", ["numero_nfse"])
    op.create_index(
        op.f("ix_credito_data_constituicao"), "credito", ["data_constituicao"]
    )
    op.create_index(op.f("ix_credito_tipo_credito"), "credito", ["tipo_credito"])


def downgrade() -> None:
    op.drop_index(op.f("ix_credito_tipo_credito"), table_name="credito")
    op.drop_index(op.f("ix_credito_data_constituicao"), table_name="credito")
    op.drop_index(op.f("ix_credito_numero_nfse"), table_name="credito")
    op.drop_index(op.f("ix_credito_numero_credito"), table_name="credito")
    op.drop_table("credito")
