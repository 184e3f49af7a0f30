"""ORM mapping of the ``credito`` table."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Date, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.base import BaseModel

ISSQN = "ISSQN"
CODE_MAX_LENGTH = 50
MONEY_PRECISION = 15
RATE_PRECISION = 5
DECIMAL_SCALE = 2


class Credit(BaseModel):
    """A constituted tax credit.

    Records are seeded out of band; this service only reads them. Python
    attribute names are English, column names follow the existing schema.
    Two credits are equal when they share the same credit number.
    """

    __tablename__ = "credito"
    __table_args__ = (
        CheckConstraint("valor_issqn > 0", name="valor_issqn_positivo"),
        CheckConstraint("aliquota > 0 AND aliquota <= 100", name="aliquota_faixa"),
        CheckConstraint("valor_faturado > 0", name="valor_faturado_positivo"),
        CheckConstraint("valor_deducao >= 0", name="valor_deducao_nao_negativo"),
        CheckConstraint("base_calculo > 0", name="base_calculo_positiva"),
    )

    credit_number: Mapped[str] = mapped_column(
        "numero_credito",
        String(CODE_MAX_LENGTH),
        unique=True,
        index=True,
        nullable=False,
    )
    document_number: Mapped[str] = mapped_column(
        "numero_nfse", String(CODE_MAX_LENGTH), index=True, nullable=False
    )
    constitution_date: Mapped[date] = mapped_column(
        "data_constituicao", Date, index=True, nullable=False
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        "valor_issqn", Numeric(MONEY_PRECISION, DECIMAL_SCALE), nullable=False
    )
    credit_type: Mapped[str] = mapped_column(
        "tipo_credito", String(CODE_MAX_LENGTH), index=True, nullable=False
    )
    simplified_regime: Mapped[bool] = mapped_column(
        "simples_nacional", Boolean, nullable=False, default=False
    )
    tax_rate: Mapped[Decimal] = mapped_column(
        "aliquota", Numeric(RATE_PRECISION, DECIMAL_SCALE), nullable=False
    )
    billed_amount: Mapped[Decimal] = mapped_column(
        "valor_faturado", Numeric(MONEY_PRECISION, DECIMAL_SCALE), nullable=False
    )
    deduction_amount: Mapped[Decimal] = mapped_column(
        "valor_deducao",
        Numeric(MONEY_PRECISION, DECIMAL_SCALE),
        nullable=False,
        default=Decimal("0.00"),
        server_default="0",
    )
    tax_base: Mapped[Decimal] = mapped_column(
        "base_calculo", Numeric(MONEY_PRECISION, DECIMAL_SCALE), nullable=False
    )

    @property
    def is_issqn(self) -> bool:
        return (self.credit_type or "").upper() == ISSQN

    @property
    def net_amount(self) -> Decimal:
        """Billed amount minus deductions, the expected tax base."""
        return (self.billed_amount or Decimal(0)) - (
            self.deduction_amount or Decimal(0)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Credit):
            return NotImplemented
        return self.credit_number == other.credit_number

    def __hash__(self) -> int:
        return hash(self.credit_number)

    def __repr__(self) -> str:
        return (
            f"<Credit(credit_number={self.credit_number!r}, "
            f"document_number={self.document_number!r})>"
        )
