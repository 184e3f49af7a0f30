"""External representation of credits.

Responses use the camelCase Portuguese keys of the public contract.
Monetary values stay ``Decimal`` all the way to the response body, where
they are written as JSON numbers with their stored scale, so no rounding
happens on the way out.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, WithJsonSchema

from src.domain.credits.models import Credit

SIMPLIFIED_REGIME_YES = "Sim"
SIMPLIFIED_REGIME_NO = "Não"

Money = Annotated[Decimal, WithJsonSchema({"type": "number"})]


def format_simplified_regime(value: bool | None) -> str:
    """Render the Simples Nacional flag as ``"Sim"`` or ``"Não"``.

    ``None`` renders as ``"Não"``.
    """
    return SIMPLIFIED_REGIME_YES if value else SIMPLIFIED_REGIME_NO


def parse_simplified_regime(value: str | None) -> bool:
    """Inverse of ``format_simplified_regime``; only ``"sim"`` in any case is True."""
    return value is not None and value.strip().lower() == SIMPLIFIED_REGIME_YES.lower()


class CreditResponse(BaseModel):
    """A credit as returned by the API."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    credit_number: str = Field(
        alias="numeroCredito", description="Número do crédito", examples=["123456"]
    )
    document_number: str = Field(
        alias="numeroNfse", description="Número da NFS-e", examples=["7891011"]
    )
    constitution_date: date = Field(
        alias="dataConstituicao",
        description="Data de constituição (yyyy-MM-dd)",
        examples=["2024-02-25"],
    )
    tax_amount: Money = Field(
        alias="valorIssqn", description="Valor do ISSQN", examples=[1500.75]
    )
    credit_type: str = Field(
        alias="tipoCredito", description="Tipo do crédito", examples=["ISSQN"]
    )
    simplified_regime: str = Field(
        alias="simplesNacional",
        description="Optante pelo Simples Nacional (Sim/Não)",
        examples=["Sim"],
    )
    tax_rate: Money = Field(alias="aliquota", description="Alíquota", examples=[5.0])
    billed_amount: Money = Field(
        alias="valorFaturado", description="Valor faturado", examples=[30000.00]
    )
    deduction_amount: Money = Field(
        alias="valorDeducao", description="Valor de dedução", examples=[5000.00]
    )
    tax_base: Money = Field(
        alias="baseCalculo", description="Base de cálculo", examples=[25000.00]
    )


def to_response(credit: Credit) -> CreditResponse:
    return CreditResponse(
        credit_number=credit.credit_number,
        document_number=credit.document_number,
        constitution_date=credit.constitution_date,
        tax_amount=credit.tax_amount,
        credit_type=credit.credit_type,
        simplified_regime=format_simplified_regime(credit.simplified_regime),
        tax_rate=credit.tax_rate,
        billed_amount=credit.billed_amount,
        deduction_amount=credit.deduction_amount,
        tax_base=credit.tax_base,
    )


def to_response_list(credits: list[Credit]) -> list[CreditResponse]:
    return [to_response(credit) for credit in credits]
