"""Field-level validation of credit records.

The API never writes credits, so these checks guard what is read back. The
integrity report of ``CreditService`` uses ``validate_credit`` to flag rows
seeded out of band that break the data model. Violations carry the external
field names used in API responses.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from src.domain.credits.models import CODE_MAX_LENGTH, DECIMAL_SCALE, Credit

MONEY_INTEGER_DIGITS = 13
RATE_INTEGER_DIGITS = 3
MAX_TAX_RATE = Decimal(100)


@dataclass(frozen=True, slots=True)
class FieldViolation:
    """One rejected field, in the shape of the error envelope's validationErrors."""

    field: str
    rejected_value: Any
    message: str


# (attribute, external name, label)
_CODE_FIELDS = (
    ("credit_number", "numeroCredito", "Número do crédito"),
    ("document_number", "numeroNfse", "Número da NFS-e"),
    ("credit_type", "tipoCredito", "Tipo do crédito"),
)

# (attribute, external name, label, feminine, allow zero)
_MONEY_FIELDS = (
    ("tax_amount", "valorIssqn", "Valor do ISSQN", False, False),
    ("billed_amount", "valorFaturado", "Valor faturado", False, False),
    ("deduction_amount", "valorDeducao", "Valor de dedução", False, True),
    ("tax_base", "baseCalculo", "Base de cálculo", True, False),
)


def _digits_ok(value: Decimal, integer_digits: int) -> bool:
    _, digits, exponent = value.normalize().as_tuple()
    if not isinstance(exponent, int):
        return False
    fraction = max(-exponent, 0)
    integer = max(len(digits) + exponent, 0)
    return fraction <= DECIMAL_SCALE and integer <= integer_digits


def _validate_codes(credit: Credit) -> list[FieldViolation]:
    violations = []
    for attribute, field, label in _CODE_FIELDS:
        value = getattr(credit, attribute)
        if value is None or not str(value).strip():
            violations.append(FieldViolation(field, value, f"{label} é obrigatório"))
        elif len(value) > CODE_MAX_LENGTH:
            violations.append(
                FieldViolation(
                    field,
                    value,
                    f"{label} deve ter no máximo {CODE_MAX_LENGTH} caracteres",
                )
            )
    return violations


def _validate_amounts(credit: Credit) -> list[FieldViolation]:
    violations = []
    for attribute, field, label, feminine, allow_zero in _MONEY_FIELDS:
        value = getattr(credit, attribute)
        if value is None:
            suffix = "obrigatória" if feminine else "obrigatório"
            violations.append(FieldViolation(field, value, f"{label} é {suffix}"))
        elif allow_zero and value < 0:
            violations.append(
                FieldViolation(field, value, f"{label} não pode ser negativo")
            )
        elif not allow_zero and value <= 0:
            suffix = "positiva" if feminine else "positivo"
            violations.append(FieldViolation(field, value, f"{label} deve ser {suffix}"))
        elif not _digits_ok(value, MONEY_INTEGER_DIGITS):
            violations.append(
                FieldViolation(
                    field,
                    value,
                    f"{label} deve ter no máximo {MONEY_INTEGER_DIGITS} dígitos "
                    f"inteiros e {DECIMAL_SCALE} decimais",
                )
            )
    return violations


def _validate_rate(rate: Decimal | None) -> FieldViolation | None:
    if rate is None:
        return FieldViolation("aliquota", rate, "Alíquota é obrigatória")
    if rate <= 0:
        return FieldViolation("aliquota", rate, "Alíquota deve ser positiva")
    if rate > MAX_TAX_RATE:
        return FieldViolation("aliquota", rate, "Alíquota não pode ser superior a 100%")
    if not _digits_ok(rate, RATE_INTEGER_DIGITS):
        return FieldViolation(
            "aliquota",
            rate,
            f"Alíquota deve ter no máximo {RATE_INTEGER_DIGITS} dígitos inteiros "
            f"e {DECIMAL_SCALE} decimais",
        )
    return None


def validate_credit(credit: Credit, today: date | None = None) -> list[FieldViolation]:
    """Check a credit against every constraint of the data model.

    Args:
        credit: The record to check.
        today: Reference date for the not-in-the-future rule. Defaults to
            ``date.today()``.

    Returns:
        list[FieldViolation]: One entry per rejected field, empty when the
            record is valid.
    """
    today = today or date.today()
    violations = _validate_codes(credit)

    if credit.constitution_date is None:
        violations.append(
            FieldViolation("dataConstituicao", None, "Data de constituição é obrigatória")
        )
    elif credit.constitution_date > today:
        violations.append(
            FieldViolation(
                "dataConstituicao",
                credit.constitution_date.isoformat(),
                "Data de constituição não pode ser futura",
            )
        )

    if credit.simplified_regime is None:
        violations.append(
            FieldViolation(
                "simplesNacional", None, "Indicação do Simples Nacional é obrigatória"
            )
        )

    if rate_violation := _validate_rate(credit.tax_rate):
        violations.append(rate_violation)

    violations.extend(_validate_amounts(credit))
    return violations


def has_consistent_tax_base(credit: Credit) -> bool:
    """Whether ``tax_base`` equals billed amount minus deductions."""
    return credit.tax_base == credit.net_amount
