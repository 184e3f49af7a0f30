"""Credit query service.

Validates lookup parameters, runs the matching repository query and shapes
the result. Validation failures raise ``InvalidArgumentError`` before the
database is touched; key based lookups with no match raise
``CreditNotFoundError``.
"""

from datetime import date
from decimal import Decimal

from loguru import logger

from src.core.exceptions import CreditNotFoundError, InvalidArgumentError
from src.core.observability import trace_operation
from src.domain.credits.repository import CreditRepository, CreditTypeStatistics
from src.domain.credits.schemas import CreditResponse, to_response, to_response_list
from src.domain.credits.validation import (
    FieldViolation,
    has_consistent_tax_base,
    validate_credit,
)

DOCUMENT_NUMBER_PARAM = "Número da NFS-e"
CREDIT_NUMBER_PARAM = "Número do crédito"
CREDIT_TYPE_PARAM = "Tipo do crédito"
DEFAULT_MAX_RECENT_LIMIT = 1000


def _require_text(value: str | None, parameter: str) -> str:
    if value is None or not value.strip():
        error = InvalidArgumentError.blank(parameter)
        logger.warning("Validation failed: {}", error.message)
        raise error
    return value


class CreditService:
    """Read-only operations over credits.

    Args:
        repository: Repository bound to the request's session.
        max_recent_limit: Largest accepted ``limit`` for ``find_recent``.
    """

    def __init__(
        self,
        repository: CreditRepository,
        max_recent_limit: int = DEFAULT_MAX_RECENT_LIMIT,
    ) -> None:
        self.repository = repository
        self.max_recent_limit = max_recent_limit

    async def find_by_document_number(self, document_number: str) -> list[CreditResponse]:
        """Credits backed by an NFS-e, newest constitution date first.

        Raises:
            InvalidArgumentError: If ``document_number`` is blank.
            CreditNotFoundError: If no credit references the document.
        """
        logger.info("Fetching credits for NFS-e: {}", document_number)
        _require_text(document_number, DOCUMENT_NUMBER_PARAM)

        with trace_operation("credits.find_by_document_number"):
            credits = await self.repository.find_by_document_number(document_number)

        if not credits:
            logger.warning("No credit found for NFS-e: {}", document_number)
            raise CreditNotFoundError.for_document_number(document_number)

        logger.info("Found {} credit(s) for NFS-e: {}", len(credits), document_number)
        return to_response_list(credits)

    async def find_by_credit_number(self, credit_number: str) -> CreditResponse:
        """The credit identified by ``credit_number``.

        Raises:
            InvalidArgumentError: If ``credit_number`` is blank.
            CreditNotFoundError: If the credit does not exist.
        """
        logger.info("Fetching credit by number: {}", credit_number)
        _require_text(credit_number, CREDIT_NUMBER_PARAM)

        with trace_operation("credits.find_by_credit_number"):
            credit = await self.repository.find_by_credit_number(credit_number)

        if credit is None:
            logger.warning("Credit not found: {}", credit_number)
            raise CreditNotFoundError.for_credit_number(credit_number)

        logger.info(
            "Found credit {} for NFS-e {}", credit_number, credit.document_number
        )
        return to_response(credit)

    async def list_all(self) -> list[CreditResponse]:
        logger.info("Listing all credits")
        with trace_operation("credits.list_all"):
            credits = await self.repository.list_all()
        logger.info("Total credits found: {}", len(credits))
        return to_response_list(credits)

    async def find_by_type(self, credit_type: str) -> list[CreditResponse]:
        """Credits of a given type; an empty list is a valid answer.

        Raises:
            InvalidArgumentError: If ``credit_type`` is blank.
        """
        logger.info("Fetching credits by type: {}", credit_type)
        _require_text(credit_type, CREDIT_TYPE_PARAM)

        with trace_operation("credits.find_by_type"):
            credits = await self.repository.find_by_type(credit_type)

        logger.info("Found {} credit(s) of type {}", len(credits), credit_type)
        return to_response_list(credits)

    async def exists_by_credit_number(self, credit_number: str | None) -> bool:
        """Whether a credit exists; blank input answers False without a query."""
        if credit_number is None or not credit_number.strip():
            return False

        with trace_operation("credits.exists_by_credit_number"):
            exists = await self.repository.exists_by_credit_number(credit_number)

        logger.debug("Credit {} exists: {}", credit_number, exists)
        return exists

    async def find_recent(self, limit: int) -> list[CreditResponse]:
        """The ``limit`` most recently constituted credits.

        Raises:
            InvalidArgumentError: If ``limit`` is not in ``1..max_recent_limit``.
        """
        logger.info("Fetching the {} most recent credits", limit)
        if limit <= 0:
            message = "Limite deve ser maior que zero"
            logger.warning("Validation failed: {}", message)
            raise InvalidArgumentError(message, context={"limite": limit})
        if limit > self.max_recent_limit:
            message = f"Limite não pode ser maior que {self.max_recent_limit}"
            logger.warning("Validation failed: {}", message)
            raise InvalidArgumentError(message, context={"limite": limit})

        with trace_operation("credits.find_recent", limit=limit):
            credits = await self.repository.find_recent(limit)

        logger.info("Found {} recent credit(s)", len(credits))
        return to_response_list(credits)

    async def find_by_constitution_period(
        self, start: date, end: date
    ) -> list[CreditResponse]:
        """Credits constituted between ``start`` and ``end``, inclusive.

        Raises:
            InvalidArgumentError: If ``start`` is after ``end``.
        """
        if start > end:
            message = "Data inicial não pode ser posterior à data final"
            raise InvalidArgumentError(
                message, context={"inicio": start.isoformat(), "fim": end.isoformat()}
            )
        credits = await self.repository.find_by_constitution_date_between(start, end)
        return to_response_list(credits)

    async def count_by_type(self, credit_type: str) -> int:
        _require_text(credit_type, CREDIT_TYPE_PARAM)
        return await self.repository.count_by_type(credit_type)

    async def statistics_by_type(self) -> list[CreditTypeStatistics]:
        return await self.repository.statistics_by_type()

    async def find_inconsistent_tax_base(self) -> list[CreditResponse]:
        credits = await self.repository.find_inconsistent_tax_base()
        if credits:
            logger.warning("{} credit(s) with inconsistent tax base", len(credits))
        return to_response_list(credits)

    async def find_by_tax_amount_greater_than(
        self, amount: Decimal
    ) -> list[CreditResponse]:
        """Credits with an ISSQN amount above ``amount``, largest first.

        Raises:
            InvalidArgumentError: If ``amount`` is negative.
        """
        if amount < 0:
            message = "Valor mínimo não pode ser negativo"
            logger.warning("Validation failed: {}", message)
            raise InvalidArgumentError(message, context={"valor": str(amount)})
        credits = await self.repository.find_by_tax_amount_greater_than(amount)
        return to_response_list(credits)

    async def find_by_document_number_and_type(
        self, document_number: str, credit_type: str
    ) -> list[CreditResponse]:
        _require_text(document_number, DOCUMENT_NUMBER_PARAM)
        _require_text(credit_type, CREDIT_TYPE_PARAM)
        credits = await self.repository.find_by_document_number_and_type(
            document_number, credit_type
        )
        return to_response_list(credits)

    async def report(
        self, start: date, end: date, credit_type: str | None = None
    ) -> list[CreditResponse]:
        """Credits for a period report, optionally restricted to one type.

        A blank ``credit_type`` means every type.

        Raises:
            InvalidArgumentError: If ``start`` is after ``end``.
        """
        if start > end:
            message = "Data inicial não pode ser posterior à data final"
            raise InvalidArgumentError(
                message, context={"inicio": start.isoformat(), "fim": end.isoformat()}
            )
        if credit_type is not None and not credit_type.strip():
            credit_type = None
        with trace_operation("credits.report", inicio=start.isoformat()):
            credits = await self.repository.find_for_report(start, end, credit_type)
        logger.info("Report for {}..{}: {} credit(s)", start, end, len(credits))
        return to_response_list(credits)

    async def integrity_report(
        self, today: date | None = None
    ) -> dict[str, list[FieldViolation]]:
        """Validate every stored credit.

        Args:
            today: Reference date for the constitution date check.

        Returns:
            dict[str, list[FieldViolation]]: Violations keyed by credit number,
                only for credits that have any. A tax base that differs from
                billed amount minus deductions is reported on ``baseCalculo``.
        """
        report: dict[str, list[FieldViolation]] = {}
        for credit in await self.repository.list_all():
            violations = validate_credit(credit, today)
            if credit.tax_base is not None and not has_consistent_tax_base(credit):
                violations.append(
                    FieldViolation(
                        "baseCalculo",
                        credit.tax_base,
                        "Base de cálculo difere do valor faturado menos a dedução",
                    )
                )
            if violations:
                report[credit.credit_number] = violations

        logger.info("Integrity report: {} credit(s) with violations", len(report))
        return report
