"""Parameterized lookups over the ``credito`` table."""

from datetime import date
from decimal import Decimal
from typing import NamedTuple

from loguru import logger
from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.credits.models import Credit
from src.infrastructure.database.repository import BaseRepository


class CreditTypeStatistics(NamedTuple):
    """Aggregates for one credit type."""

    credit_type: str
    count: int
    total_tax_amount: Decimal


class CreditRepository(BaseRepository[Credit]):
    """Read access to credit records.

    Every method issues a single SELECT; ordering is done by the database.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Credit)

    async def find_by_document_number(self, document_number: str) -> list[Credit]:
        """All credits backed by an NFS-e, newest constitution date first."""
        stmt = (
            select(Credit)
            .where(Credit.document_number == document_number)
            .order_by(Credit.constitution_date.desc())
        )
        return await self._fetch_all(stmt)

    async def find_by_credit_number(self, credit_number: str) -> Credit | None:
        stmt = select(Credit).where(Credit.credit_number == credit_number)
        return await self._fetch_one(stmt)

    async def exists_by_credit_number(self, credit_number: str) -> bool:
        stmt = select(exists().where(Credit.credit_number == credit_number))
        return bool(await self._fetch_scalar(stmt))

    async def find_by_type(self, credit_type: str) -> list[Credit]:
        return await self.filter_by(credit_type=credit_type)

    async def list_all(self) -> list[Credit]:
        return await self._fetch_all(select(Credit).order_by(Credit.id))

    async def find_recent(self, limit: int) -> list[Credit]:
        """The ``limit`` most recently constituted credits.

        Ties on the constitution date are broken by creation time, newest
        first.

        Args:
            limit: Maximum number of records to return.

        Returns:
            list[Credit]: At most ``limit`` credits.
        """
        stmt = (
            select(Credit)
            .order_by(Credit.constitution_date.desc(), Credit.created_at.desc())
            .limit(limit)
        )
        return await self._fetch_all(stmt)

    async def find_by_constitution_date_between(
        self, start: date, end: date
    ) -> list[Credit]:
        """Credits constituted within ``[start, end]``, newest first."""
        stmt = (
            select(Credit)
            .where(Credit.constitution_date.between(start, end))
            .order_by(Credit.constitution_date.desc())
        )
        return await self._fetch_all(stmt)

    async def find_by_simplified_regime(self, simplified_regime: bool) -> list[Credit]:
        return await self.filter_by(simplified_regime=simplified_regime)

    async def find_by_tax_amount_greater_than(self, amount: Decimal) -> list[Credit]:
        """Credits whose ISSQN amount exceeds ``amount``, largest first."""
        stmt = (
            select(Credit)
            .where(Credit.tax_amount > amount)
            .order_by(Credit.tax_amount.desc())
        )
        return await self._fetch_all(stmt)

    async def find_by_document_number_and_type(
        self, document_number: str, credit_type: str
    ) -> list[Credit]:
        return await self.filter_by(
            document_number=document_number, credit_type=credit_type
        )

    async def count_by_type(self, credit_type: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Credit)
            .where(Credit.credit_type == credit_type)
        )
        return int(await self._fetch_scalar(stmt) or 0)

    async def find_for_report(
        self, start: date, end: date, credit_type: str | None = None
    ) -> list[Credit]:
        """Credits constituted within ``[start, end]``, optionally of one type.

        Ordered by constitution date, then ISSQN amount, both descending.
        """
        stmt = select(Credit).where(Credit.constitution_date.between(start, end))
        if credit_type is not None:
            stmt = stmt.where(Credit.credit_type == credit_type)
        stmt = stmt.order_by(
            Credit.constitution_date.desc(), Credit.tax_amount.desc()
        )
        return await self._fetch_all(stmt)

    async def statistics_by_type(self) -> list[CreditTypeStatistics]:
        """Count and ISSQN total per credit type, most frequent type first."""
        count = func.count(Credit.id)
        stmt = (
            select(
                Credit.credit_type,
                count,
                func.coalesce(func.sum(Credit.tax_amount), 0),
            )
            .group_by(Credit.credit_type)
            .order_by(count.desc(), Credit.credit_type)
        )
        result = await self.session.execute(stmt)
        rows = [
            CreditTypeStatistics(credit_type, int(total), Decimal(amount))
            for credit_type, total, amount in result.all()
        ]
        logger.debug("Computed statistics for {} credit types", len(rows))
        return rows

    async def find_inconsistent_tax_base(self) -> list[Credit]:
        """Credits whose tax base differs from billed amount minus deductions."""
        stmt = (
            select(Credit)
            .where(Credit.tax_base != Credit.billed_amount - Credit.deduction_amount)
            .order_by(Credit.id)
        )
        return await self._fetch_all(stmt)
