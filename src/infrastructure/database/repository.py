"""Generic read repository for SQLAlchemy models.

Concrete repositories subclass ``BaseRepository`` and build their own
statements; ``_fetch_all``, ``_fetch_one`` and ``_fetch_scalar`` execute
them against the bound session.
"""

from typing import Any, Generic, TypeVar

from loguru import logger
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.base import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Base repository providing common read operations.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class CreditRepository(BaseRepository[Credit]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Credit)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    async def _fetch_all(self, stmt: Select[Any]) -> list[T]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _fetch_one(self, stmt: Select[Any]) -> T | None:
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _fetch_scalar(self, stmt: Select[Any]) -> Any:  # noqa: ANN401 - column value
        result = await self.session.execute(stmt)
        return result.scalar()

    async def filter_by(self, **kwargs: object) -> list[T]:
        """Return the instances matching every ``field=value`` pair, ordered by id.

        Args:
            **kwargs: Field-value pairs to filter by.

        Returns:
            list[T]: List of model instances matching all conditions.

        Raises:
            AttributeError: If a field does not exist on the model.
        """
        logger.debug(
            "Filtering {} instances with filters: {}", self.model_class.__name__, kwargs
        )
        stmt = select(self.model_class)
        for field, value in kwargs.items():
            stmt = stmt.where(getattr(self.model_class, field) == value)
        return await self._fetch_all(stmt.order_by(self.model_class.id))
