"""FastAPI dependencies wiring the credit service to the request's session."""

from typing import Annotated

from fastapi import Depends

from src.core.config import Settings, get_settings
from src.domain.credits import CreditRepository, CreditService
from src.infrastructure.database import DatabaseSession


def get_credit_service(
    session: DatabaseSession,
    settings: Annotated[Settings, Depends(get_settings)],
) -> CreditService:
    """Build a ``CreditService`` over the request-scoped session."""
    return CreditService(
        CreditRepository(session),
        max_recent_limit=settings.credit_query_config.max_recent_limit,
    )


CreditServiceDep = Annotated[CreditService, Depends(get_credit_service)]
