"""Constituted tax credits: model, lookups, validation and response shaping."""

from src.domain.credits.models import Credit
from src.domain.credits.repository import CreditRepository, CreditTypeStatistics
from src.domain.credits.schemas import CreditResponse
from src.domain.credits.service import CreditService

__all__ = [
    "Credit",
    "CreditRepository",
    "CreditResponse",
    "CreditService",
    "CreditTypeStatistics",
]
