"""Kafka audit trail for credit queries."""

from src.infrastructure.messaging.events import AuditEvent, QueryKind
from src.infrastructure.messaging.publisher import AuditPublisher

__all__ = ["AuditEvent", "AuditPublisher", "QueryKind"]
