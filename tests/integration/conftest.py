"""Fixtures running the whole application against in-memory collaborators.

The credit service is wired to ``InMemoryCreditRepository`` and audit events
are captured by ``RecordingPublisher``, so these tests need neither
PostgreSQL nor Kafka.
"""

from collections.abc import AsyncGenerator, Callable
from datetime import date

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pytest_mock import MockerFixture

from src.api.dependencies import get_credit_service
from src.api.main import create_app
from src.core.config import (
    KafkaConfig,
    ObservabilityConfig,
    Settings,
    get_settings,
)
from src.domain.credits.models import Credit
from src.domain.credits.service import CreditService
from src.infrastructure.messaging import AuditEvent, AuditPublisher


class InMemoryCreditRepository:
    """Stand-in for ``CreditRepository`` reproducing its ordering rules."""

    def __init__(self, credits: list[Credit]) -> None:
        self.credits = credits

    async def find_by_document_number(self, document_number: str) -> list[Credit]:
        matches = [c for c in self.credits if c.document_number == document_number]
        return sorted(matches, key=lambda c: c.constitution_date, reverse=True)

    async def find_by_credit_number(self, credit_number: str) -> Credit | None:
        return next(
            (c for c in self.credits if c.credit_number == credit_number), None
        )

    async def exists_by_credit_number(self, credit_number: str) -> bool:
        return any(c.credit_number == credit_number for c in self.credits)

    async def find_by_type(self, credit_type: str) -> list[Credit]:
        return [c for c in self.credits if c.credit_type == credit_type]

    async def list_all(self) -> list[Credit]:
        return sorted(self.credits, key=lambda c: c.id)

    async def find_recent(self, limit: int) -> list[Credit]:
        ordered = sorted(
            self.credits,
            key=lambda c: (c.constitution_date, c.created_at),
            reverse=True,
        )
        return ordered[:limit]


class RecordingPublisher(AuditPublisher):
    """Audit publisher that keeps events in memory instead of sending them."""

    def __init__(self) -> None:
        super().__init__(KafkaConfig(enabled=False, topic="consulta-credito-topic"))
        self.events: list[AuditEvent] = []

    def publish(self, event: AuditEvent) -> None:
        self.events.append(event)


@pytest.fixture
def credits(make_credit: Callable[..., Credit]) -> list[Credit]:
    """Two credits of NFS-e 7891011 and one of another document."""
    return [
        make_credit(),
        make_credit(
            credit_number="789012",
            constitution_date=date(2024, 2, 26),
            simplified_regime=False,
        ),
        make_credit(
            credit_number="654321",
            document_number="1122334",
            constitution_date=date(2024, 1, 15),
            credit_type="Outros",
        ),
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        debug=False,
        api_prefix="/api",
        observability_config=ObservabilityConfig(enable_tracing=False),
        kafka_config=KafkaConfig(enabled=False),
    )


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def app(
    settings: Settings,
    publisher: RecordingPublisher,
    credits: list[Credit],
    mocker: MockerFixture,
) -> FastAPI:
    """Application with the database and the broker replaced."""
    mocker.patch(
        "src.api.main.check_database_connection", return_value=(True, None)
    )
    mocker.patch("src.api.main.close_database")

    application = create_app(settings, audit_publisher=publisher)
    repository = InMemoryCreditRepository(credits)
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_credit_service] = lambda: CreditService(
        repository,  # type: ignore[arg-type]
        max_recent_limit=settings.credit_query_config.max_recent_limit,
    )
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing the full application.

    Yields:
        AsyncClient: HTTP client bound to the application.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def audit_events(publisher: RecordingPublisher) -> list[AuditEvent]:
    """Events published so far, oldest first."""
    return publisher.events
