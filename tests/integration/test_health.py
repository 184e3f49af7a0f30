"""Integration tests for the health and info endpoints and the lifespan."""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from pytest_mock import MockerFixture

from src.infrastructure.messaging import AuditPublisher


@pytest.mark.integration
class TestHealth:
    async def test_healthy(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": True, "audit": False}

    async def test_degraded_when_database_is_down(
        self, client: AsyncClient, mocker: MockerFixture
    ) -> None:
        mocker.patch(
            "src.api.main.check_database_connection",
            return_value=(False, "connection refused"),
        )

        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] is False

    async def test_info(self, client: AsyncClient) -> None:
        response = await client.get("/info")

        assert response.status_code == 200
        body = response.json()
        assert body["app_name"] == "API Consulta Creditos"
        assert body["debug"] is False
        assert body["audit"] == (
            "AuditPublisher - topic: consulta-credito-topic, healthy: False"
        )


@pytest.mark.integration
class TestLifespan:
    async def test_starts_and_stops_publisher(
        self, app: FastAPI, mocker: MockerFixture
    ) -> None:
        # Arrange
        publisher: AuditPublisher = app.state.audit_publisher
        start = mocker.spy(publisher, "start")
        stop = mocker.spy(publisher, "stop")

        # Act
        async with app.router.lifespan_context(app):
            start.assert_called_once()
            stop.assert_not_called()

        # Assert
        stop.assert_called_once()

    async def test_database_failure_aborts_startup(
        self, app: FastAPI, mocker: MockerFixture
    ) -> None:
        mocker.patch(
            "src.api.main.check_database_connection",
            return_value=(False, "connection refused"),
        )

        with pytest.raises(RuntimeError, match="connection refused"):
            async with app.router.lifespan_context(app):
                pass


@pytest.mark.integration
class TestPing:
    async def test_plain_text_pong(self, client: AsyncClient) -> None:
        response = await client.get("/api/ping")

        assert response.status_code == 200
        assert response.text == "pong"
        assert response.headers["content-type"].startswith("text/plain")
