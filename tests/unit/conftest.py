"""Shared fixtures for unit tests."""

from collections.abc import Generator
from pathlib import Path

import pytest
from pytest_mock import MockerFixture, MockType
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import get_settings
from src.core.context import RequestContext
from src.core.error_context import _get_sensitive_fields


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear the request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture
def isolated_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> pytest.MonkeyPatch:
    """Remove environment variables that would override setting defaults.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        tmp_path: Working directory without a .env file.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    for key in (
        "ENVIRONMENT",
        "DEBUG",
        "PORT",
        "API_HOST",
        "API_PORT",
        "API_PREFIX",
        "APP_NAME",
        "LOG_CONFIG__LOG_FORMATTER_TYPE",
        "OBSERVABILITY_CONFIG__EXPORTER_TYPE",
        "OBSERVABILITY_CONFIG__TRACE_SAMPLE_RATE",
        "KAFKA_CONFIG__BOOTSTRAP_SERVERS",
        "KAFKA_CONFIG__TOPIC",
        "DATABASE_CONFIG__DATABASE_URL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def mock_session(mocker: MockerFixture) -> MockType:
    """AsyncSession double whose ``execute`` is awaitable."""
    session = mocker.AsyncMock(spec=AsyncSession)
    return session
