"""Unit tests for the logging module."""

import logging
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

import orjson
import pytest
from loguru import logger
from pytest_mock import MockerFixture

from src.core.config import LogConfig, Settings
from src.core.constants import REDACTED
from src.core.logging import (
    QUIET_LOGGERS,
    InterceptHandler,
    _state,
    make_console_formatter,
    serialize_for_json,
    setup_logging,
)


@pytest.fixture
def reset_logging_state() -> Generator[None]:
    """Let ``setup_logging`` run and restore the default handler afterwards."""
    _state.configured = False
    yield
    _state.configured = False
    logger.remove()


def _record(message: str = "Request completed", **extra: object) -> dict[str, Any]:
    level = type("Level", (), {"name": "INFO"})()
    return {
        "time": datetime(2024, 2, 25, 10, 0, tzinfo=UTC),
        "level": level,
        "message": message,
        "name": "src.api.middleware.request_logging",
        "function": "dispatch",
        "line": 42,
        "extra": extra,
        "exception": None,
    }


@pytest.mark.unit
class TestSerializeForJson:
    def test_merges_context_fields(self) -> None:
        record = _record(correlation_id="corr-1", status_code=200, _private="x")

        entry = orjson.loads(serialize_for_json(record))

        assert entry["message"] == "Request completed"
        assert entry["level"] == "INFO"
        assert entry["correlation_id"] == "corr-1"
        assert entry["status_code"] == 200
        assert "_private" not in entry
        assert entry["timestamp"] == "2024-02-25T10:00:00+00:00"

    def test_unserializable_values_use_str(self) -> None:
        record = _record(limit=object())

        entry = orjson.loads(serialize_for_json(record))

        assert entry["limit"].startswith("<object object")

    def test_output_is_one_line(self) -> None:
        assert serialize_for_json(_record()).count("\n") == 1


@pytest.mark.unit
class TestConsoleFormatter:
    def test_priority_fields_come_first(self) -> None:
        formatter = make_console_formatter([])
        record = _record(
            path="/api/creditos", correlation_id="1234567890abcdef", other="v"
        )

        line = formatter(record)

        assert line.index("12345678") < line.index("/api/creditos")
        assert "1234567890abcdef" not in line
        assert "other=v" in line

    def test_sensitive_fields_are_redacted(self) -> None:
        formatter = make_console_formatter(["Token"])

        line = formatter(_record(token="abc"))

        assert f"token={REDACTED}" in line
        assert "abc" not in line

    def test_braces_are_escaped(self) -> None:
        formatter = make_console_formatter([])

        line = formatter(_record(message="value {x}"))

        assert "value {{x}}" in line


@pytest.mark.unit
class TestSetupLogging:
    @pytest.mark.usefixtures("reset_logging_state")
    def test_configures_once(self, mocker: MockerFixture) -> None:
        # Arrange
        settings = mocker.Mock(spec=Settings)
        settings.debug = False
        settings.log_config = LogConfig(log_formatter_type="json")
        add = mocker.spy(logger, "add")

        # Act
        setup_logging(settings)
        setup_logging(settings)

        # Assert
        assert add.call_count == 1
        assert _state.configured is True

    @pytest.mark.usefixtures("reset_logging_state")
    def test_quiets_noisy_loggers(self, mocker: MockerFixture) -> None:
        settings = mocker.Mock(spec=Settings)
        settings.debug = True
        settings.log_config = LogConfig(log_formatter_type="console")

        setup_logging(settings)

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
        assert isinstance(logging.getLogger("uvicorn").handlers[0], InterceptHandler)


@pytest.mark.unit
class TestInterceptHandler:
    def test_forwards_records_to_loguru(self) -> None:
        messages: list[str] = []
        handler_id = logger.add(lambda m: messages.append(m.record["message"]))
        std_logger = logging.getLogger("tests.intercept")
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
        std_logger.setLevel(logging.INFO)

        try:
            std_logger.info("hello %s", "kafka")
        finally:
            logger.remove(handler_id)

        assert messages == ["hello kafka"]
