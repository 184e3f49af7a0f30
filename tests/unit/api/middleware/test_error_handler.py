"""Unit tests for the exception handlers."""

import orjson
import pytest
from pytest_mock import MockerFixture, MockType
from starlette.requests import Request

from src.api.middleware.error_handler import (
    INTERNAL_ERROR_MESSAGE,
    creditos_error_handler,
    generic_exception_handler,
)
from src.core.exceptions import (
    CreditNotFoundError,
    CreditosError,
    ErrorCode,
    InvalidArgumentError,
    Severity,
)


def _request(path: str = "/api/creditos/999999") -> Request:
    return Request({"type": "http", "method": "GET", "path": path, "headers": []})


@pytest.fixture
def log(mocker: MockerFixture) -> MockType:
    return mocker.patch("src.api.middleware.error_handler.logger")


@pytest.mark.unit
class TestCreditosErrorHandler:
    async def test_low_severity_logs_warning(self, log: MockType) -> None:
        # Act
        response = await creditos_error_handler(
            _request(), CreditNotFoundError.for_document_number("999999")
        )

        # Assert
        assert response.status_code == 404
        assert log.log.call_args.args[0] == "WARNING"
        log.error.assert_not_called()

    async def test_medium_severity_logs_error(self, log: MockType) -> None:
        error = InvalidArgumentError("Limite deve ser maior que zero")
        error.severity = Severity.MEDIUM

        response = await creditos_error_handler(_request(), error)

        assert response.status_code == 400
        assert log.log.call_args.args[0] == "ERROR"

    async def test_unmapped_subclass_is_internal(self, log: MockType) -> None:
        response = await creditos_error_handler(
            _request(), CreditosError(ErrorCode.INTERNAL_ERROR, "detalhe interno")
        )

        body = orjson.loads(response.body)
        assert response.status_code == 500
        assert body["message"] == INTERNAL_ERROR_MESSAGE
        log.error.assert_called_once()

    async def test_rejects_other_exceptions(self) -> None:
        with pytest.raises(TypeError):
            await creditos_error_handler(_request(), ValueError("x"))


@pytest.mark.unit
class TestGenericExceptionHandler:
    async def test_logs_internal_error_code(self, log: MockType) -> None:
        response = await generic_exception_handler(_request(), RuntimeError("boom"))

        assert response.status_code == 500
        assert log.exception.call_args.kwargs["error_code"] == "INTERNAL_ERROR"
        assert b"boom" not in response.body
