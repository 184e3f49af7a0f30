"""Unit tests for the error envelope."""

from datetime import datetime

import pytest

from src.api.schemas.errors import ErrorResponse, ValidationErrorDetail


@pytest.mark.unit
class TestErrorResponse:
    def test_omits_validation_errors_when_absent(self) -> None:
        content = ErrorResponse(
            timestamp=datetime(2024, 2, 25, 10, 15, 30),
            status=404,
            error="Not Found",
            message="Nenhum crédito encontrado para a NFS-e: 999999",
            path="/api/creditos/999999",
        ).to_content()

        assert content == {
            "timestamp": "2024-02-25T10:15:30",
            "status": 404,
            "error": "Not Found",
            "message": "Nenhum crédito encontrado para a NFS-e: 999999",
            "path": "/api/creditos/999999",
        }

    def test_validation_errors_use_external_names(self) -> None:
        content = ErrorResponse(
            status=400,
            error="Validation Failed",
            message="Erro de validação nos dados fornecidos",
            path="/api/creditos/recentes",
            validation_errors=[
                ValidationErrorDetail(
                    field="limite", rejected_value="abc", message="invalid"
                )
            ],
        ).to_content()

        assert content["validationErrors"] == [
            {"field": "limite", "rejectedValue": "abc", "message": "invalid"}
        ]

    def test_timestamp_defaults_to_now(self) -> None:
        before = datetime.now()

        response = ErrorResponse(status=500, error="e", message="m", path="/")

        assert response.timestamp >= before
