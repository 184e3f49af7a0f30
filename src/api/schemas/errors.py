"""Error response envelope shared by every failing endpoint.

All errors, whatever their origin, are rendered as::

    {"timestamp": ..., "status": 404, "error": "Not Found",
     "message": "...", "path": "/api/creditos/999999"}

``validationErrors`` is added only for field-level validation failures.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ValidationErrorDetail(BaseModel):
    """One rejected request field."""

    model_config = ConfigDict(populate_by_name=True)

    field: str = Field(..., description="Name of the rejected field", examples=["limite"])
    rejected_value: Any = Field(
        default=None,
        alias="rejectedValue",
        description="Value received for the field",
        examples=["abc"],
    )
    message: str = Field(
        ...,
        description="Why the value was rejected",
        examples=["Input should be a valid integer, unable to parse string as an integer"],
    )


class ErrorResponse(BaseModel):
    """Standardized error response model for API errors."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "timestamp": "2024-02-25T10:15:30",
                    "status": 404,
                    "error": "Not Found",
                    "message": "Nenhum crédito encontrado para a NFS-e: 999999",
                    "path": "/api/creditos/999999",
                },
                {
                    "timestamp": "2024-02-25T10:15:31",
                    "status": 400,
                    "error": "Validation Failed",
                    "message": "Erro de validação nos dados fornecidos",
                    "path": "/api/creditos/recentes",
                    "validationErrors": [
                        {
                            "field": "limite",
                            "rejectedValue": "abc",
                            "message": "Input should be a valid integer",
                        }
                    ],
                },
            ]
        },
    )

    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="Local time the error was produced",
    )
    status: int = Field(..., description="HTTP status code", examples=[404])
    error: str = Field(..., description="HTTP reason phrase", examples=["Not Found"])
    message: str = Field(..., description="Human-readable error message")
    path: str = Field(
        ..., description="Request path", examples=["/api/creditos/999999"]
    )
    validation_errors: list[ValidationErrorDetail] | None = Field(
        default=None,
        alias="validationErrors",
        description="Field level details, only for validation failures",
    )

    def to_content(self) -> dict[str, Any]:
        """JSON-ready body, omitting ``validationErrors`` when there are none."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
