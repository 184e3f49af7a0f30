"""Structured exception hierarchy for consistent error handling.

This module defines the exception system of the credit query service,
providing an error model that supports debugging, monitoring, and client
communication.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Picks the log level of a handled error
- **CreditosError**: Base exception with context and cause chaining
- **Specialized exceptions**: Invalid arguments and missing resources

The hierarchy enables specific handling where needed and generic handling
at the API boundary, where each class maps onto one HTTP status.
"""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for the credit query service."""

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    # Input errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    """A lookup parameter is blank or outside its accepted range."""

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""


class Severity(Enum):
    """Severity levels used to pick the log level of a handled error."""

    LOW = "LOW"
    """Expected errors caused by client input."""

    MEDIUM = "MEDIUM"
    """Errors that affect a single request but not the service."""


class CreditosError(Exception):
    """Base exception class for all application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message, returned to the client as is
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class InvalidArgumentError(CreditosError):
    """Raised when a lookup parameter is blank or out of range.

    Args:
        message: Description of the rejected argument
        error_code: Error code (defaults to INVALID_ARGUMENT)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.INVALID_ARGUMENT,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)

    @classmethod
    def blank(cls, parameter: str) -> "InvalidArgumentError":
        """Build the error raised for an empty or missing required parameter."""
        return cls(
            f"{parameter} não pode ser vazio ou nulo",
            context={"parameter": parameter},
        )


class NotFoundError(CreditosError):
    """Exception raised when a requested resource cannot be found.

    Args:
        message: Description of what resource was not found
        error_code: Error code (defaults to NOT_FOUND)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class CreditNotFoundError(NotFoundError):
    """No credit matches the requested credit number or NFS-e number."""

    @classmethod
    def for_credit_number(cls, credit_number: str) -> "CreditNotFoundError":
        return cls(
            f"Crédito não encontrado com o número: {credit_number}",
            context={"numero_credito": credit_number},
        )

    @classmethod
    def for_document_number(cls, document_number: str) -> "CreditNotFoundError":
        return cls(
            f"Nenhum crédito encontrado para a NFS-e: {document_number}",
            context={"numero_nfse": document_number},
        )
