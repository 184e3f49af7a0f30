"""Cross-cutting building blocks shared by every layer of the service.

- **config**: Settings loaded from the environment with pydantic-settings
- **context**: Correlation and request identifiers kept in contextvars
- **exceptions**: Error hierarchy mapped onto HTTP statuses by the API layer
- **error_context**: Redaction of sensitive values before logging
- **logging**: Loguru setup with console and JSON output
- **observability**: OpenTelemetry tracing setup and helpers
"""
