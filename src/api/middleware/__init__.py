"""FastAPI middleware for cross-cutting request/response concerns.

- **RequestContextMiddleware**: Manages correlation IDs and request context
- **RequestLoggingMiddleware**: Structured logging with timing
- **AuditMiddleware**: Publishes one audit event per credit query
- **error_handler**: Centralized exception handling with a single envelope

Middleware execute in reverse order of registration; request context is
outermost so every log line and audit event carries the correlation ID.
"""
