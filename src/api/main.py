"""FastAPI application initialization and configuration module.

This module serves as the main entry point for the credit query API.
It handles:
- Application lifecycle (database check, audit publisher start and stop)
- Middleware registration in the correct order
- Exception handler registration
- Credit routes and the health/info endpoints
- OpenTelemetry instrumentation

Middleware are executed in reverse order of registration, so the last one
added is the first to see a request.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse
from loguru import logger

from src.api.middleware.audit import AuditMiddleware
from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.routes import credits_router
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.core.observability import instrument_app, setup_tracing
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
)
from src.infrastructure.messaging import AuditPublisher


def get_audit_publisher(request: Request) -> AuditPublisher:
    publisher: AuditPublisher = request.app.state.audit_publisher
    return publisher


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.

    Raises:
        RuntimeError: If database connection fails during startup.
    """
    is_healthy, error_msg = await check_database_connection()

    if is_healthy:
        logger.info("Database connection successful")
    else:
        logger.error("Database connection failed during startup: {}", error_msg)
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)

    publisher: AuditPublisher = app_instance.state.audit_publisher
    await publisher.start()
    logger.info(publisher.status())

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown initiated")
    await publisher.stop()
    await close_database()
    logger.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    audit_publisher: AuditPublisher | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().
        audit_publisher: Publisher for the audit trail. Defaults to one built
            from ``settings.kafka_config``.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()
    if audit_publisher is None:
        audit_publisher = AuditPublisher(settings.kafka_config)

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="API REST para consulta de créditos constituídos de ISSQN",
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    application.state.audit_publisher = audit_publisher

    # Register exception handlers BEFORE middleware
    register_exception_handlers(application)

    # 3. Audit middleware (innermost, sees the final status of each query)
    application.add_middleware(
        AuditMiddleware,
        publisher=audit_publisher,
        prefix=settings.api_prefix,
        default_recent_limit=settings.credit_query_config.default_recent_limit,
    )

    # 2. Request logging middleware (logs requests/responses)
    application.add_middleware(
        RequestLoggingMiddleware,
        log_config=settings.log_config,
        trust_proxy_headers=settings.environment == "production",
    )

    # 1. Request context middleware (creates correlation ID)
    application.add_middleware(RequestContextMiddleware)

    application.include_router(credits_router, prefix=settings.api_prefix)

    @application.get("/health")
    async def health(
        publisher: Annotated[AuditPublisher, Depends(get_audit_publisher)],
    ) -> dict[str, object]:
        """Health check endpoint for container orchestration and load balancers.

        Returns:
            dict[str, object]: Status, database connectivity and audit
                publisher health.
        """
        health_status: dict[str, object] = {
            "status": "healthy",
            "database": False,
            "audit": publisher.is_healthy(),
        }

        is_healthy, error_msg = await check_database_connection()
        health_status["database"] = is_healthy

        if not is_healthy:
            # Report "degraded" rather than failing the probe
            logger.warning("Database health check failed: {}", error_msg)
            health_status["status"] = "degraded"

        return health_status

    @application.get("/info")
    async def info(
        app_settings: Annotated[Settings, Depends(get_settings)],
        publisher: Annotated[AuditPublisher, Depends(get_audit_publisher)],
    ) -> dict[str, Any]:
        """Get application information.

        Returns:
            dict[str, Any]: Name, version, environment and audit topic status.
        """
        return {
            "app_name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "debug": app_settings.debug,
            "audit": publisher.status(),
        }

    @application.get(f"{settings.api_prefix}/ping", response_class=PlainTextResponse)
    async def ping() -> str:
        """Connectivity check answering ``pong`` as plain text."""
        logger.debug("Ping requested")
        return "pong"

    # Instrument application for tracing (at the end)
    instrument_app(application, settings)

    return application


app = create_app()
