"""Audit trail middleware for the credit query endpoints.

Every request under ``{api_prefix}/creditos`` produces exactly one audit
event once the response is known. The request is classified from its URL
shape before the handler runs, and an ``AuditContext`` is exposed to the
handler chain so route handlers and exception handlers can report the
number of results and the client-facing error message.

Publishing is fire-and-forget: the publisher only enqueues, so the response
is returned without waiting for the broker. An audit event that cannot be
built or queued is logged and never changes the response.
"""

import re
import time
from collections.abc import Awaitable, Callable, Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.api.constants import CREDITS_PATH
from src.api.utils.client import get_client_ip, get_user_agent
from src.core.constants import MILLISECONDS_PER_SECOND
from src.infrastructure.messaging import AuditPublisher, QueryKind

HTTP_ERROR_STATUS = 400
DEFAULT_PARAMETER = "N/A"
RECENT_LIMIT_PARAM = "limite"
DEFAULT_RECENT_LIMIT = 10

# Paths relative to the credits collection; matched in full.
_PATTERNS: tuple[tuple[re.Pattern[str], QueryKind], ...] = (
    (re.compile(r"/(\d+)"), QueryKind.BY_DOCUMENT_NUMBER),
    (re.compile(r"/credito/([^/]+)"), QueryKind.BY_CREDIT_NUMBER),
    (re.compile(r"/tipo/([^/]+)"), QueryKind.BY_TYPE),
    (re.compile(r"/credito/([^/]+)/existe"), QueryKind.EXISTS),
)


@dataclass
class AuditContext:
    """Per-request audit state shared between the middleware and handlers."""

    query_kind: QueryKind
    parameter: str
    start_time: float = field(default_factory=time.perf_counter)
    result_count: int | None = None
    error_message: str | None = None

    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self.start_time) * MILLISECONDS_PER_SECOND)


_audit_context_var: ContextVar[AuditContext | None] = ContextVar(
    "audit_context", default=None
)


def get_audit_context() -> AuditContext | None:
    return _audit_context_var.get()


def record_result_count(count: int) -> None:
    """Attach the number of returned records to the current audited request."""
    if context := _audit_context_var.get():
        context.result_count = count


def record_error(message: str) -> None:
    """Attach the client-facing error message to the current audited request."""
    if context := _audit_context_var.get():
        context.error_message = message


def classify_request(
    path: str,
    query_params: Mapping[str, str],
    prefix: str = "",
    default_limit: int = DEFAULT_RECENT_LIMIT,
) -> tuple[QueryKind, str]:
    """Derive the query kind and its parameter from the request URL.

    Args:
        path: Request path, including ``prefix``.
        query_params: Query string parameters.
        prefix: Mount prefix of the API (for example ``"/api"``).
        default_limit: Limit reported for recent queries without ``limite``.

    Returns:
        tuple[QueryKind, str]: The kind of query and the looked-up value,
            ``"limite=N"`` for recent queries or ``"N/A"`` when the path
            carries no parameter.

    Examples:
        >>> classify_request("/api/creditos/7891011", {}, "/api")
        (<QueryKind.BY_DOCUMENT_NUMBER: 'CONSULTA_POR_NFSE'>, '7891011')
        >>> classify_request("/api/creditos/recentes", {}, "/api")
        (<QueryKind.RECENT: 'CONSULTA_RECENTES'>, 'limite=10')
    """
    relative = path.removeprefix(f"{prefix}{CREDITS_PATH}")

    if relative == "/recentes":
        limit = query_params.get(RECENT_LIMIT_PARAM)
        if limit is None:
            return QueryKind.RECENT, f"{RECENT_LIMIT_PARAM}={default_limit}"
        return QueryKind.RECENT, f"{RECENT_LIMIT_PARAM}={limit}"

    for pattern, query_kind in _PATTERNS:
        if match := pattern.fullmatch(relative):
            return query_kind, match.group(1)

    return QueryKind.LIST_ALL, DEFAULT_PARAMETER


class AuditMiddleware(BaseHTTPMiddleware):
    """Publish one audit event per credit query.

    Args:
        app: The ASGI application.
        publisher: Destination of the audit events.
        prefix: Mount prefix of the API routes.
        default_recent_limit: Limit applied by /recentes when none is given.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        publisher: AuditPublisher,
        prefix: str,
        default_recent_limit: int = DEFAULT_RECENT_LIMIT,
    ) -> None:
        super().__init__(app)
        self.publisher = publisher
        self.prefix = prefix
        self.base_path = f"{prefix}{CREDITS_PATH}"
        self.default_recent_limit = default_recent_limit

    def _is_audited(self, path: str) -> bool:
        return path == self.base_path or path.startswith(f"{self.base_path}/")

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Run the request and publish its audit event.

        Raises:
            Exception: Anything raised downstream is re-raised after the
                failure event has been published.
        """
        path = request.url.path
        if not self._is_audited(path):
            return await call_next(request)

        query_kind, parameter = classify_request(
            path, request.query_params, self.prefix, self.default_recent_limit
        )
        context = AuditContext(query_kind=query_kind, parameter=parameter)
        token = _audit_context_var.set(context)
        logger.debug(
            "Auditing query {} - parameter: {}", query_kind.value, parameter
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            self._publish_failure(request, context, str(exc) or type(exc).__name__)
            raise
        else:
            if response.status_code >= HTTP_ERROR_STATUS:
                message = context.error_message or f"HTTP {response.status_code}"
                self._publish_failure(request, context, message)
            else:
                self._publish_success(request, context)
            return response
        finally:
            _audit_context_var.reset(token)

    def _publish_success(self, request: Request, context: AuditContext) -> None:
        try:
            self.publisher.publish_success(
                context.query_kind,
                context.parameter,
                context.result_count,
                context.elapsed_ms(),
                get_client_ip(request),
                get_user_agent(request),
            )
        except Exception:
            logger.exception(
                "Failed to publish audit event for {}", context.query_kind.value
            )

    def _publish_failure(
        self, request: Request, context: AuditContext, message: str
    ) -> None:
        try:
            self.publisher.publish_failure(
                context.query_kind,
                context.parameter,
                message,
                context.elapsed_ms(),
                get_client_ip(request),
                get_user_agent(request),
            )
        except Exception:
            logger.exception(
                "Failed to publish audit event for {}", context.query_kind.value
            )
