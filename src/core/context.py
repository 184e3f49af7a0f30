"""Request-scoped identifiers shared by logging, tracing and the audit trail."""

import uuid
from contextvars import ContextVar

# Context variables for storing request identifiers across async boundaries
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


class RequestContext:
    """Manages request context using contextvars for async-safe storage.

    The correlation ID is set by the outermost middleware and the request ID
    by the logging middleware; both are read back when audit events are built
    so an event can be matched with the request logs.
    """

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        return _correlation_id_var.get()

    @staticmethod
    def set_request_id(request_id: str) -> None:
        _request_id_var.set(request_id)

    @staticmethod
    def get_request_id() -> str | None:
        return _request_id_var.get()

    @staticmethod
    def as_dict() -> dict[str, str]:
        """Return the identifiers that are currently set.

        Returns:
            dict[str, str]: Mapping with ``correlation_id`` and ``request_id``
                keys, omitting the ones that are not set.
        """
        values = {
            "correlation_id": _correlation_id_var.get(),
            "request_id": _request_id_var.get(),
        }
        return {key: value for key, value in values.items() if value}

    @staticmethod
    def clear() -> None:
        """Clear all context variables."""
        _correlation_id_var.set(None)
        _request_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID (a UUID4 string).

    Examples:
        >>> len(generate_correlation_id())
        36
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID in the format ``req-<uuid4>``.

    Examples:
        >>> generate_request_id().startswith("req-")
        True
    """
    return f"req-{uuid.uuid4()}"
