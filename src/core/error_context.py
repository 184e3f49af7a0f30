"""Redaction of sensitive values before they reach the logs.

Error handlers and the slow query listener log context dictionaries built
from request data and SQL parameters. Keys that look sensitive, either by
matching a built-in pattern or one of ``log_config.sensitive_fields``, have
their values replaced by ``[REDACTED]``. The original objects are never
modified; only the logged copies are.
"""

from __future__ import annotations

import re
from functools import lru_cache
from re import Pattern
from typing import Any, Final

from src.core.config import get_settings
from src.core.constants import REDACTED

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|authorization|"
    r"credential|private[_-]?key|session|cookie)",
    re.IGNORECASE,
)

# Maximum depth for nested structure sanitization
MAX_DEPTH: Final[int] = 10


@lru_cache(maxsize=1)
def _get_sensitive_fields() -> tuple[str, ...]:
    return tuple(field.lower() for field in get_settings().log_config.sensitive_fields)


def is_sensitive_field(field_name: str) -> bool:
    """Check a field name against the default pattern and configured fields."""
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True
    field_lower = field_name.lower()
    return any(field in field_lower for field in _get_sensitive_fields())


def sanitize_value(value: Any, field_name: str = "", depth: int = 0) -> Any:  # noqa: ANN401 - any loggable value
    """Redact a value when its field name is sensitive, recursing into containers.

    Args:
        value: The value to potentially sanitize.
        field_name: The key the value was stored under.
        depth: Current recursion depth, capped at MAX_DEPTH.

    Returns:
        Any: The sanitized copy, or the value itself when nothing was redacted.
    """
    if depth > MAX_DEPTH:
        return REDACTED
    if field_name and is_sensitive_field(field_name):
        return REDACTED
    if isinstance(value, dict):
        return {k: sanitize_value(v, str(k), depth + 1) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return type(value)(sanitize_value(item, "", depth + 1) for item in value)
    return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    return {key: sanitize_value(value, key) for key, value in data.items()}


def sanitize_error_context(
    error: Exception, context: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Build a log-safe context dictionary for a handled exception.

    Args:
        error: The exception being handled.
        context: Request details to include (sanitized before use).

    Returns:
        dict[str, Any]: ``error_type``, ``error_message`` and the sanitized
            context, plus the exception's own ``context`` attribute when the
            error carries one.
    """
    error_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if context:
        error_context.update(sanitize_dict(context))

    extra = getattr(error, "context", None)
    if isinstance(extra, dict) and extra:
        error_context["error_attributes"] = sanitize_dict(extra)

    return error_context


def sanitize_sql_params(params: object) -> object:
    """Sanitize SQL query parameters for safe logging.

    Named parameters are sanitized by key, positional ones are returned
    unchanged and anything else is redacted.
    """
    if params is None:
        return None
    if isinstance(params, dict):
        return sanitize_dict(params)
    if isinstance(params, list | tuple):
        return params
    return REDACTED
