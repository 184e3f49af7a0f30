"""JSON response class backed by orjson.

Set as the application's default response class so credit payloads, error
envelopes and the health endpoint share one serializer with stable key
ordering.

Models handed to the response directly are dumped in python mode, which keeps
``Decimal`` values intact; they are then written as JSON numbers with the
scale they were stored with (``1500.70`` stays ``1500.70``).
"""

from decimal import Decimal
from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def _decimal_literal(value: Decimal) -> orjson.Fragment:
    if not value.is_finite():
        raise TypeError(f"Decimal value has no JSON representation: {value}")
    return orjson.Fragment(format(value, "f"))


def _default(value: Any) -> Any:  # noqa: ANN401 - orjson fallback hook
    """Serialize types orjson does not handle natively.

    Raises:
        TypeError: If ``value`` has no JSON representation.
    """
    if isinstance(value, Decimal):
        return _decimal_literal(value)
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson for JSON serialization.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes, keys sorted.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump(by_alias=True)

        return orjson.dumps(content, default=_default, option=orjson.OPT_SORT_KEYS)
