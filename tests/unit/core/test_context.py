"""Unit tests for the request context."""

import asyncio
import uuid

import pytest

from src.core.context import (
    RequestContext,
    generate_correlation_id,
    generate_request_id,
)


@pytest.mark.unit
class TestRequestContext:
    def test_values_are_unset_by_default(self) -> None:
        assert RequestContext.get_correlation_id() is None
        assert RequestContext.get_request_id() is None
        assert RequestContext.as_dict() == {}

    def test_as_dict_only_contains_set_values(self) -> None:
        RequestContext.set_correlation_id("corr-1")

        assert RequestContext.as_dict() == {"correlation_id": "corr-1"}

        RequestContext.set_request_id("req-1")

        assert RequestContext.as_dict() == {
            "correlation_id": "corr-1",
            "request_id": "req-1",
        }

    def test_clear(self) -> None:
        RequestContext.set_correlation_id("corr-1")
        RequestContext.set_request_id("req-1")

        RequestContext.clear()

        assert RequestContext.as_dict() == {}

    async def test_tasks_do_not_share_values(self) -> None:
        """Each task sees its own correlation ID."""

        async def handle(correlation_id: str) -> str | None:
            RequestContext.set_correlation_id(correlation_id)
            await asyncio.sleep(0)
            return RequestContext.get_correlation_id()

        results = await asyncio.gather(handle("a"), handle("b"), handle("c"))

        assert results == ["a", "b", "c"]
        assert RequestContext.get_correlation_id() is None


@pytest.mark.unit
class TestIdGenerators:
    def test_correlation_id_is_uuid4(self) -> None:
        assert uuid.UUID(generate_correlation_id()).version == 4

    def test_request_id_format(self) -> None:
        request_id = generate_request_id()

        assert request_id.startswith("req-")
        assert uuid.UUID(request_id.removeprefix("req-")).version == 4
        assert generate_request_id() != request_id
