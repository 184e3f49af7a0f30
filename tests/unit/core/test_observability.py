"""Unit tests for custom tracing spans."""

import pytest
from pytest_mock import MockerFixture, MockType

from src.core.context import RequestContext
from src.core.observability import trace_operation


@pytest.fixture
def span(mocker: MockerFixture) -> MockType:
    """Span yielded by a patched tracer."""
    current = mocker.MagicMock()
    tracer = mocker.MagicMock()
    tracer.start_as_current_span.return_value.__enter__.return_value = current
    tracer.start_as_current_span.return_value.__exit__.return_value = False
    mocker.patch("src.core.observability.trace.get_tracer", return_value=tracer)
    return current


@pytest.mark.unit
class TestTraceOperation:
    def test_sets_attributes_and_request_identifiers(self, span: MockType) -> None:
        # Arrange
        RequestContext.set_correlation_id("corr-1")
        RequestContext.set_request_id("req-1")

        # Act
        with trace_operation("credits.find_recent", limit=10) as active:
            assert active is span

        # Assert
        span.set_attribute.assert_any_call("limit", 10)
        span.set_attribute.assert_any_call("correlation_id", "corr-1")
        span.set_attribute.assert_any_call("request_id", "req-1")

    def test_without_request_context(self, span: MockType) -> None:
        with trace_operation("credits.list_all"):
            pass

        span.set_attribute.assert_not_called()
