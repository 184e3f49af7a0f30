"""Root conftest.py for the credit query API test suite.

This file contains project-wide fixtures and pytest configuration.
"""

from collections.abc import Callable
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

import pytest

from src.domain.credits.models import Credit


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture
def make_credit() -> Callable[..., Credit]:
    """Build transient ``Credit`` instances.

    Defaults describe credit 123456 of NFS-e 7891011; any attribute can be
    overridden by keyword.
    """
    sequence = iter(range(1, 10_000))

    def _make(**overrides: Any) -> Credit:  # noqa: ANN401 - column values
        values: dict[str, Any] = {
            "id": next(sequence),
            "credit_number": "123456",
            "document_number": "7891011",
            "constitution_date": date(2024, 2, 25),
            "tax_amount": Decimal("1500.75"),
            "credit_type": "ISSQN",
            "simplified_regime": True,
            "tax_rate": Decimal("5.00"),
            "billed_amount": Decimal("30000.00"),
            "deduction_amount": Decimal("5000.00"),
            "tax_base": Decimal("25000.00"),
            "created_at": datetime(2024, 2, 25, 12, 0, tzinfo=UTC),
            "updated_at": datetime(2024, 2, 25, 12, 0, tzinfo=UTC),
        }
        values.update(overrides)
        return Credit(**values)

    return _make
