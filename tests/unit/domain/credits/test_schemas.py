"""Unit tests for the external representation of credits."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal

import pytest
import pytest_check

from src.domain.credits.models import Credit
from src.domain.credits.schemas import (
    CreditResponse,
    format_simplified_regime,
    parse_simplified_regime,
    to_response,
    to_response_list,
)


@pytest.mark.unit
class TestSimplifiedRegime:
    @pytest.mark.parametrize(
        ("value", "expected"), [(True, "Sim"), (False, "Não"), (None, "Não")]
    )
    def test_format(self, value: bool | None, expected: str) -> None:
        assert format_simplified_regime(value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("Sim", True), ("SIM", True), (" sim ", True), ("Não", False), ("", False), (None, False)],
    )
    def test_parse(self, value: str | None, expected: bool) -> None:
        assert parse_simplified_regime(value) is expected


@pytest.mark.unit
class TestToResponse:
    def test_reference_credit(self, make_credit: Callable[..., Credit]) -> None:
        # Arrange
        credit = make_credit()

        # Act
        payload = to_response(credit).model_dump(by_alias=True)

        # Assert
        assert payload == {
            "numeroCredito": "123456",
            "numeroNfse": "7891011",
            "dataConstituicao": date(2024, 2, 25),
            "valorIssqn": Decimal("1500.75"),
            "tipoCredito": "ISSQN",
            "simplesNacional": "Sim",
            "aliquota": Decimal("5.00"),
            "valorFaturado": Decimal("30000.00"),
            "valorDeducao": Decimal("5000.00"),
            "baseCalculo": Decimal("25000.00"),
        }

    def test_not_simplified(self, make_credit: Callable[..., Credit]) -> None:
        response = to_response(make_credit(simplified_regime=False))

        assert response.simplified_regime == "Não"

    def test_decimals_are_not_rounded(self, make_credit: Callable[..., Credit]) -> None:
        credit = make_credit(tax_amount=Decimal("1500.75"), tax_rate=Decimal("2.35"))

        response = to_response(credit)

        with pytest_check.check:
            assert response.tax_amount == Decimal("1500.75")
        with pytest_check.check:
            assert response.tax_rate == Decimal("2.35")
        with pytest_check.check:
            assert response.model_dump(mode="json")["tax_rate"] == "2.35"

    def test_monetary_schema_is_numeric(self) -> None:
        schema = CreditResponse.model_json_schema(mode="serialization", by_alias=True)

        assert schema["properties"]["valorIssqn"]["type"] == "number"

    def test_surrogate_fields_are_not_exposed(
        self, make_credit: Callable[..., Credit]
    ) -> None:
        payload = to_response(make_credit()).model_dump(by_alias=True)

        assert "id" not in payload
        assert "created_at" not in payload

    def test_list_keeps_order(self, make_credit: Callable[..., Credit]) -> None:
        credits = [make_credit(credit_number="2"), make_credit(credit_number="1")]

        responses = to_response_list(credits)

        assert [r.credit_number for r in responses] == ["2", "1"]
        assert to_response_list([]) == []

    def test_accepts_external_names(self) -> None:
        response = CreditResponse.model_validate(
            {
                "numeroCredito": "1",
                "numeroNfse": "2",
                "dataConstituicao": "2024-01-01",
                "valorIssqn": "10.00",
                "tipoCredito": "ISSQN",
                "simplesNacional": "Não",
                "aliquota": "2.00",
                "valorFaturado": "500.00",
                "valorDeducao": "0.00",
                "baseCalculo": "500.00",
            }
        )

        assert response.billed_amount == Decimal("500.00")
