"""Unit tests for client identification helpers."""

import pytest
from starlette.requests import Request

from src.api.utils.client import get_client_ip, get_user_agent


def _request(
    headers: dict[str, str] | None = None,
    client: tuple[str, int] | None = ("192.0.2.10", 50000),
) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/api/creditos",
            "headers": [
                (key.lower().encode(), value.encode())
                for key, value in (headers or {}).items()
            ],
            "client": client,
        }
    )


@pytest.mark.unit
class TestGetClientIp:
    def test_forwarded_for_first_entry(self) -> None:
        request = _request({"X-Forwarded-For": " 203.0.113.7 , 10.0.0.1"})

        assert get_client_ip(request) == "203.0.113.7"

    def test_real_ip(self) -> None:
        request = _request({"X-Real-IP": "198.51.100.4"})

        assert get_client_ip(request) == "198.51.100.4"

    def test_forwarded_for_wins_over_real_ip(self) -> None:
        request = _request(
            {"X-Forwarded-For": "203.0.113.7", "X-Real-IP": "198.51.100.4"}
        )

        assert get_client_ip(request) == "203.0.113.7"

    def test_peer_address(self) -> None:
        assert get_client_ip(_request()) == "192.0.2.10"

    def test_untrusted_proxy_headers(self) -> None:
        request = _request({"X-Forwarded-For": "203.0.113.7"})

        assert get_client_ip(request, trust_proxy_headers=False) == "192.0.2.10"

    def test_unknown_without_peer(self) -> None:
        assert get_client_ip(_request(client=None)) == "unknown"


@pytest.mark.unit
class TestGetUserAgent:
    def test_missing(self) -> None:
        assert get_user_agent(_request()) is None

    def test_truncated(self) -> None:
        agent = get_user_agent(_request({"User-Agent": "x" * 300}))

        assert agent == "x" * 200
