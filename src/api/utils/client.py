"""Client identification helpers shared by request logging and auditing."""

from starlette.requests import Request

from src.api.constants import (
    FORWARDED_FOR_HEADER,
    MAX_USER_AGENT_LENGTH,
    REAL_IP_HEADER,
    UNKNOWN_CLIENT,
)


def get_client_ip(request: Request, *, trust_proxy_headers: bool = True) -> str:
    """Extract the real client IP considering proxy headers.

    Precedence: first entry of ``X-Forwarded-For``, then ``X-Real-IP``, then
    the transport peer address.

    Args:
        request: The incoming request.
        trust_proxy_headers: Whether proxy headers may be used at all.

    Returns:
        str: The client IP address, or ``"unknown"`` without a peer.
    """
    if trust_proxy_headers:
        forwarded_for = request.headers.get(FORWARDED_FOR_HEADER)
        if forwarded_for:
            # Take the first IP (original client)
            first = forwarded_for.split(",")[0].strip()
            if first:
                return first

        real_ip = request.headers.get(REAL_IP_HEADER)
        if real_ip and real_ip.strip():
            return real_ip.strip()

    if request.client:
        return request.client.host
    return UNKNOWN_CLIENT


def get_user_agent(request: Request) -> str | None:
    """The ``User-Agent`` header, truncated; None when absent."""
    user_agent = request.headers.get("user-agent")
    if not user_agent:
        return None
    return user_agent[:MAX_USER_AGENT_LENGTH]
