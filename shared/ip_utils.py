"""
Client IP resolution for FastAPI requests and WebSocket connections.

Takes the connection explicitly so the function is testable without a
running server; the address is forwarded to hCaptcha as ``remoteip``.
"""

from __future__ import annotations

from starlette.requests import HTTPConnection

# Proxy headers in priority order
_FORWARDING_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)


def get_client_ip(connection: HTTPConnection) -> str:
    """Extract the real client IP from a ``Request`` or ``WebSocket``.

    Proxy headers are checked before falling back to the direct peer address.
    For ``X-Forwarded-For`` only the first (originating) address is used.

    Returns:
        The resolved client IP string, or ``""`` if none can be found.
    """
    for header in _FORWARDING_HEADERS:
        ip_value = connection.headers.get(header)
        if ip_value:
            client_ip = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return connection.client.host if connection.client else ""
