"""Shared async HTTP client for outbound calls to the verification authority."""

from typing import Any, Optional

import httpx

DEFAULT_USER_AGENT = "captcha-relay/1.0"


class HttpClient:
    """Thin async wrapper around httpx.AsyncClient with a configurable timeout.

    One instance per external service keeps timeouts independently configurable.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        merged = {"User-Agent": DEFAULT_USER_AGENT}
        if headers:
            merged.update(headers)
        self._client = httpx.AsyncClient(timeout=timeout, headers=merged)

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def post_form(self, url: str, data: dict[str, str], **kwargs: Any) -> httpx.Response:
        """POST ``data`` as application/x-www-form-urlencoded."""
        return await self._client.post(url, data=data, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
