"""CaptchaVerifier protocol: the coordinator depends on this, not the concrete client."""

from typing import Optional, Protocol


class CaptchaVerifier(Protocol):
    async def verify(self, token: str, remote_ip: Optional[str] = None) -> bool: ...
