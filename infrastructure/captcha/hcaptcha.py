"""hCaptcha implementation of CaptchaVerifier.

Fail-closed: any transport error, non-200 status, malformed body or a
``success`` value other than ``True`` is reported as a failed verification.
There are no retries.
"""

from typing import Optional

from config import HCAPTCHA_VERIFY_URL
from infrastructure.http_client import HttpClient
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)


class HCaptchaVerifier:
    def __init__(
        self,
        secret: str,
        http_client: HttpClient,
        verify_url: str = HCAPTCHA_VERIFY_URL,
    ) -> None:
        self._secret = secret
        self._http = http_client
        self._verify_url = verify_url

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> bool:
        if not self._secret:
            log.warning("hcaptcha_secret_not_configured")
            return False
        if not token:
            log.warning("hcaptcha_token_missing")
            return False
        try:
            response = await self._http.post_form(
                self._verify_url,
                data={
                    "secret": self._secret,
                    "response": token,
                    "remoteip": remote_ip or "",
                },
            )
            if response.status_code != 200:
                log.error(
                    "hcaptcha_api_error",
                    status_code=response.status_code,
                    response_text=response.text[:200],
                )
                return False
            data = response.json()
        except Exception as e:
            log.error(
                "hcaptcha_request_failed", error=str(e), error_type=type(e).__name__
            )
            return False

        success = isinstance(data, dict) and data.get("success") is True
        if not success:
            log.warning(
                "hcaptcha_verification_failed",
                error_codes=data.get("error-codes", []) if isinstance(data, dict) else [],
                ip_hash=hash_ip(remote_ip),
            )
        return success
