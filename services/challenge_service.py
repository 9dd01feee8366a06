"""
Challenge coordination: creation, human submission and worker long-polling.

Lifecycle of one challenge::

    pending --submit--> solved --first poll--> delivered (deleted)
       |                   |
       +---- older than the record TTL ----> expired (deleted)

A poll that runs out of its own timeout reports ``pending`` and leaves the
record alone, so the worker can simply poll again. Only the first poll that
sees ``solved`` or expiry gets that answer; the record is gone afterwards.
"""

from __future__ import annotations

import asyncio
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from config import (
    CHALLENGE_TTL_SECONDS,
    DEFAULT_WAIT_TIMEOUT_SECONDS,
    MAX_WAIT_TIMEOUT_SECONDS,
    POLL_INTERVAL_SECONDS,
)
from errors import (
    ChallengeAlreadySolvedError,
    ChallengeNotFoundError,
    MissingSessionIdError,
)
from infrastructure.captcha.protocol import CaptchaVerifier
from infrastructure.push.registry import ConnectionRegistry
from schemas.dto.responses.captcha import ChallengePushMessage
from services.challenge_store import ChallengeStore
from shared.amounts import yocto_to_display
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)

CAPTCHA_TYPE = "hcaptcha"
UNKNOWN_TRANSACTION = "unknown"


class ResultStatus(str, Enum):
    SOLVED = "solved"
    TIMEOUT = "timeout"
    PENDING = "pending"


@dataclass(frozen=True)
class ChallengeResult:
    status: ResultStatus
    verified: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "verified": self.verified}


class ChallengeCoordinator:
    """Owns the challenge protocol on top of the store, registry and verifier."""

    def __init__(
        self,
        store: ChallengeStore,
        registry: ConnectionRegistry,
        verifier: CaptchaVerifier,
        site_key: str,
        *,
        challenge_ttl: float = CHALLENGE_TTL_SECONDS,
        default_wait_timeout: float = DEFAULT_WAIT_TIMEOUT_SECONDS,
        max_wait_timeout: float = MAX_WAIT_TIMEOUT_SECONDS,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self._store = store
        self._registry = registry
        self._verifier = verifier
        self._site_key = site_key
        self._challenge_ttl = challenge_ttl
        self._default_wait_timeout = default_wait_timeout
        self._max_wait_timeout = max_wait_timeout
        self._poll_interval = poll_interval

    @property
    def store(self) -> ChallengeStore:
        return self._store

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    async def create_challenge(
        self,
        session_id: Optional[str],
        subject: Optional[str] = None,
        amount: Any = None,
        transaction_reference: Optional[str] = None,
    ) -> str:
        """Create a pending challenge and push it to the session's browser.

        The challenge id is returned even if no browser is connected; the
        worker then sees a timeout instead.
        """
        if not session_id:
            raise MissingSessionIdError()

        challenge_id = self._store.create(
            session_id, subject, amount, transaction_reference
        )
        log.info(
            "challenge_created",
            challenge_id=challenge_id,
            session_id=session_id,
            buyer=subject,
            amount=amount,
            transaction_hash=transaction_reference or UNKNOWN_TRANSACTION,
        )

        message = ChallengePushMessage(
            challenge_id=challenge_id,
            buyer=subject,
            amount=yocto_to_display(amount),
            amount_yocto=amount,
            transaction_hash=transaction_reference or UNKNOWN_TRANSACTION,
            captcha_type=CAPTCHA_TYPE,
            site_key=self._site_key,
        )
        if await self._registry.send(session_id, message.model_dump()):
            log.info(
                "challenge_pushed",
                challenge_id=challenge_id,
                session_id=session_id,
                display_amount=message.amount,
            )
        else:
            log.warning(
                "push_not_delivered", challenge_id=challenge_id, session_id=session_id
            )
        return challenge_id

    async def submit_solution(
        self, challenge_id: str, proof_token: Optional[str], remote_ip: Optional[str] = None
    ) -> bool:
        """Verify a human's hCaptcha token and settle the challenge.

        Raises:
            ChallengeNotFoundError: unknown or already removed challenge.
            ChallengeAlreadySolvedError: the challenge was settled before,
                including by a concurrent submission that finished first.
        """
        record = self._store.get(challenge_id)
        if record is None:
            raise ChallengeNotFoundError(challenge_id)
        if not record.is_pending:
            raise ChallengeAlreadySolvedError(challenge_id)

        try:
            verified = bool(await self._verifier.verify(proof_token or "", remote_ip))
        except Exception as e:
            log.error(
                "verification_transport_failure",
                challenge_id=challenge_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            verified = False

        # status is re-checked here, after the await, by mark_solved
        self._store.mark_solved(challenge_id, verified)
        log.info(
            "challenge_solved",
            challenge_id=challenge_id,
            verified=verified,
            ip_hash=hash_ip(remote_ip),
        )
        return verified

    def clamp_timeout(self, timeout_seconds: Optional[float]) -> float:
        """Missing, non-finite or non-positive timeouts use the default; cap at max."""
        if (
            timeout_seconds is None
            or not math.isfinite(timeout_seconds)
            or timeout_seconds <= 0
        ):
            timeout_seconds = self._default_wait_timeout
        return min(float(timeout_seconds), self._max_wait_timeout)

    async def wait_for_result(
        self,
        challenge_id: str,
        timeout_seconds: Optional[float] = None,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> ChallengeResult:
        """Long-poll until the challenge is solved, expires, or the wait runs out.

        ``is_disconnected`` is checked before every evaluation. Once it reports
        the caller gone, the poll ends with ``pending`` and leaves the record
        alone, so a solved result is kept for the caller's next poll.

        Raises:
            ChallengeNotFoundError: the challenge does not exist at call time.
        """
        if self._store.get(challenge_id) is None:
            raise ChallengeNotFoundError(challenge_id)

        timeout = self.clamp_timeout(timeout_seconds)
        deadline = time.monotonic() + timeout
        while True:
            if is_disconnected is not None and await is_disconnected():
                log.info("poller_disconnected", challenge_id=challenge_id)
                return ChallengeResult(ResultStatus.PENDING, False)

            result = self._settle(challenge_id)
            if result is not None:
                return result
            if time.monotonic() >= deadline:
                return ChallengeResult(ResultStatus.PENDING, False)
            await asyncio.sleep(self._poll_interval)

    def check_result(self, challenge_id: str) -> ChallengeResult:
        """Single non-blocking evaluation, same rules as :meth:`wait_for_result`."""
        if self._store.get(challenge_id) is None:
            raise ChallengeNotFoundError(challenge_id)
        result = self._settle(challenge_id)
        if result is None:
            return ChallengeResult(ResultStatus.PENDING, False)
        return result

    def _settle(self, challenge_id: str) -> Optional[ChallengeResult]:
        """Terminal result for the challenge, or None while it is still pending."""
        record = self._store.get(challenge_id)
        if record is None:
            # swept, or handed to a concurrent poller, since the last check
            return ChallengeResult(ResultStatus.TIMEOUT, False)

        if not record.is_pending:
            self._store.delete(challenge_id)
            log.info(
                "challenge_result_delivered",
                challenge_id=challenge_id,
                verified=record.verified,
            )
            return ChallengeResult(ResultStatus.SOLVED, record.verified)

        if record.age(self._store.now()) > self._challenge_ttl:
            self._store.delete(challenge_id)
            log.info("challenge_expired", challenge_id=challenge_id)
            return ChallengeResult(ResultStatus.TIMEOUT, False)

        return None

    def stats(self) -> dict[str, int]:
        return {
            "active_challenges": self._store.size(),
            "active_connections": self._registry.size(),
        }
