"""
In-memory challenge records.

Records live only as long as the process; nothing is persisted. Every
method runs to completion without awaiting, so callers on the event loop
see each mutation atomically and need no locks.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from errors import ChallengeAlreadySolvedError, ChallengeNotFoundError
from shared.generators import generate_challenge_id

Clock = Callable[[], float]


class ChallengeStatus(str, Enum):
    PENDING = "pending"
    SOLVED = "solved"


@dataclass
class ChallengeRecord:
    challenge_id: str
    session_id: str
    subject: Optional[str]
    amount: Any
    transaction_reference: Optional[str]
    created_at: float
    status: ChallengeStatus = ChallengeStatus.PENDING
    verified: bool = field(default=False)

    @property
    def is_pending(self) -> bool:
        return self.status is ChallengeStatus.PENDING

    def age(self, now: float) -> float:
        """Seconds elapsed since creation."""
        return now - self.created_at


class ChallengeStore:
    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._records: dict[str, ChallengeRecord] = {}

    def now(self) -> float:
        return self._clock()

    def create(
        self,
        session_id: str,
        subject: Optional[str] = None,
        amount: Any = None,
        transaction_reference: Optional[str] = None,
    ) -> str:
        challenge_id = generate_challenge_id()
        self._records[challenge_id] = ChallengeRecord(
            challenge_id=challenge_id,
            session_id=session_id,
            subject=subject,
            amount=amount,
            transaction_reference=transaction_reference,
            created_at=self._clock(),
        )
        return challenge_id

    def get(self, challenge_id: str) -> Optional[ChallengeRecord]:
        return self._records.get(challenge_id)

    def mark_solved(self, challenge_id: str, verified: bool) -> ChallengeRecord:
        """Move a pending record to solved.

        Raises:
            ChallengeNotFoundError: no record with that id.
            ChallengeAlreadySolvedError: the record was already solved.
        """
        record = self._records.get(challenge_id)
        if record is None:
            raise ChallengeNotFoundError(challenge_id)
        if not record.is_pending:
            raise ChallengeAlreadySolvedError(challenge_id)
        record.status = ChallengeStatus.SOLVED
        record.verified = bool(verified)
        return record

    def delete(self, challenge_id: str) -> bool:
        return self._records.pop(challenge_id, None) is not None

    def older_than(self, max_age: float) -> list[str]:
        """Ids of records whose age strictly exceeds ``max_age`` seconds."""
        now = self._clock()
        return [
            challenge_id
            for challenge_id, record in self._records.items()
            if record.age(now) > max_age
        ]

    def size(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, challenge_id: object) -> bool:
        return challenge_id in self._records
