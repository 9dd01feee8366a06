"""Periodic eviction of stale challenges.

Expiry normally happens when the worker polls. The sweeper reclaims records
nobody polls for, e.g. when the worker died before its first wait call.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from config import SWEEP_INTERVAL_SECONDS, SWEEP_MAX_AGE_SECONDS
from services.challenge_store import ChallengeStore
from shared.logging import get_logger

log = get_logger(__name__)


class ChallengeSweeper:
    def __init__(
        self,
        store: ChallengeStore,
        interval: float = SWEEP_INTERVAL_SECONDS,
        max_age: float = SWEEP_MAX_AGE_SECONDS,
    ) -> None:
        self._store = store
        self._interval = interval
        self._max_age = max_age
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep(self) -> int:
        """Delete every record older than ``max_age``; returns how many."""
        removed = 0
        for challenge_id in self._store.older_than(self._max_age):
            if self._store.delete(challenge_id):
                removed += 1
        if removed:
            log.info("challenges_swept", removed=removed, remaining=self._store.size())
        return removed

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        log.info("sweeper_started", interval=self._interval, max_age=self._max_age)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        log.info("sweeper_stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep()
            except Exception as e:
                log.error("sweep_failed", error=str(e), error_type=type(e).__name__)
