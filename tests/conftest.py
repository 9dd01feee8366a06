"""
Shared fixtures: a controllable clock, a stub hCaptcha verifier and a fake
push channel, plus the core objects wired together around them.
"""

import asyncio
from typing import Optional

import pytest

from infrastructure.push.registry import ConnectionRegistry
from services.challenge_service import ChallengeCoordinator
from services.challenge_store import ChallengeStore

TEST_SITE_KEY = "site-key-for-tests"


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubVerifier:
    """Records calls; returns ``result`` or raises ``error``."""

    def __init__(self, result: bool = True, error: Optional[Exception] = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[tuple[str, Optional[str]]] = []

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> bool:
        self.calls.append((token, remote_ip))
        # yield once, like a real network call would
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.result


class FakeChannel:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[dict] = []

    async def send_json(self, data, mode: str = "text") -> None:
        if self.fail:
            raise RuntimeError("WebSocket is not connected")
        self.sent.append(data)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def verifier():
    return StubVerifier()


@pytest.fixture
def make_channel():
    return FakeChannel


@pytest.fixture
def store(clock):
    return ChallengeStore(clock=clock)


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def coordinator(store, registry, verifier):
    return ChallengeCoordinator(
        store, registry, verifier, site_key=TEST_SITE_KEY, poll_interval=0.01
    )
