"""Live push channels keyed by session id.

Each browser tab opens one WebSocket with its session id; the coordinator
pushes challenge notifications through :meth:`ConnectionRegistry.send`.
A later registration for the same session replaces the earlier one, and
the replaced channel is left open until its own client closes it.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from shared.logging import get_logger

log = get_logger(__name__)


class PushChannel(Protocol):
    async def send_json(self, data: Any, mode: str = "text") -> None: ...


class ConnectionRegistry:
    def __init__(self) -> None:
        self._channels: dict[str, PushChannel] = {}

    def register(self, session_id: str, channel: PushChannel) -> Optional[PushChannel]:
        """Bind ``channel`` to ``session_id``; returns the channel it replaced."""
        previous = self._channels.get(session_id)
        self._channels[session_id] = channel
        if previous is not None and previous is not channel:
            log.info("push_channel_replaced", session_id=session_id)
            return previous
        return None

    def lookup(self, session_id: str) -> Optional[PushChannel]:
        return self._channels.get(session_id)

    def unregister(self, session_id: str, channel: PushChannel) -> bool:
        """Remove the entry only if it still belongs to ``channel``."""
        if self._channels.get(session_id) is not channel:
            return False
        del self._channels[session_id]
        return True

    async def send(self, session_id: str, message: dict[str, Any]) -> bool:
        """Push ``message`` to the session's channel.

        Returns False, without raising, when nothing is registered for the
        session or the channel fails mid-send.
        """
        channel = self._channels.get(session_id)
        if channel is None:
            return False
        try:
            await channel.send_json(message)
        except Exception as e:
            log.warning(
                "push_send_failed",
                session_id=session_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            # the peer is gone; drop the entry unless it was replaced meanwhile
            self.unregister(session_id, channel)
            return False
        return True

    def size(self) -> int:
        return len(self._channels)

    def __len__(self) -> int:
        return len(self._channels)
