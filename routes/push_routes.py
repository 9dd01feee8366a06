"""
Browser push channel.

WS /ws?session_id=<id> — one live connection per session. The server only
sends (``captcha_challenge`` frames); anything the client sends is read and
discarded so disconnects are noticed promptly.
"""

from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from infrastructure.push.registry import ConnectionRegistry
from shared.ip_utils import get_client_ip
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)

router = APIRouter(tags=["push"])


@router.websocket("/ws")
async def push_channel(websocket: WebSocket) -> None:
    session_id = websocket.query_params.get("session_id")
    if not session_id:
        await websocket.close(
            code=status.WS_1008_POLICY_VIOLATION, reason="Session ID required"
        )
        return

    settings = websocket.app.state.settings
    origin = websocket.headers.get("origin")
    if not settings.origin_allowed(origin):
        log.warning("push_origin_rejected", origin=origin, session_id=session_id)
        await websocket.close(
            code=status.WS_1008_POLICY_VIOLATION, reason="Origin not allowed"
        )
        return

    registry: ConnectionRegistry = websocket.app.state.registry
    await websocket.accept()
    registry.register(session_id, websocket)
    log.info(
        "push_connected",
        session_id=session_id,
        ip_hash=hash_ip(get_client_ip(websocket)),
    )

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect as e:
        log.info("push_disconnected", session_id=session_id, code=e.code)
    finally:
        registry.unregister(session_id, websocket)
