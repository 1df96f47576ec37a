"""The shared update channel.

One socket per client. The server pushes ``chatUpdate`` envelopes; the
client only sends room control messages (``joinChat`` / ``leaveChat``) and
pings. ``username`` is optional and only narrows participant-scoped
updates.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any
from uuid import UUID

import pydantic
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from chat_sync.config import settings
from chat_sync.infrastructure.ws.manager import ConnectionManager
from chat_sync.infrastructure.ws.protocol import (
    ERROR,
    JOIN_CHAT,
    LEAVE_CHAT,
    PING,
    PONG,
    WsInbound,
    WsOutbound,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


async def _send(ws: WebSocket, kind: str, **data: Any) -> None:
    await ws.send_text(WsOutbound(type=kind, data=data).model_dump_json())


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    username: str | None = Query(None),
) -> None:
    connections: ConnectionManager = websocket.app.state.connections
    await websocket.accept()
    conn_id = connections.register(websocket, username)

    keepalive = asyncio.create_task(_keepalive(websocket), name=f"ws-keepalive-{conn_id}")
    try:
        while True:
            await _on_frame(websocket, await websocket.receive_text(), conn_id, connections)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", conn_id)
    finally:
        keepalive.cancel()
        connections.disconnect(conn_id)


async def _keepalive(ws: WebSocket) -> None:
    try:
        while True:
            await asyncio.sleep(settings.WS_HEARTBEAT_SECONDS)
            await _send(ws, PONG)
    except Exception:
        # the read loop notices the dead socket and cleans up
        logger.debug("WS keepalive stopped", exc_info=True)


async def _on_frame(ws: WebSocket, raw: str, conn_id: str, connections: ConnectionManager) -> None:
    try:
        msg = WsInbound.model_validate_json(raw)
    except pydantic.ValidationError:
        await _send(ws, ERROR, code="invalid_payload")
        return

    if msg.type == PING:
        await _send(ws, PONG)
        return
    if msg.type not in (JOIN_CHAT, LEAVE_CHAT):
        await _send(ws, ERROR, code="unknown_type", type=msg.type)
        return

    chat_id = _chat_id(msg.data)
    if chat_id is None:
        await _send(ws, ERROR, code="invalid_chat_id")
    elif msg.type == JOIN_CHAT:
        connections.join(conn_id, chat_id)
    else:
        connections.leave(conn_id, chat_id)


def _chat_id(data: dict[str, Any]) -> UUID | None:
    try:
        return UUID(str(data["chat_id"]))
    except (KeyError, ValueError):
        return None
