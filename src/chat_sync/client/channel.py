"""WebSocket side of the client: the update channel and room control."""
from __future__ import annotations

import asyncio
import logging
from typing import Any
from uuid import UUID

import httpx
import pydantic
import websockets

from chat_sync.api.v1.schemas.chat import ChatUpdatePayload
from chat_sync.application.exceptions import ProtocolViolation
from chat_sync.client.ports import UpdateHandler
from chat_sync.infrastructure.ws.protocol import CHAT_UPDATE, ERROR, JOIN_CHAT, LEAVE_CHAT, WsInbound, WsOutbound

logger = logging.getLogger(__name__)


def update_url(base_url: str, username: str | None) -> str:
    """The update channel endpoint on the Mutation API host, as ``ws`` or ``wss``."""
    url = httpx.URL(base_url)
    scheme = "wss" if url.scheme == "https" else "ws"
    params = {"username": username} if username else {}
    return str(url.copy_with(scheme=scheme, path="/ws/chat", params=params))


def decode_update(data: dict[str, Any]) -> ChatUpdatePayload:
    """Parse a ``chatUpdate`` body. Unknown discriminants are fatal."""
    try:
        return ChatUpdatePayload.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ProtocolViolation(f"Invalid chat update: {data.get('type')!r}") from exc


def decode_envelope(raw: str | bytes) -> WsOutbound:
    try:
        return WsOutbound.model_validate_json(raw)
    except pydantic.ValidationError as exc:
        raise ProtocolViolation("Malformed server envelope") from exc


class WebSocketUpdateChannel:
    """Implements client.ports.UpdateChannel over a single WebSocket."""

    def __init__(self, base_url: str, username: str | None = None) -> None:
        self._base_url = base_url
        self.username = username
        self._ws: Any = None
        self._reader: asyncio.Task[None] | None = None
        self._handlers: list[UpdateHandler] = []

    async def connect(self) -> None:
        url = update_url(self._base_url, self.username)
        self._ws = await websockets.connect(url)
        self._reader = asyncio.create_task(self._read_loop(self._ws), name="chat-update-reader")
        logger.debug("Update channel connected to %s", url)

    async def close(self) -> None:
        """Close the socket. Re-raises whatever stopped the reader."""
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        if self._reader is not None:
            if not self._reader.done():
                self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None

    async def reconnect(self, username: str) -> None:
        """Reopen the socket under another identity. Room membership does not carry over."""
        connected = self._ws is not None
        await self.close()
        self.username = username
        if connected:
            await self.connect()

    def subscribe(self, handler: UpdateHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: UpdateHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    async def join(self, chat_id: UUID) -> None:
        await self._send(JOIN_CHAT, chat_id)

    async def leave(self, chat_id: UUID) -> None:
        await self._send(LEAVE_CHAT, chat_id)

    async def _send(self, kind: str, chat_id: UUID) -> None:
        if self._ws is None:
            raise RuntimeError("Update channel is not connected")
        await self._ws.send(WsInbound(type=kind, data={"chat_id": str(chat_id)}).model_dump_json())

    def dispatch(self, envelope: WsOutbound) -> None:
        if envelope.type == CHAT_UPDATE:
            update = decode_update(envelope.data)
            for handler in list(self._handlers):
                handler(update)
        elif envelope.type == ERROR:
            logger.warning("Server rejected a control message: %s", envelope.data)

    async def _read_loop(self, ws: Any) -> None:
        try:
            async for raw in ws:
                self.dispatch(decode_envelope(raw))
        except websockets.ConnectionClosed:
            logger.debug("Update channel closed")
        except ProtocolViolation:
            logger.exception("Update channel received an unknown update")
            raise
