"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from chat_sync.api.v1.schemas.chat import ChatUpdatePayload
from chat_sync.application.dto.events import UpdateRoute
from chat_sync.domain.value_objects.enums import DeliveryScope
from chat_sync.infrastructure.ws.protocol import CHAT_UPDATE, WsOutbound
from chat_sync.infrastructure.ws.rooms import RoomManager

logger = logging.getLogger(__name__)


class Connection(Protocol):
    async def send_text(self, data: str) -> None: ...


@dataclass(slots=True)
class _Client:
    ws: Connection
    username: str | None


class ConnectionManager:
    """Tracks live connections and fans chat updates out to them."""

    def __init__(self, rooms: RoomManager | None = None) -> None:
        self._connections: dict[str, _Client] = {}
        self.rooms = rooms or RoomManager()

    def register(self, ws: Connection, username: str | None = None) -> str:
        conn_id = uuid.uuid4().hex
        self._connections[conn_id] = _Client(ws=ws, username=username)
        logger.debug("WS connected: %s as %s (total=%d)", conn_id, username, len(self._connections))
        return conn_id

    def disconnect(self, conn_id: str) -> None:
        if self._connections.pop(conn_id, None) is None:
            return
        left = self.rooms.drop(conn_id)
        logger.debug("WS disconnected: %s (left %d rooms)", conn_id, len(left))

    def join(self, conn_id: str, chat_id: UUID) -> None:
        if conn_id in self._connections:
            self.rooms.join(conn_id, chat_id)

    def leave(self, conn_id: str, chat_id: UUID) -> None:
        self.rooms.leave(conn_id, chat_id)

    def __len__(self) -> int:
        return len(self._connections)

    def _targets(self, route: UpdateRoute) -> list[str]:
        if route.scope == DeliveryScope.ROOM:
            if route.room is None:
                return []
            return [c for c in self.rooms.members(route.room) if c in self._connections]
        return [
            conn_id
            for conn_id, client in self._connections.items()
            if route.audience is None or client.username in route.audience
        ]

    async def dispatch(self, route: UpdateRoute, payload: ChatUpdatePayload) -> int:
        """Send an update to every connection the route selects.

        Targets are resolved before the first send, so membership changes
        during delivery do not affect this update. Returns the number of
        connections that received it.
        """
        raw = WsOutbound(type=CHAT_UPDATE, data=payload.model_dump(mode="json")).model_dump_json()
        delivered = 0
        dead: list[str] = []
        for conn_id in self._targets(route):
            client = self._connections.get(conn_id)
            if client is None:
                continue
            try:
                await client.ws.send_text(raw)
                delivered += 1
            except Exception:
                logger.debug("Dropping dead connection %s", conn_id, exc_info=True)
                dead.append(conn_id)
        for conn_id in dead:
            self.disconnect(conn_id)
        return delivered
