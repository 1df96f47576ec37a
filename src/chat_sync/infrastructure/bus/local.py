"""Single-process update publisher: straight to the local connections."""
from __future__ import annotations

from chat_sync.api.v1.schemas.chat import ChatUpdatePayload
from chat_sync.application.dto.events import UpdateRoute
from chat_sync.domain.events.chat_update import ChatUpdate
from chat_sync.infrastructure.ws.manager import ConnectionManager


class LocalUpdatePublisher:
    """Implements application.ports.bus.UpdatePublisher."""

    def __init__(self, connections: ConnectionManager) -> None:
        self._connections = connections

    async def publish(self, route: UpdateRoute, update: ChatUpdate) -> None:
        await self._connections.dispatch(route, ChatUpdatePayload.from_update(update))
