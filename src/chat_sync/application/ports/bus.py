from __future__ import annotations

from typing import Protocol

from chat_sync.application.dto.events import UpdateRoute
from chat_sync.domain.events.chat_update import ChatUpdate


class UpdatePublisher(Protocol):
    async def publish(self, route: UpdateRoute, update: ChatUpdate) -> None: ...
