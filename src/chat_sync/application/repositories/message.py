from __future__ import annotations

from typing import Protocol

from chat_sync.domain.entities.message import Message


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...
