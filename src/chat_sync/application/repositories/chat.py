from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chat_sync.domain.entities.chat import Chat


class ChatReader(Protocol):
    async def get_by_id(self, chat_id: UUID) -> Chat | None: ...

    async def list_for_participant(self, username: str) -> list[Chat]:
        """Chats the user takes part in, most recently updated first."""
        ...


class ChatWriter(Protocol):
    async def create(self, chat: Chat) -> Chat:
        """Persist a chat, linking its already-created messages in order."""
        ...

    async def append_message(self, chat_id: UUID, message_id: UUID) -> Chat:
        """Link an existing message to the end of the chat's log.

        Raises GatewayError if either the chat or the message does not exist.
        """
        ...

    async def add_participant(self, chat_id: UUID, username: str) -> Chat:
        """Raises GatewayError for unknown users/chats or existing members."""
        ...
