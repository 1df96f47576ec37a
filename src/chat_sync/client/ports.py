from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol
from uuid import UUID

from chat_sync.api.v1.schemas.chat import ChatResponse, ChatUpdatePayload, MessageRequest

UpdateHandler = Callable[[ChatUpdatePayload], None]


class ChatApi(Protocol):
    async def create_chat(
        self, participants: Sequence[str], messages: Sequence[MessageRequest] = (),
    ) -> ChatResponse: ...

    async def get_chat(self, chat_id: UUID) -> ChatResponse: ...

    async def send_message(self, chat_id: UUID, message: MessageRequest) -> ChatResponse: ...

    async def add_participant(self, chat_id: UUID, participant: str) -> ChatResponse: ...

    async def list_chats_for_user(self, username: str) -> list[ChatResponse]: ...


class UpdateChannel(Protocol):
    """The shared update channel plus room control messages."""

    def subscribe(self, handler: UpdateHandler) -> None: ...

    def unsubscribe(self, handler: UpdateHandler) -> None: ...

    async def join(self, chat_id: UUID) -> None: ...

    async def leave(self, chat_id: UUID) -> None: ...

    async def reconnect(self, username: str) -> None: ...
