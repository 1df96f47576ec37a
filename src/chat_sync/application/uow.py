from __future__ import annotations

from typing import Protocol

from chat_sync.application.repositories.chat import ChatReader, ChatWriter
from chat_sync.application.repositories.message import MessageWriter
from chat_sync.application.repositories.user import UserReader


class UnitOfWork(Protocol):
    chats: ChatReader
    chats_w: ChatWriter
    messages_w: MessageWriter
    users: UserReader

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...
