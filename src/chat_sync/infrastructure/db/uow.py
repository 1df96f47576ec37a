from __future__ import annotations

from types import TracebackType
from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession

from chat_sync.infrastructure.db.repositories.chat import ChatReaderRepo, ChatWriterRepo
from chat_sync.infrastructure.db.repositories.message import MessageWriterRepo
from chat_sync.infrastructure.db.repositories.user import UserReaderRepo


class SqlAlchemyUoW:
    """Chat, message and user gateways sharing one AsyncSession.

    Use as an async context manager: whatever the service did not commit
    is rolled back on exit, failed or not.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.chats = ChatReaderRepo(session)
        self.chats_w = ChatWriterRepo(session)
        self.messages_w = MessageWriterRepo(session)
        self.users = UserReaderRepo(session)

    async def flush(self) -> None:
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._session.in_transaction():
            await self.rollback()
