from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_sync.domain.entities.user import UserRef
from chat_sync.infrastructure.db.models.user import UserModel
from chat_sync.infrastructure.db.repositories._errors import gateway_call


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @gateway_call
    async def get_by_username(self, username: str) -> UserRef | None:
        stmt = select(UserModel).where(UserModel.username == username)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return UserRef(id=model.id, username=model.username) if model else None
