"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, Request

from chat_sync.infrastructure.db.session import AsyncSessionLocal
from chat_sync.infrastructure.db.uow import SqlAlchemyUoW
from chat_sync.services.broadcaster import ChatUpdateBroadcaster


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session, SqlAlchemyUoW(session) as uow:
        yield uow


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


def get_broadcaster(request: Request) -> ChatUpdateBroadcaster:
    """The broadcaster wired by create_app, or the Redis one after startup."""
    return request.app.state.broadcaster


BroadcasterDep = Annotated[ChatUpdateBroadcaster, Depends(get_broadcaster)]
