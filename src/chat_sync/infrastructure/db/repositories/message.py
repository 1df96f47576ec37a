from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from chat_sync.domain.entities.message import Message
from chat_sync.infrastructure.db.mappers import message as mapper
from chat_sync.infrastructure.db.repositories._errors import gateway_call


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @gateway_call
    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)
