from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chat_sync.application.exceptions import GatewayError
from chat_sync.domain.entities.chat import Chat
from chat_sync.infrastructure.db.mappers import chat as mapper
from chat_sync.infrastructure.db.models.chat import ChatMessageModel, ChatModel, ChatParticipantModel
from chat_sync.infrastructure.db.models.message import MessageModel
from chat_sync.infrastructure.db.models.user import UserModel
from chat_sync.infrastructure.db.repositories._errors import gateway_call


async def _load(session: AsyncSession, chat_id: UUID) -> ChatModel | None:
    stmt = (
        select(ChatModel)
        .where(ChatModel.id == chat_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _load_entity(session: AsyncSession, chat_id: UUID) -> Chat:
    model = await _load(session, chat_id)
    if model is None:
        raise GatewayError("Chat not found")
    return mapper.model_to_entity(model)


class ChatReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @gateway_call
    async def get_by_id(self, chat_id: UUID) -> Chat | None:
        model = await _load(self._session, chat_id)
        return mapper.model_to_entity(model) if model else None

    @gateway_call
    async def list_for_participant(self, username: str) -> list[Chat]:
        stmt = (
            select(ChatModel)
            .join(ChatParticipantModel, ChatParticipantModel.chat_id == ChatModel.id)
            .where(ChatParticipantModel.username == username)
            .order_by(ChatModel.updated_at.desc(), ChatModel.id)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class ChatWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @gateway_call
    async def create(self, chat: Chat) -> Chat:
        self._session.add(mapper.entity_to_model(chat))
        await self._session.flush()
        return await _load_entity(self._session, chat.id)

    @gateway_call
    async def append_message(self, chat_id: UUID, message_id: UUID) -> Chat:
        if await self._session.get(ChatModel, chat_id) is None:
            raise GatewayError("Chat not found")
        if await self._session.get(MessageModel, message_id) is None:
            raise GatewayError("Message not found")

        self._session.add(ChatMessageModel(chat_id=chat_id, message_id=message_id))
        await self._touch(chat_id)
        await self._session.flush()
        return await _load_entity(self._session, chat_id)

    @gateway_call
    async def add_participant(self, chat_id: UUID, username: str) -> Chat:
        user = await self._session.execute(
            select(UserModel.id).where(UserModel.username == username).limit(1)
        )
        if user.scalar_one_or_none() is None:
            raise GatewayError("User does not exist")

        existing = await self._session.execute(
            select(ChatParticipantModel.position)
            .where(
                ChatParticipantModel.chat_id == chat_id,
                ChatParticipantModel.username == username,
            )
            .limit(1)
        )
        if (
            await self._session.get(ChatModel, chat_id) is None
            or existing.scalar_one_or_none() is not None
        ):
            raise GatewayError("Chat not found or user already a participant")

        self._session.add(ChatParticipantModel(chat_id=chat_id, username=username))
        await self._touch(chat_id)
        await self._session.flush()
        return await _load_entity(self._session, chat_id)

    async def _touch(self, chat_id: UUID) -> None:
        await self._session.execute(
            update(ChatModel).where(ChatModel.id == chat_id).values(updated_at=func.now())
        )
