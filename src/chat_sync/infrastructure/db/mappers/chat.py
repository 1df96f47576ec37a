from __future__ import annotations

from chat_sync.domain.entities.chat import Chat
from chat_sync.infrastructure.db.mappers import message as message_mapper
from chat_sync.infrastructure.db.models.chat import ChatMessageModel, ChatModel, ChatParticipantModel


def model_to_entity(model: ChatModel) -> Chat:
    return Chat(
        id=model.id,
        participants=tuple(p.username for p in model.participants),
        messages=tuple(message_mapper.model_to_entity(link.message) for link in model.message_links),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: Chat) -> ChatModel:
    return ChatModel(
        id=entity.id,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
        participants=[ChatParticipantModel(username=u) for u in entity.participants],
        message_links=[ChatMessageModel(message_id=m.id) for m in entity.messages],
    )
