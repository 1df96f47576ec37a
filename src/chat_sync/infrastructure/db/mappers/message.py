from __future__ import annotations

from chat_sync.domain.entities.message import Message
from chat_sync.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        body=model.body,
        author=model.author,
        created_at=model.created_at,
        type=model.type,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        body=entity.body,
        author=entity.author,
        type=entity.type,
        created_at=entity.created_at,
    )
