from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from chat_sync.domain.events.chat_update import ChatUpdate
from chat_sync.domain.value_objects.enums import ChatUpdateType, MessageType


class MessageRequest(BaseModel):
    body: str | None = None
    author: str | None = None
    created_at: datetime | None = None


class CreateChatRequest(BaseModel):
    participants: list[str] | None = None
    messages: list[MessageRequest] = []


class AddParticipantRequest(BaseModel):
    participant: str | None = None


class UserRefResponse(BaseModel):
    id: UUID
    username: str

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    id: UUID
    body: str
    author: str
    created_at: datetime
    type: MessageType = MessageType.DIRECT
    user: UserRefResponse | None = None

    model_config = ConfigDict(from_attributes=True)


class ChatResponse(BaseModel):
    id: UUID
    participants: list[str]
    messages: list[MessageResponse]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChatUpdatePayload(BaseModel):
    """Body of a ``chatUpdate`` event: discriminant plus full chat snapshot."""

    type: ChatUpdateType
    chat: ChatResponse

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_update(cls, update: ChatUpdate) -> ChatUpdatePayload:
        return cls.model_validate(update, from_attributes=True)
