from __future__ import annotations

from fastapi import APIRouter

from chat_sync.api.deps import BroadcasterDep, UoWDep
from chat_sync.api.v1.schemas.chat import (
    AddParticipantRequest,
    ChatResponse,
    CreateChatRequest,
    MessageRequest,
)
from chat_sync.application.dto.chat import CreateChatDTO, NewMessageDTO
from chat_sync.services import chat_service

router = APIRouter(prefix="/api/v1/chat", tags=["chats"])


def _to_message_dto(body: MessageRequest) -> NewMessageDTO:
    return NewMessageDTO(body=body.body, author=body.author, created_at=body.created_at)


@router.post("/createChat", response_model=ChatResponse)
async def create_chat(
    body: CreateChatRequest,
    uow: UoWDep,
    broadcaster: BroadcasterDep,
) -> ChatResponse:
    chat = await chat_service.create_chat(
        CreateChatDTO(
            participants=body.participants,
            messages=[_to_message_dto(m) for m in body.messages],
        ),
        uow,
        broadcaster,
    )
    return ChatResponse.model_validate(chat, from_attributes=True)


@router.get("/getChatsByUser/{username}", response_model=list[ChatResponse])
async def get_chats_by_user(username: str, uow: UoWDep) -> list[ChatResponse]:
    chats = await chat_service.list_chats_for_user(username, uow)
    return [ChatResponse.model_validate(c, from_attributes=True) for c in chats]


@router.post("/{chat_id}/addMessage", response_model=ChatResponse)
async def add_message(
    chat_id: str,
    body: MessageRequest,
    uow: UoWDep,
    broadcaster: BroadcasterDep,
) -> ChatResponse:
    chat = await chat_service.send_message(chat_id, _to_message_dto(body), uow, broadcaster)
    return ChatResponse.model_validate(chat, from_attributes=True)


@router.post("/{chat_id}/addParticipant", response_model=ChatResponse)
async def add_participant(
    chat_id: str,
    body: AddParticipantRequest,
    uow: UoWDep,
    broadcaster: BroadcasterDep,
) -> ChatResponse:
    chat = await chat_service.add_participant(chat_id, body.participant, uow, broadcaster)
    return ChatResponse.model_validate(chat, from_attributes=True)


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(chat_id: str, uow: UoWDep) -> ChatResponse:
    chat = await chat_service.get_chat(chat_id, uow)
    return ChatResponse.model_validate(chat, from_attributes=True)
