from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from uuid import UUID

from chat_sync.application.dto.chat import CreateChatDTO, NewMessageDTO
from chat_sync.application.exceptions import GatewayError, PopulationError
from chat_sync.application.policies.validation import (
    validate_add_participant,
    validate_create_chat,
    validate_new_message,
)
from chat_sync.application.uow import UnitOfWork
from chat_sync.domain.entities.chat import Chat
from chat_sync.domain.entities.message import Message
from chat_sync.domain.value_objects.enums import ChatUpdateType, MessageType
from chat_sync.services.broadcaster import ChatUpdateBroadcaster
from chat_sync.services.population import enrich_chat, populate_chat


@contextmanager
def _labeled(label: str) -> Iterator[None]:
    """Prefix gateway failures with the operation that hit them."""
    try:
        yield
    except GatewayError as exc:
        raise type(exc)(f"{label}: {exc.detail}") from exc


def _new_message(dto: NewMessageDTO, now: datetime) -> Message:
    return Message(
        id=uuid.uuid4(),
        body=dto.body or "",
        author=(dto.author or "").strip(),
        created_at=dto.created_at or now,
        type=MessageType.DIRECT,
    )


async def create_chat(
    request: CreateChatDTO,
    uow: UnitOfWork,
    broadcaster: ChatUpdateBroadcaster,
) -> Chat:
    """Create the initial messages, then the chat that references them."""
    participants = validate_create_chat(request)

    with _labeled("Error creating a chat"):
        now = datetime.now(timezone.utc)
        messages = []
        for dto in request.messages:
            messages.append(await uow.messages_w.create(_new_message(dto, now)))

        chat = await uow.chats_w.create(
            Chat(
                id=uuid.uuid4(),
                participants=tuple(participants),
                messages=tuple(messages),
                created_at=now,
                updated_at=now,
            )
        )
        await uow.commit()
        populated = await populate_chat(chat.id, uow)

    await broadcaster.broadcast(populated, ChatUpdateType.CREATED)
    return populated


async def send_message(
    chat_id: str | UUID | None,
    message: NewMessageDTO,
    uow: UnitOfWork,
    broadcaster: ChatUpdateBroadcaster,
) -> Chat:
    """Create the message, then link it to the end of the chat's log."""
    chat_uuid = validate_new_message(chat_id, message)

    with _labeled("Error adding message to the chat"):
        created = await uow.messages_w.create(
            _new_message(message, datetime.now(timezone.utc))
        )
        await uow.chats_w.append_message(chat_uuid, created.id)
        await uow.commit()
        populated = await populate_chat(chat_uuid, uow)

    await broadcaster.broadcast(populated, ChatUpdateType.NEW_MESSAGE)
    return populated


async def add_participant(
    chat_id: str | UUID | None,
    participant: str | None,
    uow: UnitOfWork,
    broadcaster: ChatUpdateBroadcaster,
) -> Chat:
    chat_uuid, username = validate_add_participant(chat_id, participant)

    with _labeled("Error adding participant to chat"):
        await uow.chats_w.add_participant(chat_uuid, username)
        await uow.commit()
        populated = await populate_chat(chat_uuid, uow)

    await broadcaster.broadcast(populated, ChatUpdateType.NEW_PARTICIPANT)
    return populated


async def get_chat(chat_id: str | UUID, uow: UnitOfWork) -> Chat:
    with _labeled("Error retrieving chat"):
        try:
            chat_uuid = chat_id if isinstance(chat_id, UUID) else UUID(chat_id)
        except ValueError as exc:
            raise GatewayError(f"Invalid chat id {chat_id!r}") from exc

        chat = await uow.chats.get_by_id(chat_uuid)
        if chat is None:
            raise GatewayError("Chat not found")
        return await enrich_chat(chat, uow)


async def list_chats_for_user(username: str, uow: UnitOfWork) -> list[Chat]:
    """All of a user's chats, populated. One failed entry fails the whole call."""
    with _labeled("Error retrieving chat"):
        chats = await uow.chats.list_for_participant(username)
        try:
            return [await enrich_chat(chat, uow) for chat in chats]
        except PopulationError as exc:
            raise PopulationError("Failed populating the chats") from exc
