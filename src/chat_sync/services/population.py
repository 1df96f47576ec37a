"""Enrich chat snapshots with author display info before they leave the server."""
from __future__ import annotations

import dataclasses
from uuid import UUID

from chat_sync.application.exceptions import GatewayError, PopulationError
from chat_sync.application.uow import UnitOfWork
from chat_sync.domain.entities.chat import Chat
from chat_sync.domain.entities.user import UserRef


async def enrich_chat(chat: Chat, uow: UnitOfWork) -> Chat:
    """Attach a ``UserRef`` to every message. Unknown authors stay ``None``."""
    users: dict[str, UserRef | None] = {}
    try:
        for message in chat.messages:
            if message.author not in users:
                users[message.author] = await uow.users.get_by_username(message.author)
    except GatewayError as exc:
        raise PopulationError(exc.detail) from exc

    messages = tuple(
        dataclasses.replace(m, user=users[m.author]) for m in chat.messages
    )
    return dataclasses.replace(chat, messages=messages)


async def populate_chat(chat_id: UUID, uow: UnitOfWork) -> Chat:
    """Re-fetch a chat after a write and enrich it."""
    try:
        chat = await uow.chats.get_by_id(chat_id)
    except GatewayError as exc:
        raise PopulationError(exc.detail) from exc
    if chat is None:
        raise PopulationError("Chat not found")
    return await enrich_chat(chat, uow)
