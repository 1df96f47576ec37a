"""Seed development data: creates the schema, sample users and one chat."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone

from chat_sync.domain.entities.chat import Chat
from chat_sync.domain.entities.message import Message
from chat_sync.infrastructure.db.models.user import UserModel
from chat_sync.infrastructure.db.session import AsyncSessionLocal, create_schema
from chat_sync.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

USERNAMES = ("alice", "bob", "carol")


async def seed() -> None:
    await create_schema()

    async with AsyncSessionLocal() as session, SqlAlchemyUoW(session) as uow:
        now = datetime.now(timezone.utc)

        for username in USERNAMES:
            if await uow.users.get_by_username(username) is None:
                session.add(UserModel(id=uuid.uuid4(), username=username))
        await uow.flush()

        messages_data = [
            ("alice", "hi"),
            ("bob", "hello"),
        ]
        messages = []
        for author, body in messages_data:
            messages.append(
                await uow.messages_w.create(
                    Message(id=uuid.uuid4(), body=body, author=author, created_at=now)
                )
            )

        chat = await uow.chats_w.create(
            Chat(
                id=uuid.uuid4(),
                participants=("alice", "bob"),
                messages=tuple(messages),
                created_at=now,
                updated_at=now,
            )
        )
        await uow.commit()
        logger.info("Seeded chat %s with %d messages", chat.id, len(messages))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
