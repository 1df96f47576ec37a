from __future__ import annotations

from typing import Protocol

from chat_sync.domain.entities.user import UserRef


class UserReader(Protocol):
    async def get_by_username(self, username: str) -> UserRef | None: ...
