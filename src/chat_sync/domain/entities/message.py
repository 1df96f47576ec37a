from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from chat_sync.domain.entities.user import UserRef
from chat_sync.domain.value_objects.enums import MessageType


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    body: str
    author: str
    created_at: datetime
    type: str = MessageType.DIRECT
    user: UserRef | None = None
