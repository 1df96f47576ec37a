from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from chat_sync.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class Chat:
    id: UUID
    participants: tuple[str, ...]
    messages: tuple[Message, ...]
    created_at: datetime
    updated_at: datetime