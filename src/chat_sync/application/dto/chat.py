from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class NewMessageDTO:
    body: str | None
    author: str | None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class CreateChatDTO:
    participants: list[str] | None
    messages: list[NewMessageDTO] = field(default_factory=list)
