from __future__ import annotations

from dataclasses import dataclass

from chat_sync.domain.entities.chat import Chat
from chat_sync.domain.value_objects.enums import ChatUpdateType


@dataclass(frozen=True, slots=True)
class ChatUpdate:
    """Push notification carrying the full current snapshot of a chat."""

    type: ChatUpdateType
    chat: Chat
