from __future__ import annotations

from enum import StrEnum


class MessageType(StrEnum):
    DIRECT = "direct"
    GLOBAL = "global"


class ChatUpdateType(StrEnum):
    CREATED = "created"
    NEW_MESSAGE = "newMessage"
    NEW_PARTICIPANT = "newParticipant"


class DeliveryScope(StrEnum):
    ROOM = "room"
    GLOBAL = "global"
