"""Envelopes exchanged on the update channel: ``{"type": ..., "data": {...}}``."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel

# server -> client
CHAT_UPDATE = "chatUpdate"
PONG = "pong"
ERROR = "error"

# client -> server
JOIN_CHAT = "joinChat"
LEAVE_CHAT = "leaveChat"
PING = "ping"


class WsInbound(BaseModel):
    type: str
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    type: str
    data: dict[str, Any] = {}
