from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from chat_sync.api.v1.schemas.chat import ChatUpdatePayload
from chat_sync.application.dto.events import UpdateRoute
from chat_sync.domain.value_objects.enums import DeliveryScope

CHAT_UPDATE_EVENT = "chat.update"


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, frozenset):
            return sorted(o)
        return super().default(o)


def serialize_event(event_type: str, payload: dict[str, Any]) -> str:
    envelope = {"event": event_type, "data": payload}
    return json.dumps(envelope, cls=_Encoder)


def deserialize_event(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    data = json.loads(raw)
    return data["event"], data["data"]


def encode_update(route: UpdateRoute, payload: ChatUpdatePayload) -> str:
    return serialize_event(
        CHAT_UPDATE_EVENT,
        {
            "route": {
                "scope": route.scope,
                "room": route.room,
                "audience": route.audience,
            },
            "update": payload.model_dump(mode="json"),
        },
    )


def decode_update(data: dict[str, Any]) -> tuple[UpdateRoute, ChatUpdatePayload]:
    raw_route = data["route"]
    audience = raw_route.get("audience")
    room = raw_route.get("room")
    route = UpdateRoute(
        scope=DeliveryScope(raw_route["scope"]),
        room=UUID(room) if room else None,
        audience=frozenset(audience) if audience is not None else None,
    )
    return route, ChatUpdatePayload.model_validate(data["update"])
