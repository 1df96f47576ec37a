from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from chat_sync.application.dto.events import UpdateRoute
from chat_sync.domain.events.chat_update import ChatUpdate
from chat_sync.domain.value_objects.enums import ChatUpdateType, DeliveryScope
from chat_sync.infrastructure.bus.local import LocalUpdatePublisher
from chat_sync.infrastructure.bus.redis_pubsub import RedisPubSubPublisher, RedisUpdateSubscriber
from chat_sync.infrastructure.bus.serializer import (
    CHAT_UPDATE_EVENT,
    decode_update,
    deserialize_event,
    encode_update,
    serialize_event,
)
from chat_sync.infrastructure.ws.manager import ConnectionManager
from tests.factories import FakeConnection, make_chat, make_message, update_payload


@dataclass
class FakeRedis:
    published: list[tuple[str, str]] = field(default_factory=list)

    async def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 1


def test_encoded_update_carries_route_and_snapshot():
    chat = make_chat(participants=("bob", "alice"), messages=(make_message(),))
    route = UpdateRoute(scope=DeliveryScope.GLOBAL, audience=frozenset(chat.participants))

    event_type, data = deserialize_event(encode_update(route, update_payload(ChatUpdateType.CREATED, chat)))

    assert event_type == CHAT_UPDATE_EVENT
    assert data["route"] == {"scope": "global", "room": None, "audience": ["alice", "bob"]}
    assert data["update"]["type"] == "created"

    decoded_route, payload = decode_update(data)
    assert decoded_route == route
    assert payload.chat.id == chat.id
    assert payload.chat.messages[0].body == "hello"


def test_room_route_survives_the_wire():
    chat = make_chat()
    route = UpdateRoute(scope=DeliveryScope.ROOM, room=chat.id)

    _, data = deserialize_event(encode_update(route, update_payload(ChatUpdateType.NEW_MESSAGE, chat)))

    assert decode_update(data)[0] == route


@pytest.mark.asyncio
async def test_local_publisher_dispatches_to_connections():
    connections = ConnectionManager()
    conn = FakeConnection()
    connections.register(conn, "alice")
    chat = make_chat()

    await LocalUpdatePublisher(connections).publish(
        UpdateRoute(scope=DeliveryScope.GLOBAL),
        ChatUpdate(type=ChatUpdateType.CREATED, chat=chat),
    )

    assert conn.updates[0]["chat"]["participants"] == ["alice", "bob"]


@pytest.mark.asyncio
async def test_redis_publisher_feeds_subscriber_dispatch():
    redis = FakeRedis()
    chat = make_chat()
    route = UpdateRoute(scope=DeliveryScope.ROOM, room=chat.id)

    await RedisPubSubPublisher(redis, "chat.updates").publish(
        route, ChatUpdate(type=ChatUpdateType.NEW_MESSAGE, chat=chat),
    )

    [(channel, raw)] = redis.published
    assert channel == "chat.updates"

    # the subscriber in another process
    connections = ConnectionManager()
    joined, other = FakeConnection(), FakeConnection()
    connections.join(connections.register(joined, "alice"), chat.id)
    connections.register(other, "bob")
    delivered = await RedisUpdateSubscriber(redis, "chat.updates", connections).handle(raw)

    assert delivered == 1
    assert [u["type"] for u in joined.updates] == ["newMessage"]
    assert other.sent == []


@pytest.mark.asyncio
async def test_unknown_pubsub_events_are_ignored():
    connections = ConnectionManager()
    conn = FakeConnection()
    connections.register(conn, "alice")

    raw = serialize_event("presence.changed", {"user": "alice"})
    delivered = await RedisUpdateSubscriber(FakeRedis(), "chat.updates", connections).handle(raw)

    assert delivered == 0
    assert conn.sent == []
