from __future__ import annotations

import pytest

from chat_sync.domain.events.chat_update import ChatUpdate
from chat_sync.domain.value_objects.enums import ChatUpdateType, DeliveryScope
from chat_sync.services.broadcaster import ChatUpdateBroadcaster, classify, route_update
from tests.factories import make_chat


def test_classify_accepts_wire_names():
    chat = make_chat()

    update = classify(chat, "newMessage")

    assert update.type is ChatUpdateType.NEW_MESSAGE
    assert update.chat is chat


def test_classify_rejects_unknown_kind():
    with pytest.raises(ValueError):
        classify(make_chat(), "deleted")


def test_new_message_goes_to_chat_room():
    chat = make_chat()

    route = route_update(ChatUpdate(type=ChatUpdateType.NEW_MESSAGE, chat=chat))

    assert route.scope == DeliveryScope.ROOM
    assert route.room == chat.id


@pytest.mark.parametrize("kind", [ChatUpdateType.CREATED, ChatUpdateType.NEW_PARTICIPANT])
def test_roster_updates_go_to_everyone_by_default(kind):
    route = route_update(ChatUpdate(type=kind, chat=make_chat()))

    assert route.scope == DeliveryScope.GLOBAL
    assert route.room is None
    assert route.audience is None


@pytest.mark.parametrize("kind", [ChatUpdateType.CREATED, ChatUpdateType.NEW_PARTICIPANT])
def test_roster_updates_can_be_scoped_to_participants(kind):
    chat = make_chat(participants=("alice", "carol"))

    route = route_update(ChatUpdate(type=kind, chat=chat), participant_scoped=True)

    assert route.scope == DeliveryScope.GLOBAL
    assert route.audience == frozenset({"alice", "carol"})


def test_participant_scoping_does_not_change_room_delivery():
    chat = make_chat()

    route = route_update(ChatUpdate(type=ChatUpdateType.NEW_MESSAGE, chat=chat), participant_scoped=True)

    assert route.audience is None
    assert route.room == chat.id


@pytest.mark.asyncio
async def test_broadcast_publishes_once_and_returns_update(publisher):
    broadcaster = ChatUpdateBroadcaster(publisher)
    chat = make_chat()

    update = await broadcaster.broadcast(chat, ChatUpdateType.CREATED)

    assert publisher.published == [(route_update(update), update)]


@pytest.mark.asyncio
async def test_broadcast_propagates_publish_failure():
    class _Broken:
        async def publish(self, route, update):
            raise ConnectionError("bus down")

    with pytest.raises(ConnectionError):
        await ChatUpdateBroadcaster(_Broken()).broadcast(make_chat(), ChatUpdateType.CREATED)
