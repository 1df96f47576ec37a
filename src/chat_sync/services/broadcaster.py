"""Classify successful mutations into ChatUpdate events and publish them."""
from __future__ import annotations

import logging
from typing import assert_never

from chat_sync.application.dto.events import UpdateRoute
from chat_sync.application.ports.bus import UpdatePublisher
from chat_sync.domain.entities.chat import Chat
from chat_sync.domain.events.chat_update import ChatUpdate
from chat_sync.domain.value_objects.enums import ChatUpdateType, DeliveryScope

logger = logging.getLogger(__name__)


def classify(chat: Chat, kind: ChatUpdateType) -> ChatUpdate:
    return ChatUpdate(type=ChatUpdateType(kind), chat=chat)


def route_update(update: ChatUpdate, *, participant_scoped: bool = False) -> UpdateRoute:
    """Decide who receives an update.

    New messages only reach connections joined to the chat's room. Creations
    and participant changes go out on the shared channel, optionally narrowed
    to the chat's participants.
    """
    match update.type:
        case ChatUpdateType.NEW_MESSAGE:
            return UpdateRoute(scope=DeliveryScope.ROOM, room=update.chat.id)
        case ChatUpdateType.CREATED | ChatUpdateType.NEW_PARTICIPANT:
            audience = frozenset(update.chat.participants) if participant_scoped else None
            return UpdateRoute(scope=DeliveryScope.GLOBAL, audience=audience)
        case _:
            assert_never(update.type)


class ChatUpdateBroadcaster:
    def __init__(self, publisher: UpdatePublisher, *, participant_scoped: bool = False) -> None:
        self._publisher = publisher
        self._participant_scoped = participant_scoped

    async def broadcast(self, chat: Chat, kind: ChatUpdateType) -> ChatUpdate:
        update = classify(chat, kind)
        route = route_update(update, participant_scoped=self._participant_scoped)
        await self._publisher.publish(route, update)
        logger.debug("Published %s update for chat %s (%s)", update.type, chat.id, route.scope)
        return update
