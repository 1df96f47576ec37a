"""Client-side chat state kept in sync with the server.

A ``ChatSyncSession`` owns the local chat list and the selected chat for one
signed-in user. It issues Mutation API calls, listens on the shared update
channel and keeps exactly one chat room joined: the one for the selected
chat.

Network calls are the only suspension points. Every result is checked on
arrival against the session generation (bumped by start/stop) and, for chat
selection, against the latest selection request, so late responses never
overwrite newer state.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import assert_never
from uuid import UUID

from chat_sync.api.v1.schemas.chat import ChatResponse, ChatUpdatePayload, MessageRequest
from chat_sync.client.ports import ChatApi, UpdateChannel
from chat_sync.domain.value_objects.enums import ChatUpdateType

logger = logging.getLogger(__name__)


class ChatSyncSession:
    def __init__(self, username: str, api: ChatApi, channel: UpdateChannel) -> None:
        self.username = username
        self._api = api
        self._channel = channel

        self.chats: list[ChatResponse] = []
        self.selected_chat: ChatResponse | None = None
        self.draft_message = ""
        self.pending_new_chat_target = ""
        self.show_create_panel = False

        self._active = False
        self._generation = 0
        self._selection = 0

    @property
    def active(self) -> bool:
        return self._active

    def _is_current(self, generation: int) -> bool:
        return self._active and generation == self._generation

    # -- lifecycle -----------------------------------------------------------

    async def start(self) -> None:
        """Subscribe to updates and load the user's chats."""
        if self._active:
            return
        self._active = True
        self._generation += 1
        generation = self._generation
        self._channel.subscribe(self.handle_update)

        chats = await self._api.list_chats_for_user(self.username)
        if not self._is_current(generation):
            logger.debug("Discarding chat list for %s fetched before teardown", self.username)
            return
        # keep chats that arrived as events while the list was in flight
        fetched = {c.id for c in chats}
        self.chats = [c for c in self.chats if c.id not in fetched] + list(chats)

    async def stop(self) -> None:
        """Unsubscribe, then leave the selected chat's room. Runs once."""
        if not self._active:
            return
        self._active = False
        self._generation += 1
        self._channel.unsubscribe(self.handle_update)
        if self.selected_chat is not None:
            await self._channel.leave(self.selected_chat.id)

    async def change_user(self, username: str) -> None:
        """Tear down, reopen the update channel as ``username`` and start over."""
        await self.stop()
        await self._channel.reconnect(username)
        self.username = username
        self.chats = []
        self.selected_chat = None
        self.draft_message = ""
        self.pending_new_chat_target = ""
        self.show_create_panel = False
        await self.start()

    # -- user actions --------------------------------------------------------

    async def select_chat(self, chat_id: UUID | None) -> None:
        """Show a chat and move room membership to it. Last selection wins."""
        if chat_id is None:
            return
        self._selection += 1
        selection = self._selection
        generation = self._generation

        chat = await self._api.get_chat(chat_id)
        if not self._is_current(generation) or selection != self._selection:
            logger.debug("Discarding superseded selection of chat %s", chat_id)
            return
        await self._show(chat)

    async def send_message(self) -> ChatResponse | None:
        """Send the draft to the selected chat.

        Whitespace-only drafts and sends without a selected chat are dropped
        without touching the network.
        """
        if not self.draft_message.strip() or self.selected_chat is None:
            return None
        generation = self._generation
        message = MessageRequest(
            body=self.draft_message,
            author=self.username,
            created_at=datetime.now(timezone.utc),
        )

        chat = await self._api.send_message(self.selected_chat.id, message)
        if not self._is_current(generation):
            return chat
        if self.selected_chat is not None and self.selected_chat.id == chat.id:
            self.selected_chat = chat
            self.draft_message = ""
        return chat

    def select_user(self, username: str) -> None:
        self.pending_new_chat_target = username

    async def create_chat(self) -> ChatResponse | None:
        """Start a chat with the pending target and switch to it."""
        target = self.pending_new_chat_target.strip()
        if not target:
            return None
        generation = self._generation

        chat = await self._api.create_chat([self.username, target])
        if not self._is_current(generation):
            return chat
        self._selection += 1
        await self._show(chat)
        self.pending_new_chat_target = ""
        self.show_create_panel = False
        return chat

    async def _show(self, chat: ChatResponse) -> None:
        previous = self.selected_chat
        self.selected_chat = chat
        if previous is not None and previous.id != chat.id:
            await self._channel.leave(previous.id)
        await self._channel.join(chat.id)

    # -- reconciliation ------------------------------------------------------

    def handle_update(self, update: ChatUpdatePayload) -> None:
        if not self._active:
            return
        chat = update.chat
        match update.type:
            case ChatUpdateType.CREATED:
                if self.username in chat.participants:
                    self._prepend(chat)
            case ChatUpdateType.NEW_MESSAGE:
                # a leave may still be in flight for the previous selection
                if self.selected_chat is None or self.selected_chat.id == chat.id:
                    self.selected_chat = chat
            case ChatUpdateType.NEW_PARTICIPANT:
                if self.username in chat.participants:
                    self._upsert(chat)
            case _:
                assert_never(update.type)

    def _prepend(self, chat: ChatResponse) -> None:
        self.chats = [chat] + [c for c in self.chats if c.id != chat.id]

    def _upsert(self, chat: ChatResponse) -> None:
        for i, existing in enumerate(self.chats):
            if existing.id == chat.id:
                self.chats[i] = chat
                return
        self.chats.insert(0, chat)
