"""Client-side synchronization for the chat service."""
from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator

import httpx

from chat_sync.client.api import ChatApiClient, ChatApiError
from chat_sync.client.channel import WebSocketUpdateChannel
from chat_sync.client.session import ChatSyncSession


@asynccontextmanager
async def open_session(
    base_url: str,
    username: str,
    *,
    http: httpx.AsyncClient | None = None,
    channel: WebSocketUpdateChannel | None = None,
) -> AsyncIterator[ChatSyncSession]:
    """Connect, start a session for ``username`` and tear it all down on exit."""
    async with AsyncExitStack() as stack:
        if http is None:
            http = await stack.enter_async_context(httpx.AsyncClient(base_url=base_url))
        channel = channel or WebSocketUpdateChannel(base_url, username)
        await channel.connect()
        stack.push_async_callback(channel.close)

        session = ChatSyncSession(username, ChatApiClient(http), channel)
        stack.push_async_callback(session.stop)
        await session.start()
        yield session


__all__ = [
    "ChatApiClient",
    "ChatApiError",
    "ChatSyncSession",
    "WebSocketUpdateChannel",
    "open_session",
]
