"""HTTP client for the chat Mutation API."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from urllib.parse import quote
from uuid import UUID

import httpx
from pydantic import TypeAdapter

from chat_sync.api.v1.schemas.chat import (
    AddParticipantRequest,
    ChatResponse,
    CreateChatRequest,
    MessageRequest,
)
from chat_sync.application.exceptions import AppError

_chat_list = TypeAdapter(list[ChatResponse])


class ChatApiError(AppError):
    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        super().__init__(detail)


class ChatApiClient:
    """Implements client.ports.ChatApi over an ``httpx.AsyncClient``."""

    def __init__(self, http: httpx.AsyncClient, prefix: str = "/api/v1/chat") -> None:
        self._http = http
        self._prefix = prefix

    async def create_chat(
        self,
        participants: Sequence[str],
        messages: Sequence[MessageRequest] = (),
    ) -> ChatResponse:
        body = CreateChatRequest(participants=list(participants), messages=list(messages))
        data = await self._request("POST", "/createChat", json=body.model_dump(mode="json"))
        return ChatResponse.model_validate(data)

    async def get_chat(self, chat_id: UUID) -> ChatResponse:
        data = await self._request("GET", f"/{chat_id}")
        return ChatResponse.model_validate(data)

    async def send_message(self, chat_id: UUID, message: MessageRequest) -> ChatResponse:
        data = await self._request(
            "POST", f"/{chat_id}/addMessage", json=message.model_dump(mode="json", exclude_none=True),
        )
        return ChatResponse.model_validate(data)

    async def add_participant(self, chat_id: UUID, participant: str) -> ChatResponse:
        body = AddParticipantRequest(participant=participant)
        data = await self._request("POST", f"/{chat_id}/addParticipant", json=body.model_dump())
        return ChatResponse.model_validate(data)

    async def list_chats_for_user(self, username: str) -> list[ChatResponse]:
        data = await self._request("GET", f"/getChatsByUser/{quote(username, safe='')}")
        return _chat_list.validate_python(data)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._http.request(method, f"{self._prefix}{path}", **kwargs)
        if response.is_error:
            raise ChatApiError(response.status_code, _detail(response))
        return response.json()


def _detail(response: httpx.Response) -> str:
    try:
        return str(response.json().get("detail", response.text))
    except ValueError:
        return response.text
