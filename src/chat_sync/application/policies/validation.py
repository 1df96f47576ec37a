from __future__ import annotations

from uuid import UUID

from chat_sync.application.dto.chat import CreateChatDTO, NewMessageDTO
from chat_sync.application.exceptions import ValidationError


def parse_chat_id(raw: str | UUID | None, detail: str) -> UUID:
    if isinstance(raw, UUID):
        return raw
    if not raw:
        raise ValidationError(detail)
    try:
        return UUID(raw)
    except ValueError as exc:
        raise ValidationError(detail) from exc


def is_valid_message(message: NewMessageDTO) -> bool:
    return bool(message.body and message.body.strip() and message.author and message.author.strip())


def validate_create_chat(request: CreateChatDTO) -> list[str]:
    """Return the unique participant list, in the order given."""
    if not request.participants:
        raise ValidationError("Invalid create chat request")
    if any(not isinstance(p, str) or not p.strip() for p in request.participants):
        raise ValidationError("Invalid create chat request")

    participants = list(dict.fromkeys(p.strip() for p in request.participants))
    if len(participants) < 2:
        raise ValidationError("A chat needs at least two distinct participants")
    if not all(is_valid_message(m) for m in request.messages):
        raise ValidationError("Invalid create chat request")
    return participants


def validate_new_message(chat_id: str | UUID | None, message: NewMessageDTO) -> UUID:
    chat_uuid = parse_chat_id(chat_id, "Invalid add message request")
    if not is_valid_message(message):
        raise ValidationError("Invalid add message request")
    return chat_uuid


def validate_add_participant(chat_id: str | UUID | None, participant: str | None) -> tuple[UUID, str]:
    detail = "Invalid request body. Missing chat id or participant"
    if not participant or not participant.strip():
        raise ValidationError(detail)
    return parse_chat_id(chat_id, detail), participant.strip()
