from __future__ import annotations

import uuid

import pytest

from chat_sync.application.dto.chat import CreateChatDTO, NewMessageDTO
from chat_sync.application.exceptions import GatewayError, PopulationError, ValidationError
from chat_sync.domain.value_objects.enums import ChatUpdateType, DeliveryScope
from chat_sync.services import chat_service
from chat_sync.services.broadcaster import ChatUpdateBroadcaster
from tests.factories import make_chat, make_message


@pytest.fixture
def broadcaster(publisher):
    return ChatUpdateBroadcaster(publisher)


# -- create_chat ---------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_chat_persists_and_broadcasts_created(uow, publisher, broadcaster):
    request = CreateChatDTO(
        participants=["alice", "bob"],
        messages=[NewMessageDTO(body="hi", author="alice")],
    )

    chat = await chat_service.create_chat(request, uow, broadcaster)

    assert chat.participants == ("alice", "bob")
    assert [m.body for m in chat.messages] == ["hi"]
    assert chat.messages[0].user is not None
    assert chat.messages[0].user.username == "alice"
    assert uow.commits == 1

    [(route, update)] = publisher.published
    assert update.type == ChatUpdateType.CREATED
    assert update.chat == chat
    assert route.scope == DeliveryScope.GLOBAL
    assert route.audience is None


@pytest.mark.asyncio
async def test_create_chat_collapses_duplicate_participants(uow, broadcaster):
    request = CreateChatDTO(participants=["alice", "bob", "alice"])

    chat = await chat_service.create_chat(request, uow, broadcaster)

    assert chat.participants == ("alice", "bob")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "participants",
    [None, [], ["alice"], ["alice", "alice"], ["alice", "  "]],
)
async def test_create_chat_rejects_bad_participants(uow, publisher, broadcaster, participants):
    with pytest.raises(ValidationError):
        await chat_service.create_chat(CreateChatDTO(participants=participants), uow, broadcaster)

    assert uow.commits == 0
    assert publisher.published == []


@pytest.mark.asyncio
async def test_create_chat_rejects_blank_initial_message(uow, broadcaster):
    request = CreateChatDTO(
        participants=["alice", "bob"],
        messages=[NewMessageDTO(body="   ", author="alice")],
    )

    with pytest.raises(ValidationError, match="Invalid create chat request"):
        await chat_service.create_chat(request, uow, broadcaster)


@pytest.mark.asyncio
async def test_create_chat_gateway_failure_is_labeled(uow, publisher, broadcaster):
    uow.fail_on.add("create_chat")

    with pytest.raises(GatewayError) as exc_info:
        await chat_service.create_chat(CreateChatDTO(participants=["alice", "bob"]), uow, broadcaster)

    assert exc_info.value.detail == "Error creating a chat: Service error"
    assert publisher.published == []


# -- send_message --------------------------------------------------------------


@pytest.mark.asyncio
async def test_send_message_appends_in_order_and_broadcasts_to_room(uow, publisher, broadcaster):
    chat = uow.seed(make_chat(messages=(make_message(body="first"),)))

    result = await chat_service.send_message(
        str(chat.id), NewMessageDTO(body="second", author="bob"), uow, broadcaster,
    )

    assert [m.body for m in result.messages] == ["first", "second"]
    assert result.messages[-1].author == "bob"
    assert result.updated_at > chat.updated_at

    [(route, update)] = publisher.published
    assert update.type == ChatUpdateType.NEW_MESSAGE
    assert route.scope == DeliveryScope.ROOM
    assert route.room == chat.id


@pytest.mark.asyncio
async def test_message_moves_older_chat_to_front_of_user_list(uow, broadcaster):
    older = uow.seed(make_chat())
    newer = uow.seed(make_chat(participants=("alice", "carol")))

    await chat_service.send_message(str(older.id), NewMessageDTO(body="bump", author="bob"), uow, broadcaster)

    chats = await chat_service.list_chats_for_user("alice", uow)
    assert [c.id for c in chats] == [older.id, newer.id]


@pytest.mark.asyncio
async def test_send_message_unknown_author_has_no_user(uow, broadcaster):
    chat = uow.seed(make_chat())

    result = await chat_service.send_message(
        chat.id, NewMessageDTO(body="hey", author="mallory"), uow, broadcaster,
    )

    assert result.messages[-1].author == "mallory"
    assert result.messages[-1].user is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("chat_id", "body", "author"),
    [
        (None, "hi", "alice"),
        ("not-a-uuid", "hi", "alice"),
        ("VALID", "  \n", "alice"),
        ("VALID", "hi", None),
        ("VALID", None, "alice"),
    ],
)
async def test_send_message_validation(uow, publisher, broadcaster, chat_id, body, author):
    chat = uow.seed(make_chat())
    if chat_id == "VALID":
        chat_id = str(chat.id)

    with pytest.raises(ValidationError, match="Invalid add message request"):
        await chat_service.send_message(chat_id, NewMessageDTO(body=body, author=author), uow, broadcaster)

    assert uow.messages_w._messages == {}
    assert publisher.published == []


@pytest.mark.asyncio
async def test_send_message_to_missing_chat_is_gateway_error(uow, publisher, broadcaster):
    with pytest.raises(GatewayError) as exc_info:
        await chat_service.send_message(
            uuid.uuid4(), NewMessageDTO(body="hi", author="alice"), uow, broadcaster,
        )

    assert exc_info.value.detail.startswith("Error adding message to the chat:")
    assert publisher.published == []


@pytest.mark.asyncio
async def test_send_message_population_failure_is_distinct(uow, publisher, broadcaster):
    chat = uow.seed(make_chat())
    uow.fail_on.add("get_user")

    with pytest.raises(PopulationError):
        await chat_service.send_message(
            chat.id, NewMessageDTO(body="hi", author="alice"), uow, broadcaster,
        )

    # the write went through even though the response could not be built
    assert uow.commits == 1
    assert len(uow.chats._store[chat.id].messages) == 1
    assert publisher.published == []


# -- add_participant -----------------------------------------------------------


@pytest.mark.asyncio
async def test_add_participant_broadcasts_new_participant(uow, publisher, broadcaster):
    chat = uow.seed(make_chat())

    result = await chat_service.add_participant(chat.id, " carol ", uow, broadcaster)

    assert result.participants == ("alice", "bob", "carol")
    [(route, update)] = publisher.published
    assert update.type == ChatUpdateType.NEW_PARTICIPANT
    assert route.scope == DeliveryScope.GLOBAL


@pytest.mark.asyncio
async def test_add_participant_participant_scoped_route(uow, publisher):
    broadcaster = ChatUpdateBroadcaster(publisher, participant_scoped=True)
    chat = uow.seed(make_chat())

    await chat_service.add_participant(chat.id, "carol", uow, broadcaster)

    [(route, _)] = publisher.published
    assert route.audience == frozenset({"alice", "bob", "carol"})


@pytest.mark.asyncio
@pytest.mark.parametrize(("chat_id", "participant"), [(None, "carol"), ("x", "carol"), ("VALID", ""), ("VALID", None)])
async def test_add_participant_validation(uow, broadcaster, chat_id, participant):
    chat = uow.seed(make_chat())
    if chat_id == "VALID":
        chat_id = str(chat.id)

    with pytest.raises(ValidationError, match="Missing chat id or participant"):
        await chat_service.add_participant(chat_id, participant, uow, broadcaster)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("participant", "reason"),
    [("mallory", "User does not exist"), ("bob", "Chat not found or user already a participant")],
)
async def test_add_participant_rejected_by_gateway(uow, publisher, broadcaster, participant, reason):
    chat = uow.seed(make_chat())

    with pytest.raises(GatewayError) as exc_info:
        await chat_service.add_participant(chat.id, participant, uow, broadcaster)

    assert exc_info.value.detail == f"Error adding participant to chat: {reason}"
    assert uow.chats._store[chat.id].participants == ("alice", "bob")
    assert publisher.published == []


# -- reads ---------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_chat_returns_populated_chat(uow):
    chat = uow.seed(make_chat(messages=(make_message(author="bob"), make_message(author="ghost"))))

    result = await chat_service.get_chat(str(chat.id), uow)

    assert result.id == chat.id
    assert result.messages[0].user.username == "bob"
    assert result.messages[1].user is None


@pytest.mark.asyncio
@pytest.mark.parametrize("chat_id", ["nope", str(uuid.uuid4())])
async def test_get_chat_unknown_or_malformed_is_gateway_error(uow, chat_id):
    with pytest.raises(GatewayError) as exc_info:
        await chat_service.get_chat(chat_id, uow)

    assert exc_info.value.detail.startswith("Error retrieving chat:")


@pytest.mark.asyncio
async def test_list_chats_most_recent_first(uow):
    older = uow.seed(make_chat())
    newer = uow.seed(make_chat(participants=("carol", "alice")))
    uow.seed(make_chat(participants=("bob", "carol")))

    chats = await chat_service.list_chats_for_user("alice", uow)

    assert [c.id for c in chats] == [newer.id, older.id]


@pytest.mark.asyncio
async def test_list_chats_for_unknown_user_is_empty(uow):
    uow.seed(make_chat())

    assert await chat_service.list_chats_for_user("nobody", uow) == []


@pytest.mark.asyncio
async def test_list_chats_population_failure_fails_whole_call(uow):
    uow.seed(make_chat(messages=(make_message(),)))
    uow.fail_on.add("get_user")

    with pytest.raises(PopulationError) as exc_info:
        await chat_service.list_chats_for_user("alice", uow)

    assert exc_info.value.detail == "Error retrieving chat: Failed populating the chats"
