import pytest

from tripplanner.core.exceptions import AccessDenied, InvalidArgument
from tripplanner.models.ai.chat_message import ChatRole, TripChatMessage
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.schemas.ai.chat import ChatMessage
from tripplanner.services.ai import chat_history_service


async def test_conversation_is_kept_in_order(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)

    await chat_history_service.add_message(store, trip.id, ChatMessage(role="user", content="Rainy day ideas?"), owner)
    await chat_history_service.add_message(store, trip.id, ChatMessage(role="assistant", content="Try the aquarium."),
                                           owner)
    await chat_history_service.add_message(store, trip.id, ChatMessage(role="user", content="Thanks!"), owner)

    messages = await chat_history_service.get_messages(store, trip.id, owner)
    assert [(m.role, m.content) for m in messages] == [
        (ChatRole.USER, "Rainy day ideas?"),
        (ChatRole.ASSISTANT, "Try the aquarium."),
        (ChatRole.USER, "Thanks!"),
    ]
    assert [m.seq for m in messages] == [0, 1, 2]


async def test_each_member_has_their_own_conversation(store, make_user, make_trip, add_member):
    owner = await make_user()
    viewer = await make_user()
    trip = await make_trip(owner)
    await add_member(trip.id, viewer, TripRole.VIEWER)

    await chat_history_service.add_message(store, trip.id, ChatMessage(role="user", content="Mine"), owner)
    await chat_history_service.add_message(store, trip.id, ChatMessage(role="user", content="Theirs"), viewer)

    assert [m.content for m in await chat_history_service.get_messages(store, trip.id, viewer)] == ["Theirs"]

    result = await chat_history_service.clear_messages(store, trip.id, owner)
    assert result == {"success": True, "removed": 1}
    assert await chat_history_service.get_messages(store, trip.id, owner) == []
    assert await store.count(TripChatMessage, TripChatMessage.trip_id == trip.id) == 1


async def test_empty_messages_and_outsiders_are_rejected(store, make_user, make_trip):
    owner = await make_user()
    stranger = await make_user()
    trip = await make_trip(owner)

    with pytest.raises(InvalidArgument):
        await chat_history_service.add_message(store, trip.id, ChatMessage(role="user", content="  "), owner)
    with pytest.raises(AccessDenied):
        await chat_history_service.get_messages(store, trip.id, stranger)
