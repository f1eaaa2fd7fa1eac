import pytest

from tripplanner.core.exceptions import AccessDenied, NotFound
from tripplanner.models.ai.chat_message import TripChatMessage
from tripplanner.models.trips.trip_activity import TripActivity
from tripplanner.models.trips.trip_checklist import ChecklistType, TripChecklist
from tripplanner.models.trips.trip_location import TripLocation
from tripplanner.models.trips.trip_member import TripMember, TripRole
from tripplanner.models.trips.trip_plan import TripPlan
from tripplanner.schemas.ai.chat import ChatMessage
from tripplanner.schemas.trip.location import LocationCreate
from tripplanner.services.ai import chat_history_service
from tripplanner.services.trips import checklist_service, location_service


async def test_delete_trip_removes_every_child_row(store, make_user, make_trip, add_member, trip_service):
    owner = await make_user()
    editor = await make_user()
    trip = await make_trip(owner)
    trip_id = trip.id
    await add_member(trip_id, editor, TripRole.EDITOR)

    await location_service.add_location(store, trip_id, LocationCreate(name="Petrosains", lat=3.158, lng=101.712),
                                        owner)
    await checklist_service.toggle_item(store, trip_id, ChecklistType.VISA, "v1", owner)
    await chat_history_service.add_message(store, trip_id, ChatMessage(role="user", content="Hello"), editor)

    with pytest.raises(AccessDenied):
        await trip_service.delete_trip(store, trip_id, editor)

    assert await trip_service.delete_trip(store, trip_id, owner) == {"success": True}

    for model in (TripMember, TripPlan, TripLocation, TripChecklist, TripChatMessage, TripActivity):
        assert await store.count(model, model.trip_id == trip_id) == 0, model.__name__
    with pytest.raises(NotFound):
        await trip_service.get_trip(store, trip_id, owner)
