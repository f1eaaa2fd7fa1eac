import pytest

from tripplanner.core.exceptions import AccessDenied
from tripplanner.models.itinerary.schedule_item import TripScheduleItem
from tripplanner.models.trips.trip_location import TripLocation
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.models.trips.trip_plan import TripPlan
from tripplanner.schemas.ai.tool_calls import BatchStatus, ToolCallResult, UndoAction
from tripplanner.services.ai import tool_executor
from tripplanner.services.ai.tool_executor import AIToolExecutor, batch_status


def add_locations_block(*names, block_id="toolu_1"):
    return {
        "type": "tool_use",
        "id": block_id,
        "name": "add_trip_locations",
        "input": {"locations": [
            {"name": name, "lat": 3.15 + i / 100, "lng": 101.71, "category": "attraction"}
            for i, name in enumerate(names)
        ]},
    }


def itinerary_block(plan_id=None, block_id="toolu_2", location_name=None):
    payload = {"days": [{"day_date": "2025-12-22", "activities": [
        {"title": "Morning visit", "start_time": "09:00", "end_time": "11:00", "location_name": location_name},
        {"title": "Lunch", "start_time": "12:00", "end_time": "13:00"},
    ]}]}
    if plan_id:
        payload["plan_id"] = plan_id
    return {"type": "tool_use", "id": block_id, "name": "create_itinerary", "input": payload}


def test_batch_status():
    ok = ToolCallResult(tool_name="x", success=True, message="")
    bad = ToolCallResult(tool_name="x", success=False, message="")
    assert batch_status([]) == BatchStatus.OK
    assert batch_status([ok, ok]) == BatchStatus.OK
    assert batch_status([ok, bad]) == BatchStatus.PARTIAL_FAILURE
    assert batch_status([bad]) == BatchStatus.FAILED


async def test_partial_failure_keeps_earlier_success(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)
    trip_id = trip.id
    executor = AIToolExecutor(store)

    response = await executor.process_tool_calls(trip_id, owner, [
        {"type": "text", "text": "Here are some ideas"},
        add_locations_block("Aquaria KLCC", "Petrosains"),
        itinerary_block(plan_id="nonexistent"),
    ])

    assert response.status == BatchStatus.PARTIAL_FAILURE
    added, failed = response.results
    assert added.success and added.message == "Added 2 locations to your trip"
    assert added.tool_use_id == "toolu_1"
    assert added.undo_action == UndoAction(kind="remove_locations", ids=added.created_ids)
    assert not failed.success and failed.message == "Plan not found"
    assert failed.tool_use_id == "toolu_2"

    assert await store.count(TripLocation, TripLocation.trip_id == trip_id) == 2
    assert await store.count(TripScheduleItem, TripScheduleItem.trip_id == trip_id) == 0
    assert executor.last_tool_results == response.results
    assert executor.is_processing_tools is False


async def test_itinerary_uses_default_plan_and_links_locations(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)
    trip_id = trip.id
    executor = AIToolExecutor(store)

    response = await executor.process_tool_calls(trip_id, owner, [
        add_locations_block("Aquaria KLCC"),
        itinerary_block(location_name="aquaria klcc"),
    ])

    assert response.status == BatchStatus.OK
    locations, itinerary = response.results
    assert itinerary.message == "Created itinerary with 2 activities"
    default_plan = await store.first(TripPlan, TripPlan.trip_id == trip_id, TripPlan.is_default.is_(True))
    items = await store.query(TripScheduleItem, TripScheduleItem.trip_id == trip_id,
                              order_by=[TripScheduleItem.order])
    assert {i.plan_id for i in items} == {default_plan.id}
    assert [i.order for i in items] == [0, 1]
    assert items[0].location_id == locations.created_ids[0]


async def test_missing_default_plan(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)
    trip_id = trip.id
    for plan in await store.query(TripPlan, TripPlan.trip_id == trip_id):
        await store.patch(plan, is_default=False)
    await store.commit()

    response = await AIToolExecutor(store).process_tool_calls(trip_id, owner, [itinerary_block()])

    assert response.status == BatchStatus.FAILED
    assert response.results[0].message == "No default plan found for this trip"


async def test_unknown_tools_and_bad_input(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)
    trip_id = trip.id

    response = await AIToolExecutor(store).process_tool_calls(trip_id, owner, [
        {"type": "tool_use", "id": "toolu_9", "name": "book_flights", "input": {}},
        {"type": "tool_use", "id": "toolu_10", "name": "add_trip_locations", "input": {"locations": []}},
    ])

    assert response.status == BatchStatus.FAILED
    assert [r.tool_name for r in response.results] == ["add_trip_locations"]
    assert response.results[0].message == "Invalid input for add_trip_locations"


async def test_viewer_tool_calls_fail(store, make_user, make_trip, add_member):
    owner = await make_user()
    viewer = await make_user()
    trip = await make_trip(owner)
    trip_id = trip.id
    await add_member(trip_id, viewer, TripRole.VIEWER)

    response = await AIToolExecutor(store).process_tool_calls(trip_id, viewer, [add_locations_block("Zoo Negara")])

    assert response.status == BatchStatus.FAILED
    assert await store.count(TripLocation, TripLocation.trip_id == trip_id) == 0


async def test_undo_removes_exactly_created_ids(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)
    trip_id = trip.id
    executor = AIToolExecutor(store)

    first = await executor.process_tool_calls(trip_id, owner, [itinerary_block()])
    second = await executor.process_tool_calls(trip_id, owner, [itinerary_block(block_id="toolu_3")])
    assert await store.count(TripScheduleItem, TripScheduleItem.trip_id == trip_id) == 4

    assert await executor.undo(trip_id, owner, first.results[0].undo_action) == {"success": True}

    remaining = await store.query(TripScheduleItem, TripScheduleItem.trip_id == trip_id,
                                  order_by=[TripScheduleItem.order])
    assert [i.id for i in remaining] == second.results[0].created_ids
    assert [i.order for i in remaining] == [0, 1]


async def test_undo_requires_edit_rights(store, make_user, make_trip, add_member):
    owner = await make_user()
    viewer = await make_user()
    trip = await make_trip(owner)
    trip_id = trip.id
    await add_member(trip_id, viewer, TripRole.VIEWER)
    executor = AIToolExecutor(store)
    added = await executor.process_tool_calls(trip_id, owner, [add_locations_block("Zoo Negara")])

    with pytest.raises(AccessDenied):
        await executor.undo(trip_id, viewer, added.results[0].undo_action)


async def test_unexpected_errors_do_not_leak_driver_text(store, make_user, make_trip, monkeypatch):
    owner = await make_user()
    trip = await make_trip(owner)
    trip_id = trip.id

    async def broken_insert(*args, **kwargs):
        raise RuntimeError('duplicate key value violates unique constraint "trip_locations_pkey"')

    monkeypatch.setattr(tool_executor, "insert_ai_locations", broken_insert)
    response = await AIToolExecutor(store).process_tool_calls(trip_id, owner, [add_locations_block("Petrosains")])

    assert response.status == BatchStatus.FAILED
    assert response.results[0].message == "Something went wrong running add_trip_locations"
    assert await store.count(TripLocation, TripLocation.trip_id == trip_id) == 0
