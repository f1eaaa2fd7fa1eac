import pytest

from tripplanner.core.exceptions import InvalidArgument, InvalidCoordinate, InvalidReorder, NotFound
from tripplanner.models.trips.trip_activity import TripActivity
from tripplanner.schemas.trip.destination import DestinationCreate, DestinationUpdate
from tripplanner.services.trips import destination_service


def place(name, lat=3.14, lng=101.69):
    return DestinationCreate(name=name, lat=lat, lng=lng)


async def test_destinations_are_ordered_and_densified(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)

    kl = await destination_service.add_destination(store, trip.id, place("Kuala Lumpur"), owner)
    ipoh = await destination_service.add_destination(store, trip.id, place("Ipoh", 4.6, 101.08), owner)
    penang = await destination_service.add_destination(store, trip.id, place("Penang", 5.41, 100.33), owner)
    assert [d.order for d in (kl, ipoh, penang)] == [0, 1, 2]

    await destination_service.reorder_destinations(store, trip.id, [penang.id, kl.id, ipoh.id], owner)
    result = await destination_service.get_destinations(store, trip.id, owner)
    assert [d.name for d in result] == ["Penang", "Kuala Lumpur", "Ipoh"]

    await destination_service.delete_destination(store, kl.id, owner)
    result = await destination_service.get_destinations(store, trip.id, owner)
    assert [(d.name, d.order) for d in result] == [("Penang", 0), ("Ipoh", 1)]

    actions = [a.action for a in await store.query(TripActivity, TripActivity.trip_id == trip.id)]
    assert actions.count("added_destination") == 3
    assert "reordered_destinations" in actions
    assert "deleted_destination" in actions


async def test_invalid_coordinates_are_rejected(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)

    with pytest.raises(InvalidCoordinate):
        await destination_service.add_destination(store, trip.id, place("Nowhere", lat=91), owner)
    with pytest.raises(InvalidCoordinate):
        await destination_service.add_destination(store, trip.id, place("Nowhere", lng=-180.5), owner)
    assert await destination_service.get_destinations(store, trip.id, owner) == []


async def test_blank_name_is_rejected(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)

    with pytest.raises(InvalidArgument, match="cannot be empty"):
        await destination_service.add_destination(store, trip.id, place("   "), owner)


async def test_update_validates_merged_coordinates(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)
    kl = await destination_service.add_destination(store, trip.id, place("Kuala Lumpur"), owner)

    with pytest.raises(InvalidCoordinate):
        await destination_service.update_destination(store, kl.id, DestinationUpdate(lat=-95), owner)

    updated = await destination_service.update_destination(
        store, kl.id, DestinationUpdate(name="KL Sentral", travel_mode="TRANSIT"), owner
    )
    assert updated.name == "KL Sentral"
    assert updated.travel_mode.value == "TRANSIT"
    assert updated.revision == 1


async def test_invalid_reorder_leaves_orders_unchanged(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)
    a = await destination_service.add_destination(store, trip.id, place("A"), owner)
    b = await destination_service.add_destination(store, trip.id, place("B"), owner)

    with pytest.raises(InvalidReorder):
        await destination_service.reorder_destinations(store, trip.id, [b.id, b.id], owner)
    with pytest.raises(InvalidReorder):
        await destination_service.reorder_destinations(store, trip.id, [b.id, a.id, "stranger"], owner)

    assert [(d.id, d.order) for d in await destination_service.get_destinations(store, trip.id, owner)] == [
        (a.id, 0), (b.id, 1),
    ]


async def test_delete_missing_destination(store, make_user):
    owner = await make_user()
    with pytest.raises(NotFound):
        await destination_service.delete_destination(store, "gone", owner)
