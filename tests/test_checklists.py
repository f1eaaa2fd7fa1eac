import pytest

from tripplanner.core.exceptions import AccessDenied, InvalidArgument, NotFound
from tripplanner.models.trips.trip_checklist import ChecklistType, TripChecklist
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.services.trips import checklist_service


async def test_untouched_trip_shows_defaults_without_storing_them(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)

    checklists = await checklist_service.get_checklists(store, trip.id, owner)

    assert [c["type"] for c in checklists] == list(ChecklistType)
    visa = checklists[0]
    assert visa["updated_at"] is None
    assert visa["items"][0] == {"id": "v1", "text": "Valid passport (6+ months validity)", "checked": False}
    assert await store.count(TripChecklist, TripChecklist.trip_id == trip.id) == 0


async def test_initialize_defaults_is_idempotent(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)

    await checklist_service.toggle_item(store, trip.id, ChecklistType.HEALTH, "h1", owner)
    first = await checklist_service.initialize_defaults(store, trip.id, owner)
    again = await checklist_service.initialize_defaults(store, trip.id, owner)

    assert await store.count(TripChecklist, TripChecklist.trip_id == trip.id) == len(ChecklistType)
    assert first == again
    health = next(c for c in again if c["type"] == ChecklistType.HEALTH)
    # an existing checklist is never reset to the defaults
    assert health["items"][0]["checked"] is True


async def test_toggle_flips_one_item(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)

    checked = await checklist_service.toggle_item(store, trip.id, ChecklistType.PACKING, "p2", owner)
    assert [i["id"] for i in checked["items"] if i["checked"]] == ["p2"]

    unchecked = await checklist_service.toggle_item(store, trip.id, ChecklistType.PACKING, "p2", owner)
    assert not any(i["checked"] for i in unchecked["items"])

    with pytest.raises(NotFound):
        await checklist_service.toggle_item(store, trip.id, ChecklistType.PACKING, "nope", owner)


async def test_add_custom_item(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)

    result = await checklist_service.add_item(store, trip.id, ChecklistType.DOCUMENTS, "  Car rental voucher ", owner)

    added = result["items"][-1]
    assert added["id"].startswith("custom-")
    assert added["text"] == "Car rental voucher"
    assert len(result["items"]) == len(checklist_service.DEFAULT_CHECKLISTS[ChecklistType.DOCUMENTS]) + 1

    with pytest.raises(InvalidArgument):
        await checklist_service.add_item(store, trip.id, ChecklistType.DOCUMENTS, "   ", owner)


async def test_checklists_are_per_trip(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)
    other_trip = await make_trip(owner, name="Penang")

    await checklist_service.toggle_item(store, trip.id, ChecklistType.VISA, "v1", owner)

    untouched = await checklist_service.get_checklist(store, other_trip.id, ChecklistType.VISA, owner)
    assert untouched["updated_at"] is None
    assert not any(i["checked"] for i in untouched["items"])


async def test_viewers_read_but_cannot_edit(store, make_user, make_trip, add_member):
    owner = await make_user()
    viewer = await make_user()
    trip = await make_trip(owner)
    await add_member(trip.id, viewer, TripRole.VIEWER)

    assert len(await checklist_service.get_checklists(store, trip.id, viewer)) == len(ChecklistType)
    with pytest.raises(AccessDenied):
        await checklist_service.toggle_item(store, trip.id, ChecklistType.VISA, "v1", viewer)
    with pytest.raises(AccessDenied):
        await checklist_service.add_item(store, trip.id, ChecklistType.VISA, "Entry card", viewer)
