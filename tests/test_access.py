import pytest

from tripplanner.core.exceptions import AccessDenied, NotFound
from tripplanner.models.trips.trip_member import MemberStatus, TripRole
from tripplanner.schemas.itineraries.schedule_item import ScheduleItemCreate
from tripplanner.schemas.trip.comment import CommentCreate
from tripplanner.schemas.trip.destination import DestinationCreate
from tripplanner.schemas.trip.plan import PlanCreate
from tripplanner.services.itineraries import schedule_service
from tripplanner.services.trips import comment_service, destination_service, plan_service
from tripplanner.services.trips.access_service import check_access
from tripplanner.services.trips.plan_service import get_default_plan


async def test_owner_can_edit(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)

    access = await check_access(store, trip.id, owner, TripRole.OWNER)

    assert access.role == TripRole.OWNER
    assert access.can_edit is True


async def test_missing_trip_is_not_found(store, make_user):
    user = await make_user()
    with pytest.raises(NotFound):
        await check_access(store, "no-such-trip", user)


async def test_non_member_is_denied(store, make_user, make_trip):
    owner = await make_user()
    stranger = await make_user()
    trip = await make_trip(owner)

    with pytest.raises(AccessDenied):
        await check_access(store, trip.id, stranger)


async def test_editor_is_not_owner(store, make_user, make_trip, add_member):
    owner = await make_user()
    editor = await make_user()
    trip = await make_trip(owner)
    await add_member(trip.id, editor, TripRole.EDITOR)

    access = await check_access(store, trip.id, editor, TripRole.EDITOR)
    assert access.can_edit is True
    with pytest.raises(AccessDenied):
        await check_access(store, trip.id, editor, TripRole.OWNER)


async def test_viewer_cannot_mutate(store, make_user, make_trip, add_member):
    owner = await make_user()
    viewer = await make_user()
    trip = await make_trip(owner)
    await add_member(trip.id, viewer, TripRole.VIEWER)

    access = await check_access(store, trip.id, viewer)
    assert access.can_edit is False

    with pytest.raises(AccessDenied):
        await plan_service.create_plan(store, trip.id, PlanCreate(name="Rainy day"), viewer)
    with pytest.raises(AccessDenied):
        await destination_service.add_destination(
            store, trip.id, DestinationCreate(name="Office", lat=3.1, lng=101.7), viewer
        )
    with pytest.raises(AccessDenied):
        await comment_service.add_comment(store, trip.id, CommentCreate(content="Looks good"), viewer)


async def test_commenter_can_comment_but_not_schedule(store, make_user, make_trip, add_member):
    owner = await make_user()
    commenter = await make_user()
    trip = await make_trip(owner)
    await add_member(trip.id, commenter, TripRole.COMMENTER)
    plan = await get_default_plan(store, trip.id)

    comment = await comment_service.add_comment(
        store, trip.id, CommentCreate(content="Can we go earlier?", plan_id=plan.id), commenter
    )
    assert comment["author"]["id"] == commenter.id

    with pytest.raises(AccessDenied):
        await schedule_service.create_schedule_item(store, ScheduleItemCreate(
            plan_id=plan.id, day_date="2025-12-22", title="Zoo", start_time="09:00", end_time="11:00",
        ), commenter)


async def test_pending_member_is_denied_until_accepted(store, make_user, make_trip, add_member):
    owner = await make_user()
    guest = await make_user()
    trip = await make_trip(owner)
    member = await add_member(trip.id, guest, TripRole.VIEWER, status=MemberStatus.PENDING)

    with pytest.raises(AccessDenied):
        await plan_service.get_plans(store, trip.id, guest)

    await store.patch(member, status=MemberStatus.ACCEPTED)
    await store.commit()

    plans = await plan_service.get_plans(store, trip.id, guest)
    assert [p.name for p in plans] == ["Plan A", "Plan B"]


async def test_declined_member_is_denied(store, make_user, make_trip, add_member):
    owner = await make_user()
    guest = await make_user()
    trip = await make_trip(owner)
    await add_member(trip.id, guest, TripRole.EDITOR, status=MemberStatus.DECLINED)

    with pytest.raises(AccessDenied):
        await check_access(store, trip.id, guest)
