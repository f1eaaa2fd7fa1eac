import pytest

from tripplanner.core.exceptions import AccessDenied, InvalidArgument
from tripplanner.models.trips.trip_activity import TripActivity
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.schemas.itineraries.schedule_item import ScheduleItemCreate
from tripplanner.schemas.trip.comment import CommentCreate
from tripplanner.services.itineraries import schedule_service
from tripplanner.services.trips import comment_service
from tripplanner.services.trips.plan_service import trip_plans


@pytest.fixture
async def scene(store, make_user, make_trip, add_member):
    owner = await make_user(name="Owner")
    editor = await make_user(name="Editor")
    commenter = await make_user(name="Commenter")
    trip = await make_trip(owner)
    await add_member(trip.id, editor, TripRole.EDITOR)
    await add_member(trip.id, commenter, TripRole.COMMENTER)
    plan_a, plan_b = await trip_plans(store, trip.id)
    zoo = await schedule_service.create_schedule_item(store, ScheduleItemCreate(
        plan_id=plan_a.id, day_date="2025-12-22", title="Zoo", start_time="09:00", end_time="12:00",
    ), owner)
    return {"owner": owner, "editor": editor, "commenter": commenter, "trip": trip,
            "plan_a": plan_a, "plan_b": plan_b, "zoo": zoo}


async def test_item_comment_inherits_plan(store, scene):
    comment = await comment_service.add_comment(
        store, scene["trip"].id, CommentCreate(content=" Bring sunscreen ", schedule_item_id=scene["zoo"].id),
        scene["commenter"],
    )

    assert comment["content"] == "Bring sunscreen"
    assert comment["plan_id"] == scene["plan_a"].id
    assert comment["author"]["name"] == "Commenter"
    assert comment["is_resolved"] is False


async def test_comment_targets_must_be_in_trip(store, scene, make_trip):
    other = await make_trip(scene["owner"], name="Other")
    foreign_plan = (await trip_plans(store, other.id))[0]

    with pytest.raises(InvalidArgument):
        await comment_service.add_comment(store, scene["trip"].id,
                                          CommentCreate(content="Hi", plan_id=foreign_plan.id), scene["owner"])
    with pytest.raises(InvalidArgument, match="cannot be empty"):
        await comment_service.add_comment(store, scene["trip"].id, CommentCreate(content="  "), scene["owner"])


async def test_only_author_edits_and_owner_may_delete(store, scene):
    comment = await comment_service.add_comment(
        store, scene["trip"].id, CommentCreate(content="Nap at 1?"), scene["commenter"]
    )

    with pytest.raises(AccessDenied):
        await comment_service.update_comment(store, comment["id"], "Nap at 2?", scene["editor"])
    updated = await comment_service.update_comment(store, comment["id"], "Nap at 2?", scene["commenter"])
    assert updated["content"] == "Nap at 2?"

    with pytest.raises(AccessDenied):
        await comment_service.delete_comment(store, comment["id"], scene["editor"])
    assert await comment_service.delete_comment(store, comment["id"], scene["owner"]) == {"success": True}


async def test_resolve_hides_from_default_listing(store, scene):
    trip_id = scene["trip"].id
    first = await comment_service.add_comment(
        store, trip_id, CommentCreate(content="Is it open Monday?", schedule_item_id=scene["zoo"].id),
        scene["commenter"],
    )
    await comment_service.add_comment(
        store, trip_id, CommentCreate(content="Tickets online", schedule_item_id=scene["zoo"].id), scene["editor"]
    )

    with pytest.raises(AccessDenied):
        await comment_service.resolve_comment(store, first["id"], scene["commenter"])

    resolved = await comment_service.resolve_comment(store, first["id"], scene["editor"])
    assert resolved["is_resolved"] is True
    # resolving twice is a no-op and logs once
    await comment_service.resolve_comment(store, first["id"], scene["editor"])
    assert await store.count(TripActivity, TripActivity.trip_id == trip_id,
                             TripActivity.action == "resolved_comment") == 1

    visible = await comment_service.get_comments_by_trip(store, trip_id, scene["owner"])
    assert [c["content"] for c in visible] == ["Tickets online"]
    everything = await comment_service.get_comments_by_trip(store, trip_id, scene["owner"], include_resolved=True)
    assert len(everything) == 2

    by_plan = await comment_service.get_comments_by_plan(store, scene["plan_a"].id, scene["owner"])
    assert [c["content"] for c in by_plan] == ["Tickets online"]

    thread = await comment_service.get_comments_by_schedule_item(store, scene["zoo"].id, scene["owner"])
    assert {c["content"] for c in thread} == {"Is it open Monday?", "Tickets online"}

    assert await comment_service.get_comment_counts(store, trip_id, scene["owner"]) == {scene["zoo"].id: 1}
    assert await comment_service.get_comment_counts(store, trip_id, scene["owner"], "2025-12-25") == {}

    await comment_service.unresolve_comment(store, first["id"], scene["editor"])
    assert await comment_service.get_comment_counts(store, trip_id, scene["owner"]) == {scene["zoo"].id: 2}
