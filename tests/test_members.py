from datetime import timedelta

import pytest

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import AccessDenied, InvalidArgument, InvariantViolation, NotFound
from tripplanner.models.trips.trip_invite import TripInviteLink
from tripplanner.models.trips.trip_member import MemberStatus, TripMember, TripRole
from tripplanner.models.user.user import User
from tripplanner.schemas.trip.invite import InviteLinkCreate
from tripplanner.schemas.trip.trip_member import MemberInvite
from tripplanner.services.trips import trip_member_service
from tripplanner.services.trips.access_service import check_access


async def test_invite_registered_user_then_accept(store, make_user, make_trip):
    owner = await make_user(name="Alice")
    guest = await make_user(name="Bob", email="bob@example.com")
    trip = await make_trip(owner)

    result = await trip_member_service.invite_member(
        store, trip.id, MemberInvite(email="Bob@Example.com", role="editor"), owner
    )
    assert result == {"success": True, "pending": False}

    invites = await trip_member_service.get_pending_invites(store, guest)
    assert len(invites) == 1
    assert invites[0]["trip_name"] == "Tokyo Trip"
    assert invites[0]["inviter"]["name"] == "Alice"

    with pytest.raises(AccessDenied):
        await check_access(store, trip.id, guest)

    await trip_member_service.accept_invite(store, invites[0]["membership_id"], guest)
    access = await check_access(store, trip.id, guest, TripRole.EDITOR)
    assert access.role == TripRole.EDITOR

    members = await trip_member_service.get_members(store, trip.id, owner)
    assert [m["user"]["name"] for m in members] == ["Alice", "Bob"]


async def test_invite_unknown_email_is_claimed_on_signup(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)

    result = await trip_member_service.invite_member(
        store, trip.id, MemberInvite(email="later@example.com"), owner
    )
    assert result["pending"] is True

    newcomer = await make_user(email="later@example.com")
    assert await trip_member_service.claim_email_invites(store, newcomer) == 1
    await store.commit()

    invites = await trip_member_service.get_pending_invites(store, newcomer)
    assert [i["trip_id"] for i in invites] == [trip.id]


async def test_duplicate_invite_is_rejected(store, make_user, make_trip):
    owner = await make_user()
    await make_user(email="dup@example.com")
    trip = await make_trip(owner)

    await trip_member_service.invite_member(store, trip.id, MemberInvite(email="dup@example.com"), owner)
    with pytest.raises(InvalidArgument):
        await trip_member_service.invite_member(store, trip.id, MemberInvite(email="dup@example.com"), owner)


async def test_only_owner_invites(store, make_user, make_trip, add_member):
    owner = await make_user()
    editor = await make_user()
    trip = await make_trip(owner)
    await add_member(trip.id, editor, TripRole.EDITOR)

    with pytest.raises(AccessDenied):
        await trip_member_service.invite_member(store, trip.id, MemberInvite(email="x@example.com"), editor)


async def test_decline_someone_elses_invite_is_denied(store, make_user, make_trip, add_member):
    owner = await make_user()
    guest = await make_user()
    other = await make_user()
    trip = await make_trip(owner)
    member = await add_member(trip.id, guest, TripRole.VIEWER, status=MemberStatus.PENDING)

    with pytest.raises(AccessDenied):
        await trip_member_service.decline_invite(store, member.id, other)


async def test_join_via_link(store, make_user, make_trip):
    owner = await make_user()
    joiner = await make_user()
    trip = await make_trip(owner)

    link = await trip_member_service.create_invite_link(
        store, trip.id, InviteLinkCreate(role="commenter", max_uses=1), owner
    )
    assert len(link.token) == 32

    result = await trip_member_service.join_via_link(store, link.token, joiner)
    assert result["trip_id"] == trip.id
    assert result["role"] == TripRole.COMMENTER
    assert link.use_count == 1

    with pytest.raises(InvalidArgument):
        await trip_member_service.join_via_link(store, link.token, await make_user())


async def test_join_via_link_rejects_members_and_expired_links(store, make_user, make_trip):
    owner = await make_user()
    trip = await make_trip(owner)
    link = await trip_member_service.create_invite_link(store, trip.id, InviteLinkCreate(expires_in_days=1), owner)

    with pytest.raises(InvalidArgument):
        await trip_member_service.join_via_link(store, link.token, owner)

    await store.patch(link, expires_at=link.created_at - timedelta(days=2))
    await store.commit()
    with pytest.raises(InvalidArgument):
        await trip_member_service.join_via_link(store, link.token, await make_user())

    with pytest.raises(NotFound):
        await trip_member_service.join_via_link(store, "0" * 32, await make_user())


async def test_role_rules(store, make_user, make_trip, add_member):
    owner = await make_user()
    viewer = await make_user()
    trip = await make_trip(owner)
    member = await add_member(trip.id, viewer, TripRole.VIEWER)
    owner_member = await store.first(TripMember, TripMember.trip_id == trip.id, TripMember.user_id == owner.id)

    await trip_member_service.update_member_role(store, member.id, "editor", owner)
    assert member.role == TripRole.EDITOR

    with pytest.raises(InvalidArgument):
        await trip_member_service.update_member_role(store, member.id, "owner", owner)
    with pytest.raises(InvariantViolation):
        await trip_member_service.update_member_role(store, owner_member.id, "viewer", owner)
    with pytest.raises(InvariantViolation):
        await trip_member_service.remove_member(store, owner_member.id, owner)


async def test_leave_and_remove(store, make_user, make_trip, add_member, cache):
    owner = await make_user()
    leaver = await make_user()
    removed = await make_user()
    trip = await make_trip(owner)
    await add_member(trip.id, leaver, TripRole.VIEWER)
    member = await add_member(trip.id, removed, TripRole.EDITOR)

    await trip_member_service.leave_trip(store, trip.id, leaver, cache)
    with pytest.raises(AccessDenied):
        await check_access(store, trip.id, leaver)

    await trip_member_service.remove_member(store, member.id, owner, cache)
    with pytest.raises(AccessDenied):
        await check_access(store, trip.id, removed)

    with pytest.raises(InvariantViolation):
        await trip_member_service.leave_trip(store, trip.id, owner, cache)


async def test_link_use_count_is_read_under_the_trip_lock(store, session_factory, make_user, make_trip):
    owner = await make_user()
    first, second = await make_user(), await make_user()
    trip = await make_trip(owner)
    link = await trip_member_service.create_invite_link(
        store, trip.id, InviteLinkCreate(role="viewer", max_uses=1), owner
    )

    async with session_factory() as session:
        other = TripDataStore(session)
        # this session saw the link with no uses yet
        assert (await other.first(TripInviteLink, TripInviteLink.token == link.token)).use_count == 0
        second_user = await other.get(User, second.id)

        await trip_member_service.join_via_link(store, link.token, first)
        with pytest.raises(InvalidArgument, match="maximum number of uses"):
            await trip_member_service.join_via_link(other, link.token, second_user)

    async with session_factory() as session:
        fresh = TripDataStore(session)
        assert (await fresh.get(TripInviteLink, link.id)).use_count == 1
        assert await fresh.first(TripMember, TripMember.trip_id == trip.id, TripMember.user_id == second.id) is None
