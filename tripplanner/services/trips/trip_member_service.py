from datetime import timedelta
from typing import Iterable, List, Optional

from tripplanner.core.cache import RedisCache
from tripplanner.core.data_store import TripDataStore
from tripplanner.core.database import utcnow
from tripplanner.core.exceptions import AccessDenied, InvalidArgument, InvariantViolation, NotFound
from tripplanner.core.logger import logger
from tripplanner.core.security import generate_invite_token
from tripplanner.models.trips.trip_invite import TripInviteLink
from tripplanner.models.trips.trip_member import MemberStatus, TripMember, TripRole
from tripplanner.models.trips.trip_model import Trip
from tripplanner.models.user.user import User
from tripplanner.schemas.trip.invite import InviteLinkCreate
from tripplanner.schemas.trip.trip_member import MemberInvite
from tripplanner.services.trips.access_service import check_access
from tripplanner.services.trips.activity_service import ActivityAction, log_activity


async def invalidate_user_trips(cache: Optional[RedisCache], user_ids: Iterable[Optional[str]]):
    """Drop cached trip lists for the given users"""
    if cache is None:
        return
    for user_id in {u for u in user_ids if u}:
        await cache.delete(cache.build_key("trips", "user", user_id))


def _member_dict(member: TripMember, user: Optional[User]) -> dict:
    return {
        "id": member.id,
        "trip_id": member.trip_id,
        "user_id": member.user_id,
        "invited_email": member.invited_email,
        "role": member.role,
        "status": member.status,
        "invited_by": member.invited_by,
        "invited_at": member.invited_at,
        "accepted_at": member.accepted_at,
        "user": user.to_profile() if user else None,
    }


async def _with_profiles(store: TripDataStore, members: List[TripMember]) -> List[dict]:
    users = await store.by_ids(User, [m.user_id for m in members])
    return [_member_dict(m, users.get(m.user_id)) for m in members]


async def list_members(store: TripDataStore, trip_id: str) -> List[dict]:
    """Accepted members, owner first, then by name."""
    members = await store.query(
        TripMember,
        TripMember.trip_id == trip_id,
        TripMember.status == MemberStatus.ACCEPTED,
    )
    result = await _with_profiles(store, members)
    result.sort(key=lambda m: (m["role"] != TripRole.OWNER, (m["user"] or {}).get("name", "").lower()))
    return result


async def get_members(store: TripDataStore, trip_id: str, user: User) -> List[dict]:
    await check_access(store, trip_id, user)
    return await list_members(store, trip_id)


async def _get_member(store: TripDataStore, member_id: str) -> TripMember:
    member = await store.get(TripMember, member_id)
    if not member:
        raise NotFound("Member not found")
    return member


async def invite_member(store: TripDataStore, trip_id: str, invite: MemberInvite, user: User) -> dict:
    await check_access(store, trip_id, user, TripRole.OWNER, lock=True)
    email = invite.email.lower()
    role = TripRole(invite.role)
    now = utcnow()

    target = await store.first(User, User.email == email)
    if target:
        existing = await store.first(TripMember, TripMember.trip_id == trip_id, TripMember.user_id == target.id)
    else:
        existing = await store.first(
            TripMember,
            TripMember.trip_id == trip_id,
            TripMember.user_id.is_(None),
            TripMember.invited_email == email,
        )

    if existing and existing.status == MemberStatus.ACCEPTED:
        raise InvalidArgument("User is already a member of this trip")
    if existing and existing.status == MemberStatus.PENDING:
        raise InvalidArgument("An invitation is already pending for this email")

    if existing:
        # previously declined, invite again
        await store.patch(existing, role=role, status=MemberStatus.PENDING,
                          invited_by=user.id, invited_at=now, accepted_at=None)
    else:
        await store.insert(TripMember(
            trip_id=trip_id,
            user_id=target.id if target else None,
            invited_email=email,
            role=role,
            status=MemberStatus.PENDING,
            invited_by=user.id,
            invited_at=now,
        ))

    await log_activity(store, trip_id, user.id, ActivityAction.INVITED_MEMBER, target_type="member",
                       metadata={"invited_email": email, "role": role.value})
    await store.commit()
    logger.info(f"User {user.id} invited {email} to trip {trip_id} as {role.value}")
    return {"success": True, "pending": target is None}


async def claim_email_invites(store: TripDataStore, user: User) -> int:
    """Attach invitations sent to this email before the account existed."""
    invites = await store.query(
        TripMember,
        TripMember.user_id.is_(None),
        TripMember.invited_email == user.email.lower(),
    )
    for invite in invites:
        await store.patch(invite, user_id=user.id)
    if invites:
        logger.info(f"User {user.id} claimed {len(invites)} pending invitation(s)")
    return len(invites)


async def _own_pending_invite(store: TripDataStore, member_id: str, user: User) -> TripMember:
    member = await _get_member(store, member_id)
    await store.lock_trip(member.trip_id)
    member = await _get_member(store, member_id)
    if member.user_id != user.id:
        raise AccessDenied("This invitation is not for you")
    if member.status != MemberStatus.PENDING:
        raise InvalidArgument("This invitation is no longer pending")
    return member


async def accept_invite(store: TripDataStore, member_id: str, user: User, cache: Optional[RedisCache] = None) -> dict:
    member = await _own_pending_invite(store, member_id, user)

    await store.patch(member, status=MemberStatus.ACCEPTED, accepted_at=utcnow())
    await log_activity(store, member.trip_id, user.id, ActivityAction.JOINED_TRIP,
                       target_id=member.id, target_type="member", metadata={"method": "invite"})
    await store.commit()

    await invalidate_user_trips(cache, [user.id])
    logger.info(f"User {user.id} accepted invitation to trip {member.trip_id}")
    return {"success": True, "trip_id": member.trip_id}


async def decline_invite(store: TripDataStore, member_id: str, user: User) -> dict:
    member = await _own_pending_invite(store, member_id, user)
    await store.patch(member, status=MemberStatus.DECLINED)
    await store.commit()
    logger.info(f"User {user.id} declined invitation to trip {member.trip_id}")
    return {"success": True}


async def create_invite_link(store: TripDataStore, trip_id: str, data: InviteLinkCreate, user: User) -> TripInviteLink:
    await check_access(store, trip_id, user, TripRole.OWNER, lock=True)
    now = utcnow()
    link = TripInviteLink(
        trip_id=trip_id,
        token=generate_invite_token(),
        role=TripRole(data.role),
        created_by=user.id,
        created_at=now,
        expires_at=now + timedelta(days=data.expires_in_days) if data.expires_in_days else None,
        max_uses=data.max_uses,
        use_count=0,
    )
    await store.insert(link)
    await store.commit()
    logger.info(f"Invite link {link.id} created for trip {trip_id} by user {user.id}")
    return link


async def join_via_link(store: TripDataStore, token: str, user: User, cache: Optional[RedisCache] = None) -> dict:
    link = await store.first(TripInviteLink, TripInviteLink.token == token)
    if not link:
        raise NotFound("Invalid invite link")
    if not await store.lock_trip(link.trip_id):
        raise NotFound("Trip not found")
    link = await store.reload(link)
    if not link:
        raise NotFound("Invalid invite link")

    now = utcnow()
    if link.is_expired(now):
        raise InvalidArgument("This invite link has expired")
    if link.is_exhausted():
        raise InvalidArgument("This invite link has reached its maximum number of uses")

    existing = await store.first(TripMember, TripMember.trip_id == link.trip_id, TripMember.user_id == user.id)
    if existing and existing.status == MemberStatus.ACCEPTED:
        raise InvalidArgument("You are already a member of this trip")

    if existing:
        await store.patch(existing, role=link.role, status=MemberStatus.ACCEPTED, accepted_at=now)
        member = existing
    else:
        member = await store.insert(TripMember(
            trip_id=link.trip_id,
            user_id=user.id,
            invited_email=user.email,
            role=link.role,
            status=MemberStatus.ACCEPTED,
            invited_by=link.created_by,
            invited_at=link.created_at,
            accepted_at=now,
        ))

    await store.patch(link, use_count=link.use_count + 1)
    await log_activity(store, link.trip_id, user.id, ActivityAction.JOINED_TRIP,
                       target_id=member.id, target_type="member", metadata={"method": "invite_link"})
    await store.commit()

    await invalidate_user_trips(cache, [user.id])
    logger.info(f"User {user.id} joined trip {link.trip_id} via invite link {link.id}")
    return {"trip_id": link.trip_id, "role": member.role}


async def get_trip_invite_links(store: TripDataStore, trip_id: str, user: User) -> List[TripInviteLink]:
    await check_access(store, trip_id, user, TripRole.EDITOR)
    return await store.query(
        TripInviteLink,
        TripInviteLink.trip_id == trip_id,
        order_by=[TripInviteLink.created_at.desc()],
    )


async def revoke_invite_link(store: TripDataStore, link_id: str, user: User) -> dict:
    link = await store.get(TripInviteLink, link_id)
    if not link:
        raise NotFound("Invite link not found")
    await check_access(store, link.trip_id, user, TripRole.OWNER, lock=True)
    link = await store.reload(link)
    if not link:
        raise NotFound("Invite link not found")
    await store.delete(link)
    await store.commit()
    logger.info(f"Invite link {link_id} revoked by user {user.id}")
    return {"success": True}


async def update_member_role(store: TripDataStore, member_id: str, new_role: str, user: User) -> dict:
    member = await _get_member(store, member_id)
    await check_access(store, member.trip_id, user, TripRole.OWNER, lock=True)
    member = await _get_member(store, member_id)

    role = TripRole(new_role)
    if member.role == TripRole.OWNER:
        raise InvariantViolation("Cannot change the owner's role")
    if role == TripRole.OWNER:
        raise InvalidArgument("Ownership cannot be granted")

    await store.patch(member, role=role)
    await log_activity(store, member.trip_id, user.id, ActivityAction.CHANGED_ROLE,
                       target_id=member.id, target_type="member", metadata={"new_role": role.value})
    await store.commit()
    logger.info(f"Member {member_id} of trip {member.trip_id} is now {role.value}")
    return {"success": True}


async def remove_member(store: TripDataStore, member_id: str, user: User, cache: Optional[RedisCache] = None) -> dict:
    member = await _get_member(store, member_id)
    if member.role == TripRole.OWNER:
        raise InvariantViolation("Cannot remove the trip owner")

    if member.user_id != user.id:
        await check_access(store, member.trip_id, user, TripRole.OWNER, lock=True)
    else:
        await store.lock_trip(member.trip_id)
    member = await _get_member(store, member_id)

    removed_user_id = member.user_id
    await store.delete(member)
    await log_activity(store, member.trip_id, user.id, ActivityAction.REMOVED_MEMBER,
                       target_id=member_id, target_type="member")
    await store.commit()

    await invalidate_user_trips(cache, [removed_user_id])
    logger.info(f"Member {member_id} removed from trip {member.trip_id} by user {user.id}")
    return {"success": True}


async def leave_trip(store: TripDataStore, trip_id: str, user: User, cache: Optional[RedisCache] = None) -> dict:
    if not await store.lock_trip(trip_id):
        raise NotFound("Trip not found")
    member = await store.first(TripMember, TripMember.trip_id == trip_id, TripMember.user_id == user.id)
    if not member:
        raise NotFound("You are not a member of this trip")
    if member.role == TripRole.OWNER:
        raise InvariantViolation("Trip owners cannot leave. Delete the trip instead.")

    await store.delete(member)
    await log_activity(store, trip_id, user.id, ActivityAction.LEFT_TRIP, target_type="member")
    await store.commit()

    await invalidate_user_trips(cache, [user.id])
    logger.info(f"User {user.id} left trip {trip_id}")
    return {"success": True}


async def get_pending_invites(store: TripDataStore, user: User) -> List[dict]:
    invites = await store.query(
        TripMember,
        TripMember.user_id == user.id,
        TripMember.status == MemberStatus.PENDING,
        order_by=[TripMember.invited_at.desc()],
    )
    trips = await store.by_ids(Trip, [i.trip_id for i in invites])
    inviters = await store.by_ids(User, [i.invited_by for i in invites])
    return [
        {
            "membership_id": invite.id,
            "trip_id": invite.trip_id,
            "trip_name": trips[invite.trip_id].name,
            "role": invite.role,
            "invited_at": invite.invited_at,
            "inviter": inviters[invite.invited_by].to_profile() if invite.invited_by in inviters else None,
        }
        for invite in invites
        if invite.trip_id in trips
    ]


async def get_trip_pending_invites(store: TripDataStore, trip_id: str, user: User) -> List[dict]:
    await check_access(store, trip_id, user, TripRole.EDITOR)
    invites = await store.query(
        TripMember,
        TripMember.trip_id == trip_id,
        TripMember.status == MemberStatus.PENDING,
        order_by=[TripMember.invited_at.desc()],
    )
    return await _with_profiles(store, invites)
