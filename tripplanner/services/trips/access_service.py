from dataclasses import dataclass
from typing import Optional

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import AccessDenied, NotFound
from tripplanner.core.logger import logger
from tripplanner.models.trips.trip_member import (
    COMMENT_ROLES,
    EDIT_ROLES,
    MemberStatus,
    TripMember,
    TripRole,
)
from tripplanner.models.trips.trip_model import Trip
from tripplanner.models.user.user import User


@dataclass
class TripAccess:
    trip: Trip
    membership: TripMember
    can_edit: bool

    @property
    def role(self) -> TripRole:
        return self.membership.role


async def check_access(
    store: TripDataStore,
    trip_id: str,
    user: User,
    required_role: Optional[TripRole] = None,
    lock: bool = False,
) -> TripAccess:
    """Resolve the caller's membership on a trip.

    Only accepted memberships count. ``required_role`` is a floor:
    OWNER means exactly the owner, EDITOR means owner or editor,
    COMMENTER means anyone but a viewer. Mutations pass ``lock=True`` so
    the role check, writes and activity entry run against a locked trip row.
    """
    trip = await store.lock_trip(trip_id) if lock else await store.get(Trip, trip_id)
    if not trip:
        raise NotFound("Trip not found")

    membership = await store.first(
        TripMember,
        TripMember.trip_id == trip_id,
        TripMember.user_id == user.id,
        TripMember.status == MemberStatus.ACCEPTED,
    )
    if not membership:
        logger.warning(f"Access denied: user {user.id} is not a member of trip {trip_id}")
        raise AccessDenied("You don't have access to this trip")

    can_edit = membership.role in EDIT_ROLES

    if required_role == TripRole.OWNER and membership.role != TripRole.OWNER:
        logger.warning(f"Owner-only action refused for user {user.id} on trip {trip_id}")
        raise AccessDenied("Only the trip owner can do this")
    if required_role == TripRole.EDITOR and not can_edit:
        logger.warning(f"Edit refused for {membership.role.value} {user.id} on trip {trip_id}")
        raise AccessDenied("You don't have permission to edit this trip")
    if required_role == TripRole.COMMENTER and membership.role not in COMMENT_ROLES:
        logger.warning(f"Comment refused for viewer {user.id} on trip {trip_id}")
        raise AccessDenied("You don't have permission to comment on this trip")

    return TripAccess(trip=trip, membership=membership, can_edit=can_edit)
