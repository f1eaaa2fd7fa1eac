from typing import List

from tripplanner.core.cache import RedisCache
from tripplanner.core.config import settings
from tripplanner.core.data_store import TripDataStore
from tripplanner.core.database import utcnow
from tripplanner.core.exceptions import InvalidArgument
from tripplanner.core.logger import logger
from tripplanner.models.ai.chat_message import TripChatMessage
from tripplanner.models.itinerary.schedule_item import TripScheduleItem
from tripplanner.models.trips.trip_activity import TripActivity
from tripplanner.models.trips.trip_checklist import TripChecklist
from tripplanner.models.trips.trip_comment import TripComment
from tripplanner.models.trips.trip_destination import TripDestination
from tripplanner.models.trips.trip_invite import TripInviteLink
from tripplanner.models.trips.trip_location import TripLocation
from tripplanner.models.trips.trip_member import MemberStatus, TripMember, TripRole
from tripplanner.models.trips.trip_model import Trip
from tripplanner.models.trips.trip_plan import TripPlan
from tripplanner.models.user.user import User
from tripplanner.schemas.trip.trip_schema import TripCreate, TripUpdate
from tripplanner.services.trips.access_service import check_access
from tripplanner.services.trips.activity_service import ActivityAction, log_activity
from tripplanner.services.trips.trip_member_service import invalidate_user_trips, list_members
from tripplanner.utils.validators import clean_name, validate_coordinates, validate_day_date

DEFAULT_PLANS = (
    {"name": "Plan A", "color": "#10B981", "is_default": True},
    {"name": "Plan B", "color": "#3B82F6", "is_default": False},
)


def _validate_dates(start_date: str, end_date: str) -> None:
    validate_day_date(start_date)
    validate_day_date(end_date)
    if end_date < start_date:
        raise InvalidArgument("End date cannot be before start date")


def _home_base_fields(home_base) -> dict:
    if home_base is None:
        return {
            "home_base_name": None,
            "home_base_lat": None,
            "home_base_lng": None,
            "home_base_city": None,
        }
    validate_coordinates(home_base.lat, home_base.lng)
    return {
        "home_base_name": clean_name(home_base.name, "Home base name"),
        "home_base_lat": home_base.lat,
        "home_base_lng": home_base.lng,
        "home_base_city": home_base.city,
    }


class TripService:
    def __init__(self, cache: RedisCache):
        self.cache = cache

    async def _member_user_ids(self, store: TripDataStore, trip_id: str) -> List[str]:
        members = await store.query(TripMember, TripMember.trip_id == trip_id)
        return [m.user_id for m in members if m.user_id]

    async def create_trip(self, store: TripDataStore, trip_data: TripCreate, user: User) -> Trip:
        """Create the trip, its owner membership and the two starting plans in one transaction."""
        _validate_dates(trip_data.start_date, trip_data.end_date)
        now = utcnow()

        new_trip = Trip(
            name=clean_name(trip_data.name, "Trip name"),
            description=trip_data.description,
            start_date=trip_data.start_date,
            end_date=trip_data.end_date,
            cover_image_url=trip_data.cover_image_url,
            destination=trip_data.destination,
            traveler_info=trip_data.traveler_info,
            interests=trip_data.interests,
            timezone=trip_data.timezone,
            owner_id=user.id,
            created_at=now,
            updated_at=now,
            **_home_base_fields(trip_data.home_base),
        )
        await store.insert(new_trip)

        await store.insert(TripMember(
            trip_id=new_trip.id,
            user_id=user.id,
            role=TripRole.OWNER,
            status=MemberStatus.ACCEPTED,
            invited_by=user.id,
            invited_at=now,
            accepted_at=now,
        ))

        for order, plan in enumerate(DEFAULT_PLANS):
            await store.insert(TripPlan(
                trip_id=new_trip.id,
                name=plan["name"],
                color=plan["color"],
                is_default=plan["is_default"],
                order=order,
                created_by=user.id,
                created_at=now,
                updated_at=now,
            ))

        await log_activity(store, new_trip.id, user.id, ActivityAction.CREATED_TRIP,
                           target_id=new_trip.id, target_type="trip", metadata={"trip_name": new_trip.name})
        await store.commit()

        await invalidate_user_trips(self.cache, [user.id])
        logger.info(f"Trip {new_trip.id} created by user {user.id}")
        return new_trip

    async def get_my_trips(self, store: TripDataStore, user: User) -> List[dict]:
        cache_key = self.cache.build_key("trips", "user", user.id)
        cached_trips = await self.cache.get(cache_key)
        if cached_trips is not None:
            logger.info(f"Retrieved {len(cached_trips)} trips for user {user.id} from cache")
            return cached_trips

        memberships = await store.query(
            TripMember,
            TripMember.user_id == user.id,
            TripMember.status == MemberStatus.ACCEPTED,
        )
        roles = {m.trip_id: m.role for m in memberships}
        trips = await store.query(
            Trip,
            Trip.id.in_(roles.keys()),
            order_by=[Trip.updated_at.desc()],
        ) if roles else []

        result = [{**trip.to_dict(), "role": roles[trip.id].value} for trip in trips]
        await self.cache.set(cache_key, result, expire=settings.TRIP_CACHE_SECONDS)

        logger.info(f"Retrieved {len(result)} trips for user {user.id} from database")
        return result

    async def get_trip(self, store: TripDataStore, trip_id: str, user: User) -> dict:
        access = await check_access(store, trip_id, user)
        owner = await store.get(User, access.trip.owner_id)
        return {
            **access.trip.to_dict(),
            "owner": owner.to_profile() if owner else None,
            "role": access.role.value,
        }

    async def get_trip_with_details(self, store: TripDataStore, trip_id: str, user: User) -> dict:
        access = await check_access(store, trip_id, user)
        plans = await store.query(
            TripPlan,
            TripPlan.trip_id == trip_id,
            order_by=[TripPlan.order, TripPlan.created_at, TripPlan.id],
        )
        return {
            "trip": access.trip.to_dict(),
            "role": access.role,
            "can_edit": access.can_edit,
            "plans": plans,
            "members": await list_members(store, trip_id),
        }

    async def update_trip(self, store: TripDataStore, trip_id: str, trip_data: TripUpdate, user: User) -> Trip:
        access = await check_access(store, trip_id, user, TripRole.OWNER, lock=True)
        trip = access.trip

        update_data = trip_data.model_dump(exclude_unset=True)
        if "name" in update_data:
            update_data["name"] = clean_name(update_data["name"], "Trip name")
        if "home_base" in update_data:
            update_data.pop("home_base")
            update_data.update(_home_base_fields(trip_data.home_base))
        _validate_dates(update_data.get("start_date", trip.start_date), update_data.get("end_date", trip.end_date))

        await store.patch(trip, **update_data)
        await log_activity(store, trip_id, user.id, ActivityAction.UPDATED_TRIP,
                           target_id=trip_id, target_type="trip",
                           metadata={"fields": sorted(k for k in trip_data.model_dump(exclude_unset=True))})
        member_ids = await self._member_user_ids(store, trip_id)
        await store.commit()

        await invalidate_user_trips(self.cache, member_ids)
        logger.info(f"Trip {trip_id} updated by user {user.id}")
        return trip

    async def delete_trip(self, store: TripDataStore, trip_id: str, user: User) -> dict:
        """Delete the trip and every child row, children first, in one transaction."""
        access = await check_access(store, trip_id, user, TripRole.OWNER, lock=True)
        member_ids = await self._member_user_ids(store, trip_id)

        # referencing rows go before the rows they reference
        await store.delete_where(TripMember, TripMember.trip_id == trip_id)
        await store.delete_where(TripInviteLink, TripInviteLink.trip_id == trip_id)
        await store.delete_where(TripComment, TripComment.trip_id == trip_id)
        await store.delete_where(TripScheduleItem, TripScheduleItem.trip_id == trip_id)
        await store.delete_where(TripPlan, TripPlan.trip_id == trip_id)
        await store.delete_where(TripLocation, TripLocation.trip_id == trip_id)
        await store.delete_where(TripDestination, TripDestination.trip_id == trip_id)
        await store.delete_where(TripChecklist, TripChecklist.trip_id == trip_id)
        await store.delete_where(TripChatMessage, TripChatMessage.trip_id == trip_id)
        await store.delete_where(TripActivity, TripActivity.trip_id == trip_id)
        await store.delete(access.trip)
        await store.commit()

        await invalidate_user_trips(self.cache, member_ids)
        logger.info(f"Trip {trip_id} deleted by user {user.id}")
        return {"success": True}
