import enum
from typing import Any, Dict, Optional

from tripplanner.core.config import settings
from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import InvalidArgument
from tripplanner.models.trips.trip_activity import TripActivity
from tripplanner.models.user.user import User
from tripplanner.services.trips.access_service import check_access


class ActivityAction(str, enum.Enum):
    """Kinds of activity-log entries.

    Open-ended: rows store the raw string, so new kinds can be written
    without a migration. Values this build doesn't know parse as OTHER.
    """

    CREATED_TRIP = "created_trip"
    UPDATED_TRIP = "updated_trip"
    INVITED_MEMBER = "invited_member"
    JOINED_TRIP = "joined_trip"
    LEFT_TRIP = "left_trip"
    REMOVED_MEMBER = "removed_member"
    CHANGED_ROLE = "changed_role"
    CREATED_PLAN = "created_plan"
    UPDATED_PLAN = "updated_plan"
    DELETED_PLAN = "deleted_plan"
    REORDERED_PLANS = "reordered_plans"
    SET_DEFAULT_PLAN = "set_default_plan"
    ADDED_LOCATION = "added_location"
    UPDATED_LOCATION = "updated_location"
    REMOVED_LOCATION = "removed_location"
    ADDED_DESTINATION = "added_destination"
    UPDATED_DESTINATION = "updated_destination"
    DELETED_DESTINATION = "deleted_destination"
    REORDERED_DESTINATIONS = "reordered_destinations"
    ADDED_ACTIVITY = "added_activity"
    UPDATED_ACTIVITY = "updated_activity"
    DELETED_ACTIVITY = "deleted_activity"
    REORDERED_ACTIVITIES = "reordered_activities"
    MOVED_ACTIVITY = "moved_activity"
    ADDED_COMMENT = "added_comment"
    UPDATED_COMMENT = "updated_comment"
    DELETED_COMMENT = "deleted_comment"
    RESOLVED_COMMENT = "resolved_comment"
    UNRESOLVED_COMMENT = "unresolved_comment"
    AI_ADDED_LOCATIONS = "ai_added_locations"
    AI_CREATED_ITINERARY = "ai_created_itinerary"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value):
        return cls.OTHER


def _quoted(template_with: str, template_without: str, value: Optional[str], name: str) -> str:
    if value:
        return template_with.format(name=name, value=value)
    return template_without.format(name=name)


def describe_activity(action: str, metadata: Optional[Dict[str, Any]], user_name: Optional[str]) -> str:
    name = user_name or "Someone"
    meta = metadata or {}
    kind = ActivityAction(action)

    if kind == ActivityAction.CREATED_TRIP:
        return f"{name} created the trip"
    if kind == ActivityAction.UPDATED_TRIP:
        return f"{name} updated trip details"
    if kind == ActivityAction.INVITED_MEMBER:
        return _quoted("{name} invited {value} to the trip", "{name} invited a member to the trip",
                       meta.get("invited_email"), name)
    if kind == ActivityAction.JOINED_TRIP:
        return f"{name} joined the trip"
    if kind == ActivityAction.LEFT_TRIP:
        return f"{name} left the trip"
    if kind == ActivityAction.REMOVED_MEMBER:
        return f"{name} removed a member"
    if kind == ActivityAction.CHANGED_ROLE:
        return _quoted("{name} changed a member's role to {value}", "{name} changed a member's role",
                       meta.get("new_role"), name)
    if kind in (ActivityAction.CREATED_PLAN, ActivityAction.UPDATED_PLAN, ActivityAction.DELETED_PLAN):
        verb = kind.value.split("_")[0]
        return _quoted("{name} " + verb + ' plan "{value}"', "{name} " + verb + " a plan",
                       meta.get("plan_name"), name)
    if kind == ActivityAction.REORDERED_PLANS:
        return f"{name} reordered the plans"
    if kind == ActivityAction.SET_DEFAULT_PLAN:
        return _quoted('{name} made "{value}" the default plan', "{name} changed the default plan",
                       meta.get("plan_name"), name)
    if kind in (ActivityAction.ADDED_LOCATION, ActivityAction.UPDATED_LOCATION, ActivityAction.REMOVED_LOCATION):
        verb = kind.value.split("_")[0]
        return _quoted("{name} " + verb + ' location "{value}"', "{name} " + verb + " a location",
                       meta.get("location_name"), name)
    if kind in (ActivityAction.ADDED_DESTINATION, ActivityAction.UPDATED_DESTINATION,
                ActivityAction.DELETED_DESTINATION):
        verb = kind.value.split("_")[0]
        return _quoted("{name} " + verb + ' destination "{value}"', "{name} " + verb + " a destination",
                       meta.get("destination_name"), name)
    if kind == ActivityAction.REORDERED_DESTINATIONS:
        return f"{name} reordered the destinations"
    if kind in (ActivityAction.ADDED_ACTIVITY, ActivityAction.UPDATED_ACTIVITY, ActivityAction.DELETED_ACTIVITY,
                ActivityAction.MOVED_ACTIVITY):
        verb = kind.value.split("_")[0]
        return _quoted("{name} " + verb + ' activity "{value}"', "{name} " + verb + " an activity",
                       meta.get("activity_title"), name)
    if kind == ActivityAction.REORDERED_ACTIVITIES:
        return f"{name} reordered activities"
    if kind == ActivityAction.ADDED_COMMENT:
        return f"{name} added a comment"
    if kind == ActivityAction.UPDATED_COMMENT:
        return f"{name} edited a comment"
    if kind == ActivityAction.DELETED_COMMENT:
        return f"{name} deleted a comment"
    if kind == ActivityAction.RESOLVED_COMMENT:
        return f"{name} resolved a comment"
    if kind == ActivityAction.UNRESOLVED_COMMENT:
        return f"{name} reopened a comment"
    if kind == ActivityAction.AI_ADDED_LOCATIONS:
        return f"{name} added {meta.get('count', 'some')} AI-suggested locations"
    if kind == ActivityAction.AI_CREATED_ITINERARY:
        return f"{name} created an AI itinerary with {meta.get('count', 'some')} activities"
    return f"{name} performed an action"


async def log_activity(
    store: TripDataStore,
    trip_id: str,
    user_id: str,
    action: ActivityAction,
    target_id: Optional[str] = None,
    target_type: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> TripActivity:
    """Append one activity row inside the caller's transaction.

    A failed write propagates and takes the enclosing mutation down with it.
    """
    entry = TripActivity(
        trip_id=trip_id,
        user_id=user_id,
        action=getattr(action, "value", action),
        target_id=target_id,
        target_type=target_type,
        metadata_=metadata,
    )
    return await store.insert(entry)


def _serialize(entry: TripActivity, users: Dict[str, User]) -> Dict[str, Any]:
    user = users.get(entry.user_id)
    return {
        "id": entry.id,
        "trip_id": entry.trip_id,
        "user_id": entry.user_id,
        "action": entry.action,
        "kind": ActivityAction(entry.action).value,
        "target_id": entry.target_id,
        "target_type": entry.target_type,
        "metadata": entry.metadata_,
        "created_at": entry.created_at,
        "user": user.to_profile() if user else None,
        "description": describe_activity(entry.action, entry.metadata_, user.name if user else "Unknown User"),
    }


async def _serialize_all(store: TripDataStore, entries):
    users = await store.by_ids(User, [e.user_id for e in entries])
    return [_serialize(e, users) for e in entries]


async def get_activity_feed(store: TripDataStore, trip_id: str, user: User, limit: Optional[int] = None,
                            cursor: int = 0):
    await check_access(store, trip_id, user)
    limit = limit or settings.ACTIVITY_PAGE_SIZE
    if limit < 1 or cursor < 0:
        raise InvalidArgument("limit must be positive and cursor non-negative")

    total = await store.count(TripActivity, TripActivity.trip_id == trip_id)
    entries = await store.query(
        TripActivity,
        TripActivity.trip_id == trip_id,
        order_by=[TripActivity.id.desc()],
        limit=limit,
        offset=cursor,
    )
    has_more = cursor + limit < total
    return {
        "activities": await _serialize_all(store, entries),
        "has_more": has_more,
        "next_cursor": cursor + limit if has_more else None,
        "total": total,
    }


async def get_recent_activity(store: TripDataStore, trip_id: str, user: User, limit: Optional[int] = None):
    await check_access(store, trip_id, user)
    entries = await store.query(
        TripActivity,
        TripActivity.trip_id == trip_id,
        order_by=[TripActivity.id.desc()],
        limit=limit or settings.RECENT_ACTIVITY_LIMIT,
    )
    return await _serialize_all(store, entries)


async def get_activity_count(store: TripDataStore, trip_id: str, user: User) -> int:
    await check_access(store, trip_id, user)
    return await store.count(TripActivity, TripActivity.trip_id == trip_id)


async def get_activities_by_action(store: TripDataStore, trip_id: str, user: User, action: str,
                                   limit: Optional[int] = None):
    await check_access(store, trip_id, user)
    entries = await store.query(
        TripActivity,
        TripActivity.trip_id == trip_id,
        TripActivity.action == action,
        order_by=[TripActivity.id.desc()],
        limit=limit or settings.ACTIVITY_PAGE_SIZE,
    )
    return await _serialize_all(store, entries)
