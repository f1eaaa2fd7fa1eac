from typing import Dict, List, Optional

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import InvalidArgument, NotFound
from tripplanner.core.logger import logger
from tripplanner.models.itinerary.schedule_item import TripScheduleItem
from tripplanner.models.trips.trip_comment import TripComment
from tripplanner.models.trips.trip_location import TripLocation
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.models.trips.trip_plan import TripPlan
from tripplanner.models.user.user import User
from tripplanner.schemas.itineraries.schedule_item import (
    AIItineraryDay,
    ScheduleItemCreate,
    ScheduleItemUpdate,
)
from tripplanner.services.trips.access_service import check_access
from tripplanner.services.trips.activity_service import ActivityAction, log_activity
from tripplanner.utils import ordering
from tripplanner.utils.validators import clean_name, validate_day_date, validate_time_range


_ITEM_FIELDS = (
    "id", "trip_id", "plan_id", "day_date", "location_id", "title", "start_time", "end_time", "notes",
    "is_flexible", "order", "revision", "ai_generated", "created_by", "updated_by", "created_at", "updated_at",
)


async def _scope(store: TripDataStore, plan_id: str, day_date: str) -> List[TripScheduleItem]:
    items = await store.query(
        TripScheduleItem,
        TripScheduleItem.plan_id == plan_id,
        TripScheduleItem.day_date == day_date,
    )
    return ordering.sorted_scope(items)


async def _get_item(store: TripDataStore, item_id: str) -> TripScheduleItem:
    item = await store.get(TripScheduleItem, item_id)
    if not item:
        raise NotFound("Schedule item not found")
    return item


async def _get_plan(store: TripDataStore, plan_id: str) -> TripPlan:
    plan = await store.get(TripPlan, plan_id)
    if not plan:
        raise NotFound("Plan not found")
    return plan


async def _check_location(store: TripDataStore, trip_id: str, location_id: Optional[str]) -> None:
    if location_id is None:
        return
    location = await store.get(TripLocation, location_id)
    if not location or location.trip_id != trip_id:
        raise InvalidArgument("Invalid location or location does not belong to this trip")


async def get_schedule_items(store: TripDataStore, plan_id: str, user: User,
                             day_date: Optional[str] = None) -> List[TripScheduleItem]:
    plan = await _get_plan(store, plan_id)
    await check_access(store, plan.trip_id, user)
    criteria = [TripScheduleItem.plan_id == plan_id]
    if day_date:
        criteria.append(TripScheduleItem.day_date == day_date)
    return await store.query(
        TripScheduleItem,
        *criteria,
        order_by=[TripScheduleItem.day_date, TripScheduleItem.order, TripScheduleItem.created_at, TripScheduleItem.id],
    )


async def get_schedule_items_by_date(store: TripDataStore, trip_id: str, day_date: str, user: User) -> List[dict]:
    """One day across every plan, by plan order then item order."""
    await check_access(store, trip_id, user)
    validate_day_date(day_date)
    items = await store.query(
        TripScheduleItem,
        TripScheduleItem.trip_id == trip_id,
        TripScheduleItem.day_date == day_date,
    )
    plans = await store.by_ids(TripPlan, [i.plan_id for i in items])
    locations = await store.by_ids(TripLocation, [i.location_id for i in items])

    def key(item):
        plan = plans.get(item.plan_id)
        return (plan.order if plan else 0, *ordering.sort_key(item))

    result = []
    for item in sorted(items, key=key):
        plan = plans.get(item.plan_id)
        location = locations.get(item.location_id)
        result.append({
            **{c: getattr(item, c) for c in _ITEM_FIELDS},
            "plan": {"id": plan.id, "name": plan.name, "color": plan.color, "order": plan.order} if plan else None,
            "location": {
                "id": location.id, "name": location.name, "lat": location.lat,
                "lng": location.lng, "category": location.category,
            } if location else None,
        })
    return result


async def create_schedule_item(store: TripDataStore, data: ScheduleItemCreate, user: User) -> TripScheduleItem:
    plan = await _get_plan(store, data.plan_id)
    await check_access(store, plan.trip_id, user, TripRole.EDITOR, lock=True)
    plan = await _get_plan(store, data.plan_id)
    validate_day_date(data.day_date)
    validate_time_range(data.start_time, data.end_time)
    await _check_location(store, plan.trip_id, data.location_id)

    item = await store.insert(TripScheduleItem(
        trip_id=plan.trip_id,
        plan_id=plan.id,
        day_date=data.day_date,
        location_id=data.location_id,
        title=clean_name(data.title, "Title"),
        start_time=data.start_time,
        end_time=data.end_time,
        notes=data.notes,
        is_flexible=data.is_flexible,
        order=ordering.next_order(await _scope(store, plan.id, data.day_date)),
        created_by=user.id,
        updated_by=user.id,
    ))
    await log_activity(store, plan.trip_id, user.id, ActivityAction.ADDED_ACTIVITY,
                       target_id=item.id, target_type="schedule_item", metadata={"activity_title": item.title})
    await store.commit()
    logger.info(f"Schedule item {item.id} added to plan {plan.id} on {item.day_date}")
    return item


async def update_schedule_item(store: TripDataStore, item_id: str, data: ScheduleItemUpdate,
                               user: User) -> TripScheduleItem:
    item = await _get_item(store, item_id)
    await check_access(store, item.trip_id, user, TripRole.EDITOR, lock=True)
    item = await _get_item(store, item_id)

    fields = data.model_dump(exclude_unset=True)
    if "title" in fields:
        fields["title"] = clean_name(fields["title"], "Title")
    if "location_id" in fields:
        await _check_location(store, item.trip_id, fields["location_id"])
    validate_time_range(fields.get("start_time", item.start_time), fields.get("end_time", item.end_time))

    old_day = item.day_date
    new_day = fields.get("day_date", old_day)
    if new_day != old_day:
        validate_day_date(new_day)
        # changing day appends to the new day and closes the gap in the old one
        fields["order"] = ordering.next_order(await _scope(store, item.plan_id, new_day))

    await store.patch(item, updated_by=user.id, **fields)
    if new_day != old_day:
        await ordering.close_gaps(store, await _scope(store, item.plan_id, old_day))

    await log_activity(store, item.trip_id, user.id, ActivityAction.UPDATED_ACTIVITY,
                       target_id=item.id, target_type="schedule_item", metadata={"activity_title": item.title})
    await store.commit()
    return item


async def delete_schedule_item(store: TripDataStore, item_id: str, user: User) -> dict:
    item = await _get_item(store, item_id)
    await check_access(store, item.trip_id, user, TripRole.EDITOR, lock=True)
    item = await _get_item(store, item_id)

    await store.delete_where(TripComment, TripComment.schedule_item_id == item_id)
    await store.delete(item)
    await ordering.close_gaps(store, await _scope(store, item.plan_id, item.day_date))
    await log_activity(store, item.trip_id, user.id, ActivityAction.DELETED_ACTIVITY,
                       target_id=item_id, target_type="schedule_item", metadata={"activity_title": item.title})
    await store.commit()
    logger.info(f"Schedule item {item_id} deleted by user {user.id}")
    return {"success": True}


async def reorder_schedule_items(store: TripDataStore, plan_id: str, day_date: str, ordered_ids: List[str],
                                 user: User) -> dict:
    plan = await _get_plan(store, plan_id)
    await check_access(store, plan.trip_id, user, TripRole.EDITOR, lock=True)
    plan = await _get_plan(store, plan_id)
    validate_day_date(day_date)

    await ordering.reorder(store, await _scope(store, plan_id, day_date), ordered_ids)
    await log_activity(store, plan.trip_id, user.id, ActivityAction.REORDERED_ACTIVITIES,
                       target_type="schedule_item", metadata={"plan_id": plan_id, "day_date": day_date})
    await store.commit()
    return {"success": True}


async def move_item_between_plans(store: TripDataStore, item_id: str, target_plan_id: str, user: User,
                                  target_day_date: Optional[str] = None) -> TripScheduleItem:
    item = await _get_item(store, item_id)
    target_plan = await _get_plan(store, target_plan_id)
    if target_plan.trip_id != item.trip_id:
        raise InvalidArgument("Cannot move items between different trips")
    await check_access(store, item.trip_id, user, TripRole.EDITOR, lock=True)
    item = await _get_item(store, item_id)
    target_plan = await _get_plan(store, target_plan_id)

    source_plan_id, source_day = item.plan_id, item.day_date
    target_day = validate_day_date(target_day_date) if target_day_date else source_day
    if (source_plan_id, source_day) == (target_plan_id, target_day):
        return item

    await store.patch(
        item,
        plan_id=target_plan_id,
        day_date=target_day,
        order=ordering.next_order(await _scope(store, target_plan_id, target_day)),
        updated_by=user.id,
    )
    await ordering.close_gaps(store, await _scope(store, source_plan_id, source_day))

    for comment in await store.query(TripComment, TripComment.schedule_item_id == item_id,
                                     TripComment.plan_id.is_not(None)):
        await store.patch(comment, plan_id=target_plan_id)

    await log_activity(store, item.trip_id, user.id, ActivityAction.MOVED_ACTIVITY,
                       target_id=item.id, target_type="schedule_item",
                       metadata={"activity_title": item.title, "from_plan_id": source_plan_id,
                                 "to_plan_id": target_plan_id})
    await store.commit()
    logger.info(f"Schedule item {item_id} moved from plan {source_plan_id} to {target_plan_id}")
    return item


async def insert_ai_itinerary(store: TripDataStore, plan: TripPlan, days: List[AIItineraryDay],
                              user: User) -> List[str]:
    """Batch insert schedule items without committing; the caller owns the transaction."""
    if not days or not any(day.activities for day in days):
        raise InvalidArgument("Itinerary has no activities")

    locations = await store.query(TripLocation, TripLocation.trip_id == plan.trip_id)
    by_name: Dict[str, str] = {loc.name.strip().lower(): loc.id for loc in locations}

    created: List[str] = []
    for day in days:
        validate_day_date(day.day_date)
        next_order = ordering.next_order(await _scope(store, plan.id, day.day_date))
        for activity in day.activities:
            validate_time_range(activity.start_time, activity.end_time)
            location_id = by_name.get((activity.location_name or "").strip().lower())
            item = await store.insert(TripScheduleItem(
                trip_id=plan.trip_id,
                plan_id=plan.id,
                day_date=day.day_date,
                location_id=location_id,
                title=clean_name(activity.title, "Title"),
                start_time=activity.start_time,
                end_time=activity.end_time,
                notes=activity.notes,
                is_flexible=activity.is_flexible,
                order=next_order,
                ai_generated=True,
                created_by=user.id,
                updated_by=user.id,
            ))
            next_order += 1
            created.append(item.id)

    await log_activity(store, plan.trip_id, user.id, ActivityAction.AI_CREATED_ITINERARY,
                       target_id=plan.id, target_type="plan", metadata={"count": len(created)})
    return created


async def create_ai_itinerary(store: TripDataStore, plan_id: str, days: List[AIItineraryDay],
                              user: User) -> List[str]:
    plan = await _get_plan(store, plan_id)
    await check_access(store, plan.trip_id, user, TripRole.EDITOR, lock=True)
    plan = await _get_plan(store, plan_id)
    ids = await insert_ai_itinerary(store, plan, days, user)
    await store.commit()
    logger.info(f"AI itinerary with {len(ids)} activities added to plan {plan_id}")
    return ids


async def delete_schedule_items(store: TripDataStore, item_ids: List[str], user: User,
                                trip_id: Optional[str] = None) -> str:
    """Delete a batch of items from one trip and re-densify every touched scope. No commit."""
    if not item_ids:
        raise InvalidArgument("No schedule items given")
    items = await store.query(TripScheduleItem, TripScheduleItem.id.in_(item_ids))
    if len(items) != len(set(item_ids)):
        raise NotFound("One or more schedule items no longer exist")
    trip_ids = {i.trip_id for i in items}
    if len(trip_ids) != 1 or (trip_id and trip_id not in trip_ids):
        raise InvalidArgument("All schedule items must belong to the same trip")
    trip_id = trip_ids.pop()

    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    items = await store.query(TripScheduleItem, TripScheduleItem.id.in_(item_ids), TripScheduleItem.trip_id == trip_id)
    if len(items) != len(set(item_ids)):
        raise NotFound("One or more schedule items no longer exist")
    scopes = {(i.plan_id, i.day_date) for i in items}
    await store.delete_where(TripComment, TripComment.schedule_item_id.in_(item_ids))
    await store.delete_where(TripScheduleItem, TripScheduleItem.id.in_(item_ids))
    for plan_id, day_date in sorted(scopes):
        await ordering.close_gaps(store, await _scope(store, plan_id, day_date))

    await log_activity(store, trip_id, user.id, ActivityAction.DELETED_ACTIVITY, target_type="schedule_item",
                       metadata={"count": len(item_ids)})
    return trip_id


async def delete_multiple_schedule_items(store: TripDataStore, item_ids: List[str], user: User) -> dict:
    trip_id = await delete_schedule_items(store, item_ids, user)
    await store.commit()
    logger.info(f"{len(item_ids)} schedule items deleted from trip {trip_id} by user {user.id}")
    return {"success": True, "deleted": len(item_ids)}
