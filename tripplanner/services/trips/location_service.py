from typing import List

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import InvalidArgument, InvariantViolation, NotFound
from tripplanner.core.logger import logger
from tripplanner.models.itinerary.schedule_item import TripScheduleItem
from tripplanner.models.trips.trip_location import TripLocation
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.models.user.user import User
from tripplanner.schemas.trip.location import AISuggestedLocation, LocationCreate, LocationUpdate
from tripplanner.services.trips.access_service import check_access
from tripplanner.services.trips.activity_service import ActivityAction, log_activity
from tripplanner.utils.validators import clean_name, validate_coordinates


async def _get_location(store: TripDataStore, location_id: str) -> TripLocation:
    location = await store.get(TripLocation, location_id)
    if not location:
        raise NotFound("Location not found")
    return location


async def _ensure_unscheduled(store: TripDataStore, location_ids: List[str]) -> None:
    used = await store.count(TripScheduleItem, TripScheduleItem.location_id.in_(location_ids))
    if used:
        raise InvariantViolation("Location is used by scheduled activities. Remove those first.")


async def get_locations(store: TripDataStore, trip_id: str, user: User) -> List[TripLocation]:
    await check_access(store, trip_id, user)
    return await store.query(
        TripLocation,
        TripLocation.trip_id == trip_id,
        order_by=[TripLocation.added_at, TripLocation.id],
    )


async def add_location(store: TripDataStore, trip_id: str, data: LocationCreate, user: User) -> TripLocation:
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    validate_coordinates(data.lat, data.lng)

    location = await store.insert(TripLocation(
        trip_id=trip_id,
        catalog_location_id=data.catalog_location_id,
        name=clean_name(data.name, "Location name"),
        lat=data.lat,
        lng=data.lng,
        category=data.category,
        description=data.description,
        notes=data.notes,
        added_by=user.id,
    ))
    await log_activity(store, trip_id, user.id, ActivityAction.ADDED_LOCATION,
                       target_id=location.id, target_type="location", metadata={"location_name": location.name})
    await store.commit()
    logger.info(f"Location {location.id} added to trip {trip_id} by user {user.id}")
    return location


async def update_location(store: TripDataStore, location_id: str, data: LocationUpdate, user: User) -> TripLocation:
    location = await _get_location(store, location_id)
    await check_access(store, location.trip_id, user, TripRole.EDITOR, lock=True)
    location = await _get_location(store, location_id)

    fields = data.model_dump(exclude_unset=True)
    if "name" in fields:
        fields["name"] = clean_name(fields["name"], "Location name")
    validate_coordinates(fields.get("lat", location.lat), fields.get("lng", location.lng))

    await store.patch(location, **fields)
    await log_activity(store, location.trip_id, user.id, ActivityAction.UPDATED_LOCATION,
                       target_id=location.id, target_type="location", metadata={"location_name": location.name})
    await store.commit()
    return location


async def insert_ai_locations(store: TripDataStore, trip_id: str, suggestions: List[AISuggestedLocation],
                              user: User) -> List[str]:
    """Batch insert without committing; the caller owns the transaction."""
    if not suggestions:
        raise InvalidArgument("No locations to add")
    rows = []
    for suggestion in suggestions:
        validate_coordinates(suggestion.lat, suggestion.lng)
        rows.append(TripLocation(
            trip_id=trip_id,
            name=clean_name(suggestion.name, "Location name"),
            lat=suggestion.lat,
            lng=suggestion.lng,
            category=suggestion.category,
            description=suggestion.description,
            added_by=user.id,
            ai_suggested=True,
            ai_reason=suggestion.ai_reason,
            toddler_rating=suggestion.toddler_rating,
            estimated_duration=suggestion.estimated_duration,
            tips=suggestion.tips,
        ))
    await store.insert_all(rows)
    ids = [row.id for row in rows]
    await log_activity(store, trip_id, user.id, ActivityAction.AI_ADDED_LOCATIONS,
                       target_type="location", metadata={"count": len(ids), "location_ids": ids})
    return ids


async def add_ai_suggested_locations(store: TripDataStore, trip_id: str, suggestions: List[AISuggestedLocation],
                                     user: User) -> List[str]:
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    ids = await insert_ai_locations(store, trip_id, suggestions, user)
    await store.commit()
    logger.info(f"{len(ids)} AI suggested locations added to trip {trip_id}")
    return ids


async def remove_location(store: TripDataStore, location_id: str, user: User) -> dict:
    location = await _get_location(store, location_id)
    await check_access(store, location.trip_id, user, TripRole.EDITOR, lock=True)
    location = await _get_location(store, location_id)
    await _ensure_unscheduled(store, [location_id])

    await store.delete(location)
    await log_activity(store, location.trip_id, user.id, ActivityAction.REMOVED_LOCATION,
                       target_id=location_id, target_type="location", metadata={"location_name": location.name})
    await store.commit()
    logger.info(f"Location {location_id} removed by user {user.id}")
    return {"success": True}


async def delete_locations(store: TripDataStore, location_ids: List[str], user: User,
                           trip_id: str = None) -> str:
    """Remove a batch of locations from one trip without committing. Returns the trip id."""
    if not location_ids:
        raise InvalidArgument("No locations given")
    locations = await store.query(TripLocation, TripLocation.id.in_(location_ids))
    if len(locations) != len(set(location_ids)):
        raise NotFound("One or more locations no longer exist")
    trip_ids = {loc.trip_id for loc in locations}
    if len(trip_ids) != 1 or (trip_id and trip_id not in trip_ids):
        raise InvalidArgument("All locations must belong to the same trip")
    trip_id = trip_ids.pop()

    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    still_there = await store.count(TripLocation, TripLocation.id.in_(location_ids), TripLocation.trip_id == trip_id)
    if still_there != len(set(location_ids)):
        raise NotFound("One or more locations no longer exist")
    await _ensure_unscheduled(store, location_ids)
    await store.delete_where(TripLocation, TripLocation.id.in_(location_ids))
    await log_activity(store, trip_id, user.id, ActivityAction.REMOVED_LOCATION, target_type="location",
                       metadata={"count": len(location_ids)})
    return trip_id


async def remove_multiple_locations(store: TripDataStore, location_ids: List[str], user: User) -> dict:
    trip_id = await delete_locations(store, location_ids, user)
    await store.commit()
    logger.info(f"{len(location_ids)} locations removed from trip {trip_id} by user {user.id}")
    return {"success": True, "removed": len(location_ids)}
