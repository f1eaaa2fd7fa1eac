from typing import List

from tripplanner.core.data_store import TripDataStore
from tripplanner.core.exceptions import NotFound
from tripplanner.core.logger import logger
from tripplanner.models.trips.trip_destination import TripDestination
from tripplanner.models.trips.trip_member import TripRole
from tripplanner.models.user.user import User
from tripplanner.schemas.trip.destination import DestinationCreate, DestinationUpdate
from tripplanner.services.trips.access_service import check_access
from tripplanner.services.trips.activity_service import ActivityAction, log_activity
from tripplanner.utils import ordering
from tripplanner.utils.validators import clean_name, validate_coordinates


async def _scope(store: TripDataStore, trip_id: str) -> List[TripDestination]:
    return ordering.sorted_scope(await store.query(TripDestination, TripDestination.trip_id == trip_id))


async def _get_destination(store: TripDataStore, destination_id: str) -> TripDestination:
    destination = await store.get(TripDestination, destination_id)
    if not destination:
        raise NotFound("Destination not found")
    return destination


async def get_destinations(store: TripDataStore, trip_id: str, user: User) -> List[TripDestination]:
    await check_access(store, trip_id, user)
    return await _scope(store, trip_id)


async def add_destination(store: TripDataStore, trip_id: str, data: DestinationCreate, user: User) -> TripDestination:
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    name = clean_name(data.name, "Destination name")
    validate_coordinates(data.lat, data.lng)

    destination = await store.insert(TripDestination(
        trip_id=trip_id,
        name=name,
        lat=data.lat,
        lng=data.lng,
        place_id=data.place_id,
        address=data.address,
        category=data.category,
        travel_mode=data.travel_mode,
        order=ordering.next_order(await _scope(store, trip_id)),
        created_by=user.id,
    ))
    await log_activity(store, trip_id, user.id, ActivityAction.ADDED_DESTINATION,
                       target_id=destination.id, target_type="destination", metadata={"destination_name": name})
    await store.commit()
    logger.info(f"Destination {destination.id} added to trip {trip_id} at position {destination.order}")
    return destination


async def update_destination(store: TripDataStore, destination_id: str, data: DestinationUpdate,
                             user: User) -> TripDestination:
    destination = await _get_destination(store, destination_id)
    await check_access(store, destination.trip_id, user, TripRole.EDITOR, lock=True)
    destination = await _get_destination(store, destination_id)

    fields = data.model_dump(exclude_unset=True)
    if "name" in fields:
        fields["name"] = clean_name(fields["name"], "Destination name")
    validate_coordinates(fields.get("lat", destination.lat), fields.get("lng", destination.lng))

    await store.patch(destination, **fields)
    await log_activity(store, destination.trip_id, user.id, ActivityAction.UPDATED_DESTINATION,
                       target_id=destination.id, target_type="destination",
                       metadata={"destination_name": destination.name})
    await store.commit()
    return destination


async def delete_destination(store: TripDataStore, destination_id: str, user: User) -> dict:
    destination = await _get_destination(store, destination_id)
    trip_id = destination.trip_id
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    destination = await _get_destination(store, destination_id)

    await store.delete(destination)
    await ordering.close_gaps(store, await _scope(store, trip_id))
    await log_activity(store, trip_id, user.id, ActivityAction.DELETED_DESTINATION,
                       target_id=destination_id, target_type="destination",
                       metadata={"destination_name": destination.name})
    await store.commit()
    logger.info(f"Destination {destination_id} deleted from trip {trip_id}")
    return {"success": True}


async def reorder_destinations(store: TripDataStore, trip_id: str, ordered_ids: List[str], user: User) -> dict:
    await check_access(store, trip_id, user, TripRole.EDITOR, lock=True)
    await ordering.reorder(store, await _scope(store, trip_id), ordered_ids)
    await log_activity(store, trip_id, user.id, ActivityAction.REORDERED_DESTINATIONS, target_type="destination")
    await store.commit()
    return {"success": True}
