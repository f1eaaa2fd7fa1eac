from typing import List

from fastapi import APIRouter, Depends, status

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.common import BulkIdsRequest, CreatedIdsResponse, SuccessResponse
from tripplanner.schemas.trip.location import AISuggestedLocationsCreate, LocationCreate, LocationOut, LocationUpdate
from tripplanner.services.trips import location_service

router = APIRouter(tags=["Locations"])


@router.get("/trips/{trip_id}/locations", response_model=List[LocationOut])
async def get_locations_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await location_service.get_locations(store, trip_id, current_user)


@router.post("/trips/{trip_id}/locations", response_model=LocationOut, status_code=status.HTTP_201_CREATED)
async def add_location_route(
    trip_id: str,
    data: LocationCreate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await location_service.add_location(store, trip_id, data, current_user)


@router.post("/trips/{trip_id}/locations/ai-suggested", response_model=CreatedIdsResponse,
             status_code=status.HTTP_201_CREATED)
async def add_ai_suggested_locations_route(
    trip_id: str,
    data: AISuggestedLocationsCreate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    ids = await location_service.add_ai_suggested_locations(store, trip_id, data.locations, current_user)
    return {"ids": ids}


@router.post("/locations/bulk-delete")
async def remove_multiple_locations_route(
    data: BulkIdsRequest,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await location_service.remove_multiple_locations(store, data.ids, current_user)


@router.patch("/locations/{location_id}", response_model=LocationOut)
async def update_location_route(
    location_id: str,
    data: LocationUpdate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await location_service.update_location(store, location_id, data, current_user)


@router.delete("/locations/{location_id}", response_model=SuccessResponse)
async def remove_location_route(
    location_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await location_service.remove_location(store, location_id, current_user)
