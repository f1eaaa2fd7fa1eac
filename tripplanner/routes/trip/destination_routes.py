from typing import List

from fastapi import APIRouter, Depends, status

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.common import ReorderRequest, SuccessResponse
from tripplanner.schemas.trip.destination import DestinationCreate, DestinationOut, DestinationUpdate
from tripplanner.services.trips import destination_service

router = APIRouter(tags=["Commute Destinations"])


@router.get("/trips/{trip_id}/destinations", response_model=List[DestinationOut])
async def get_destinations_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await destination_service.get_destinations(store, trip_id, current_user)


@router.post("/trips/{trip_id}/destinations", response_model=DestinationOut, status_code=status.HTTP_201_CREATED)
async def add_destination_route(
    trip_id: str,
    data: DestinationCreate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await destination_service.add_destination(store, trip_id, data, current_user)


@router.put("/trips/{trip_id}/destinations/reorder", response_model=SuccessResponse)
async def reorder_destinations_route(
    trip_id: str,
    data: ReorderRequest,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await destination_service.reorder_destinations(store, trip_id, data.ordered_ids, current_user)


@router.patch("/destinations/{destination_id}", response_model=DestinationOut)
async def update_destination_route(
    destination_id: str,
    data: DestinationUpdate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await destination_service.update_destination(store, destination_id, data, current_user)


@router.delete("/destinations/{destination_id}", response_model=SuccessResponse)
async def delete_destination_route(
    destination_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await destination_service.delete_destination(store, destination_id, current_user)
