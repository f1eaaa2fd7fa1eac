from typing import List

from fastapi import APIRouter, Depends, status

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.core.redis_lifecyle import get_cache
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.common import SuccessResponse
from tripplanner.schemas.trip.trip_schema import (
    MyTripResponse,
    TripCreate,
    TripDetailResponse,
    TripResponse,
    TripUpdate,
    TripWithOwner,
)
from tripplanner.services.trips.trip_service import TripService

router = APIRouter(prefix="/trips", tags=["Trips"])


async def get_trip_service(
    cache=Depends(get_cache)
) -> TripService:
    return TripService(cache)


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip_route(
    trip: TripCreate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.create_trip(store, trip, current_user)


@router.get("", response_model=List[MyTripResponse])
async def get_my_trips_route(
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_my_trips(store, current_user)


@router.get("/{trip_id}", response_model=TripWithOwner)
async def get_trip_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_trip(store, trip_id, current_user)


@router.get("/{trip_id}/details", response_model=TripDetailResponse)
async def get_trip_details_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_trip_with_details(store, trip_id, current_user)


@router.patch("/{trip_id}", response_model=TripResponse)
async def update_trip_route(
    trip_id: str,
    trip_update: TripUpdate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.update_trip(store, trip_id, trip_update, current_user)


@router.delete("/{trip_id}", response_model=SuccessResponse)
async def delete_trip_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.delete_trip(store, trip_id, current_user)
