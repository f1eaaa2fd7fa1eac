from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.trip.activity import ActivityCount, ActivityFeed, ActivityOut
from tripplanner.services.trips import activity_service

router = APIRouter(prefix="/trips/{trip_id}/activity", tags=["Activity"])


@router.get("", response_model=ActivityFeed)
async def get_activity_feed_route(
    trip_id: str,
    limit: Optional[int] = Query(None, ge=1, le=200),
    cursor: int = Query(0, ge=0),
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await activity_service.get_activity_feed(store, trip_id, current_user, limit, cursor)


@router.get("/recent", response_model=List[ActivityOut])
async def get_recent_activity_route(
    trip_id: str,
    limit: Optional[int] = Query(None, ge=1, le=200),
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await activity_service.get_recent_activity(store, trip_id, current_user, limit)


@router.get("/count", response_model=ActivityCount)
async def get_activity_count_route(
    trip_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return {"count": await activity_service.get_activity_count(store, trip_id, current_user)}


@router.get("/by-action/{action}", response_model=List[ActivityOut])
async def get_activities_by_action_route(
    trip_id: str,
    action: str,
    limit: Optional[int] = Query(None, ge=1, le=200),
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await activity_service.get_activities_by_action(store, trip_id, current_user, action, limit)
