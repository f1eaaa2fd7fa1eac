from typing import List, Optional

from fastapi import APIRouter, Depends, status

from tripplanner.core.data_store import TripDataStore, get_store
from tripplanner.dependencies.auth import get_current_user
from tripplanner.models.user.user import User
from tripplanner.schemas.common import SuccessResponse
from tripplanner.schemas.trip.comment import CommentCounts, CommentCreate, CommentOut, CommentUpdate
from tripplanner.services.trips import comment_service

router = APIRouter(tags=["Comments"])


@router.get("/trips/{trip_id}/comments", response_model=List[CommentOut])
async def get_trip_comments_route(
    trip_id: str,
    include_resolved: bool = False,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await comment_service.get_comments_by_trip(store, trip_id, current_user, include_resolved)


@router.post("/trips/{trip_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment_route(
    trip_id: str,
    data: CommentCreate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await comment_service.add_comment(store, trip_id, data, current_user)


@router.get("/trips/{trip_id}/comments/counts", response_model=CommentCounts)
async def get_comment_counts_route(
    trip_id: str,
    day_date: Optional[str] = None,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    counts = await comment_service.get_comment_counts(store, trip_id, current_user, day_date)
    return {"counts": counts}


@router.get("/plans/{plan_id}/comments", response_model=List[CommentOut])
async def get_plan_comments_route(
    plan_id: str,
    include_resolved: bool = False,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await comment_service.get_comments_by_plan(store, plan_id, current_user, include_resolved)


@router.get("/schedule-items/{item_id}/comments", response_model=List[CommentOut])
async def get_schedule_item_comments_route(
    item_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await comment_service.get_comments_by_schedule_item(store, item_id, current_user)


@router.patch("/comments/{comment_id}", response_model=CommentOut)
async def update_comment_route(
    comment_id: str,
    data: CommentUpdate,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await comment_service.update_comment(store, comment_id, data.content, current_user)


@router.delete("/comments/{comment_id}", response_model=SuccessResponse)
async def delete_comment_route(
    comment_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await comment_service.delete_comment(store, comment_id, current_user)


@router.post("/comments/{comment_id}/resolve", response_model=CommentOut)
async def resolve_comment_route(
    comment_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await comment_service.resolve_comment(store, comment_id, current_user)


@router.post("/comments/{comment_id}/unresolve", response_model=CommentOut)
async def unresolve_comment_route(
    comment_id: str,
    store: TripDataStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    return await comment_service.unresolve_comment(store, comment_id, current_user)
